"""
Gamma distribution shape/rate from interpretable moments.

Priors on scale and degrees-of-freedom parameters are stated as a central
value and a spread, then moment-matched to a gamma distribution:

Mean-based:
    shape = mean² / sd²
    rate  = mean / sd²

Mode-based (solving mode = (shape - 1)/rate with sd² = shape/rate²):
    rate  = (mode + sqrt(mode² + 4 sd²)) / (2 sd²)
    shape = 1 + mode · rate
"""

import math
from typing import NamedTuple

from bayes_ttest.exceptions import PriorSpecificationError


class GammaParams(NamedTuple):
    """Shape/rate parameterisation of a gamma distribution."""

    shape: float
    rate: float

    @property
    def mean(self) -> float:
        return self.shape / self.rate

    @property
    def mode(self) -> float:
        """Mode of the distribution (0 when shape < 1)."""
        return max(0.0, (self.shape - 1.0) / self.rate)

    @property
    def variance(self) -> float:
        return self.shape / self.rate**2

    @property
    def sd(self) -> float:
        return math.sqrt(self.variance)


def _check_sd(sd: float) -> float:
    sd = float(sd)
    if not math.isfinite(sd) or sd <= 0:
        raise PriorSpecificationError(f"sd must be positive and finite. Got {sd}")
    return sd


def gamma_from_mean_sd(mean: float, sd: float) -> GammaParams:
    """
    Gamma shape/rate with the given mean and standard deviation.

    Parameters
    ----------
    mean : float
        Target mean, must be > 0.
    sd : float
        Target standard deviation, must be > 0.

    Returns
    -------
    GammaParams
        (shape, rate) with shape/rate = mean and shape/rate² = sd².

    Raises
    ------
    PriorSpecificationError
        If sd <= 0 or mean <= 0.
    """
    sd = _check_sd(sd)
    mean = float(mean)
    if not math.isfinite(mean) or mean <= 0:
        raise PriorSpecificationError(f"mean must be positive and finite. Got {mean}")

    shape = mean**2 / sd**2
    rate = mean / sd**2
    return GammaParams(shape, rate)


def gamma_from_mode_sd(mode: float, sd: float) -> GammaParams:
    """
    Gamma shape/rate with the given mode and standard deviation.

    Parameters
    ----------
    mode : float
        Target mode, must be >= 0. A mode of 0 yields shape 1 (exponential).
    sd : float
        Target standard deviation, must be > 0.

    Returns
    -------
    GammaParams
        (shape, rate) with (shape - 1)/rate = mode and shape/rate² = sd².

    Raises
    ------
    PriorSpecificationError
        If sd <= 0 or mode < 0.
    """
    sd = _check_sd(sd)
    mode = float(mode)
    if not math.isfinite(mode) or mode < 0:
        raise PriorSpecificationError(f"mode must be non-negative and finite. Got {mode}")

    rate = (mode + math.sqrt(mode**2 + 4 * sd**2)) / (2 * sd**2)
    shape = 1 + mode * rate
    return GammaParams(shape, rate)


def gamma_shape_rate(center: float, sd: float, mode: bool = False) -> GammaParams:
    """Dispatch to the mode- or mean-based conversion."""
    if mode:
        return gamma_from_mode_sd(center, sd)
    return gamma_from_mean_sd(center, sd)
