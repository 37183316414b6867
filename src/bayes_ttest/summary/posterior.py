"""
Point and interval summaries of a pooled posterior sample.

The highest-density interval (HDI) is found on the sorted draws: among all
windows of k = ceil(cred_mass * N) consecutive order statistics, the
narrowest one wins, ties going to the lowest lower bound.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike
from scipy.stats import gaussian_kde


def hdi(samples: ArrayLike, cred_mass: float = 0.95) -> Tuple[float, float]:
    """
    Highest-density interval of a sample.

    Parameters
    ----------
    samples : ArrayLike
        Pooled posterior draws.
    cred_mass : float
        Probability mass inside the interval, in (0, 1]. Default 0.95.

    Returns
    -------
    (low, high) : Tuple[float, float]
        Bounds of the narrowest window holding ceil(cred_mass * N) draws.
    """
    if not (0 < cred_mass <= 1):
        raise ValueError(f"cred_mass must be in (0, 1]. Got {cred_mass}")

    sorted_samples = np.sort(np.ravel(np.asarray(samples, dtype=np.float64)))
    n = len(sorted_samples)
    if n == 0:
        raise ValueError("Cannot compute an HDI of an empty sample")

    k = min(n, max(1, math.ceil(cred_mass * n)))
    widths = sorted_samples[k - 1:] - sorted_samples[:n - k + 1]
    # argmin returns the first minimum, i.e. the lowest lower bound
    i = int(np.argmin(widths))
    return float(sorted_samples[i]), float(sorted_samples[i + k - 1])


def posterior_mode(samples: ArrayLike) -> float:
    """Mode of a sample: argmax of its kernel density estimate."""
    samples = np.ravel(np.asarray(samples, dtype=np.float64))
    if len(samples) == 0:
        raise ValueError("Cannot compute the mode of an empty sample")
    if len(samples) < 2 or np.ptp(samples) == 0:
        return float(samples[0])

    kde = gaussian_kde(samples)
    grid = np.linspace(samples.min(), samples.max(), 512)
    return float(grid[np.argmax(kde(grid))])


@dataclass(frozen=True)
class SummaryRecord:
    """Posterior summary of one scalar quantity."""

    mean: float
    median: float
    mode: float
    hdi_low: float
    hdi_high: float
    cred_mass: float
    n_draws: int
    comp_val: Optional[float] = None
    pct_gt_comp_val: Optional[float] = None
    rope_low: Optional[float] = None
    rope_high: Optional[float] = None
    pct_lt_rope: Optional[float] = None
    pct_in_rope: Optional[float] = None
    pct_gt_rope: Optional[float] = None

    @property
    def hdi(self) -> Tuple[float, float]:
        return self.hdi_low, self.hdi_high


def summarize_posterior(
    samples: ArrayLike,
    cred_mass: float = 0.95,
    comp_val: Optional[float] = None,
    rope: Optional[Tuple[float, float]] = None,
) -> SummaryRecord:
    """
    Summary record of one pooled posterior series.

    Parameters
    ----------
    samples : ArrayLike
        Pooled draws.
    cred_mass : float
        HDI mass. Default 0.95.
    comp_val : float, optional
        Comparison value; adds the percentage of draws above it.
    rope : Tuple[float, float], optional
        Region of practical equivalence (low, high); adds the percentages
        of draws below, inside and above it.

    Returns
    -------
    record : SummaryRecord
    """
    samples = np.ravel(np.asarray(samples, dtype=np.float64))
    low, high = hdi(samples, cred_mass)

    extras = {}
    if comp_val is not None:
        extras["comp_val"] = float(comp_val)
        extras["pct_gt_comp_val"] = float(100 * np.mean(samples > comp_val))
    if rope is not None:
        rope_low, rope_high = (float(v) for v in rope)
        if rope_low > rope_high:
            raise ValueError(f"rope must be (low, high) with low <= high. Got {rope}")
        extras.update(
            rope_low=rope_low,
            rope_high=rope_high,
            pct_lt_rope=float(100 * np.mean(samples < rope_low)),
            pct_in_rope=float(100 * np.mean((samples >= rope_low) & (samples <= rope_high))),
            pct_gt_rope=float(100 * np.mean(samples > rope_high)),
        )

    return SummaryRecord(
        mean=float(np.mean(samples)),
        median=float(np.median(samples)),
        mode=posterior_mode(samples),
        hdi_low=low,
        hdi_high=high,
        cred_mass=float(cred_mass),
        n_draws=len(samples),
        **extras,
    )
