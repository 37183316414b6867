"""
Prior specification for the robust two-group model.

    mu_j    ~ Normal(mu_mean_j, mu_sd_j)              # Group locations
    sigma_j ~ Gamma(mode = sigma_mode_j, sd = sigma_sd_j)   # Group scales
    nu      ~ Gamma(mean = nu_mean, sd = nu_sd)       # Shared normality
"""

from typing import TYPE_CHECKING, Dict, Sequence

import numpy as np
from numpy.typing import NDArray

from bayes_ttest.exceptions import PriorSpecificationError
from bayes_ttest.priors.gamma import GammaParams, gamma_from_mean_sd, gamma_from_mode_sd

if TYPE_CHECKING:
    from bayes_ttest.model.data import ObservationSet


def _as_group_vector(name: str, values: Sequence[float]) -> NDArray[np.float64]:
    arr = np.atleast_1d(np.asarray(values, dtype=np.float64))
    if arr.ndim != 1:
        raise PriorSpecificationError(f"{name} must be one value per group. Got shape {arr.shape}")
    return arr


class PriorSpec:
    """Specification of priors for the location, scale and normality parameters."""

    def __init__(
        self,
        # Group locations (normal)
        mu_mean: Sequence[float],
        mu_sd: Sequence[float],
        # Group scales (gamma, mode-based)
        sigma_mode: Sequence[float],
        sigma_sd: Sequence[float],
        # Degrees of freedom (gamma, mean-based)
        nu_mean: float = 30.0,
        nu_sd: float = 30.0,
    ) -> None:
        """
        Initialize prior specification.

        Parameters
        ----------
        mu_mean : Sequence[float]
            Prior mean of each group's location, one per group.
        mu_sd : Sequence[float]
            Prior SD of each group's location. Must be > 0.
        sigma_mode : Sequence[float]
            Prior mode of each group's scale. Must be >= 0.
        sigma_sd : Sequence[float]
            Prior SD of each group's scale. Must be > 0.
        nu_mean : float
            Prior mean of the shared degrees of freedom. Default 30.
        nu_sd : float
            Prior SD of the shared degrees of freedom. Default 30.

        Raises
        ------
        PriorSpecificationError
            If lengths disagree, fewer than two groups are given, or any
            SD is not positive.
        """
        self.mu_mean = _as_group_vector("mu_mean", mu_mean)
        self.mu_sd = _as_group_vector("mu_sd", mu_sd)
        self.sigma_mode = _as_group_vector("sigma_mode", sigma_mode)
        self.sigma_sd = _as_group_vector("sigma_sd", sigma_sd)
        self.nu_mean = float(nu_mean)
        self.nu_sd = float(nu_sd)

        lengths = {len(self.mu_mean), len(self.mu_sd), len(self.sigma_mode), len(self.sigma_sd)}
        if len(lengths) != 1:
            raise PriorSpecificationError(
                f"Per-group prior vectors must have equal length. Got "
                f"mu_mean={len(self.mu_mean)}, mu_sd={len(self.mu_sd)}, "
                f"sigma_mode={len(self.sigma_mode)}, sigma_sd={len(self.sigma_sd)}"
            )
        self.n_groups = lengths.pop()
        if self.n_groups < 2:
            raise PriorSpecificationError(f"Need at least 2 groups. Got {self.n_groups}")

        if not np.all(np.isfinite(self.mu_mean)):
            raise PriorSpecificationError(f"mu_mean must be finite. Got {self.mu_mean}")
        if np.any(~np.isfinite(self.mu_sd) | (self.mu_sd <= 0)):
            raise PriorSpecificationError(f"mu_sd must be positive. Got {self.mu_sd}")

        # Gamma conversions validate the scale and nu priors up front
        self.sigma_gamma = [
            gamma_from_mode_sd(mode, sd) for mode, sd in zip(self.sigma_mode, self.sigma_sd)
        ]
        self.nu_gamma = gamma_from_mean_sd(self.nu_mean, self.nu_sd)

    @classmethod
    def from_data(
        cls,
        observations: "ObservationSet",
        mu_sd_factor: float = 100.0,
        sigma_sd_factor: float = 5.0,
        nu_mean: float = 30.0,
        nu_sd: float = 30.0,
    ) -> "PriorSpec":
        """
        Broad priors scaled to the pooled data.

        Locations are centred on the pooled mean with SD mu_sd_factor times
        the pooled SD; scales have their mode at the pooled SD with SD
        sigma_sd_factor times the pooled SD.

        Parameters
        ----------
        observations : ObservationSet
            Observed data with group labels.
        mu_sd_factor : float
            Multiplier on pooled SD for location prior SD. Default 100.
        sigma_sd_factor : float
            Multiplier on pooled SD for scale prior SD. Default 5.
        nu_mean, nu_sd : float
            Degrees-of-freedom prior. Default mean 30, SD 30.

        Returns
        -------
        PriorSpec
        """
        y = observations.y
        pooled_mean = float(np.mean(y))
        pooled_sd = float(np.std(y, ddof=1)) if len(y) > 1 else 0.0
        if pooled_sd <= 0:
            raise PriorSpecificationError(
                "Cannot derive data-scaled priors: pooled SD of observations is zero"
            )

        k = observations.n_groups
        return cls(
            mu_mean=[pooled_mean] * k,
            mu_sd=[pooled_sd * mu_sd_factor] * k,
            sigma_mode=[pooled_sd] * k,
            sigma_sd=[pooled_sd * sigma_sd_factor] * k,
            nu_mean=nu_mean,
            nu_sd=nu_sd,
        )

    def to_hyperparameters(self) -> Dict[str, object]:
        """
        Named hyperparameter values consumed by the model.

        Returns
        -------
        hyper : Dict[str, object]
            muM, muSD (per group), sigmaSh, sigmaRa (per group),
            nuSh, nuRa (scalars).
        """
        return {
            "muM": self.mu_mean.copy(),
            "muSD": self.mu_sd.copy(),
            "sigmaSh": np.array([g.shape for g in self.sigma_gamma]),
            "sigmaRa": np.array([g.rate for g in self.sigma_gamma]),
            "nuSh": self.nu_gamma.shape,
            "nuRa": self.nu_gamma.rate,
        }

    def sigma_prior(self, group: int) -> GammaParams:
        """Gamma prior of a group's scale (1-based group index)."""
        if not (1 <= group <= self.n_groups):
            raise ValueError(f"group must be in [1, {self.n_groups}]. Got {group}")
        return self.sigma_gamma[group - 1]

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PriorSpec(n_groups={self.n_groups}, mu_mean={self.mu_mean.tolist()}, "
            f"mu_sd={self.mu_sd.tolist()}, sigma_mode={self.sigma_mode.tolist()}, "
            f"sigma_sd={self.sigma_sd.tolist()}, nu_mean={self.nu_mean}, nu_sd={self.nu_sd})"
        )
