"""
Priors: gamma shape/rate conversion and the prior specification.

- gamma_from_mean_sd / gamma_from_mode_sd: moment-matched gamma parameters
- PriorSpec: per-group location/scale priors and the shared nu prior
"""

from bayes_ttest.priors.gamma import (
    GammaParams,
    gamma_from_mean_sd,
    gamma_from_mode_sd,
    gamma_shape_rate,
)
from bayes_ttest.priors.spec import PriorSpec

__all__ = [
    "GammaParams",
    "gamma_from_mean_sd",
    "gamma_from_mode_sd",
    "gamma_shape_rate",
    "PriorSpec",
]
