"""
Posterior summaries: HDI, two-group comparison, posterior predictive checks.

- hdi / summarize_posterior / SummaryRecord: per-quantity summaries
- derived_quantities / summarize_two_groups / summary_frame: group comparison
- posterior_predictive_*: replicated data and predictive p-values
"""

from bayes_ttest.summary.posterior import (
    SummaryRecord,
    hdi,
    posterior_mode,
    summarize_posterior,
)
from bayes_ttest.summary.predictive import (
    posterior_predictive_densities,
    posterior_predictive_draws,
    posterior_predictive_pvalues,
)
from bayes_ttest.summary.two_group import (
    EFFECT_SIZE,
    LOG_NU,
    MEAN_DIFF,
    SCALE_DIFF,
    derived_quantities,
    summarize_two_groups,
    summary_frame,
)

__all__ = [
    "SummaryRecord",
    "hdi",
    "posterior_mode",
    "summarize_posterior",
    "derived_quantities",
    "summarize_two_groups",
    "summary_frame",
    "EFFECT_SIZE",
    "LOG_NU",
    "MEAN_DIFF",
    "SCALE_DIFF",
    "posterior_predictive_draws",
    "posterior_predictive_pvalues",
    "posterior_predictive_densities",
]
