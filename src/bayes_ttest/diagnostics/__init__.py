"""
Convergence diagnostics for restructured (un-pooled) chains.

Surfaced for human judgment; nothing here gates a run.
"""

from bayes_ttest.diagnostics.convergence import (
    ParameterDiagnostics,
    autocorrelation,
    density,
    diagnose,
    diagnose_all,
    effective_sample_size,
    monte_carlo_standard_error,
    shrink_factor,
    shrink_factor_history,
)

__all__ = [
    "ParameterDiagnostics",
    "autocorrelation",
    "density",
    "diagnose",
    "diagnose_all",
    "effective_sample_size",
    "monte_carlo_standard_error",
    "shrink_factor",
    "shrink_factor_history",
]
