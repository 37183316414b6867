"""Matplotlib figures for posterior summaries and convergence diagnostics."""

from bayes_ttest.plotting.figures import (
    plot_diagnostics,
    plot_posterior,
    plot_posterior_predictive,
    plot_two_group_results,
    save_figure,
)

__all__ = [
    "plot_diagnostics",
    "plot_posterior",
    "plot_posterior_predictive",
    "plot_two_group_results",
    "save_figure",
]
