"""
Figures for the two-group t-test.

- Posterior histograms annotated with mean and HDI
- Data histograms overlaid with posterior predictive Student-t curves
- Per-parameter convergence panels (trace, ACF, shrink factor, density)
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
from numpy.typing import NDArray

from bayes_ttest.diagnostics.convergence import ParameterDiagnostics
from bayes_ttest.model.data import ObservationSet
from bayes_ttest.summary.posterior import SummaryRecord
from bayes_ttest.summary.predictive import posterior_predictive_densities
from bayes_ttest.summary.two_group import derived_quantities

logger = logging.getLogger(__name__)

HIST_COLOR = "skyblue"
CURVE_COLOR = "steelblue"
HDI_COLOR = "black"
COMP_COLOR = "darkgreen"
ROPE_COLOR = "darkred"


def plot_posterior(
    samples: NDArray[np.float64],
    record: SummaryRecord,
    ax: Optional[plt.Axes] = None,
    label: Optional[str] = None,
    bins: int = 30,
) -> plt.Axes:
    """
    Histogram of a posterior sample with mean and HDI.

    Comparison value and ROPE are drawn when the record carries them.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(5, 3.5))

    samples = np.ravel(samples)
    ax.hist(samples, bins=bins, density=True, color=HIST_COLOR, edgecolor="white")
    ax.set_yticks([])
    for side in ("left", "right", "top"):
        ax.spines[side].set_visible(False)

    top = ax.get_ylim()[1]
    ax.text(record.mean, 0.9 * top, f"mean = {record.mean:.3g}", ha="center")

    ax.plot([record.hdi_low, record.hdi_high], [0, 0], color=HDI_COLOR, lw=4, solid_capstyle="butt")
    ax.text(
        (record.hdi_low + record.hdi_high) / 2,
        0.08 * top,
        f"{100 * record.cred_mass:.0f}% HDI",
        ha="center",
    )
    ax.text(record.hdi_low, 0.02 * top, f"{record.hdi_low:.3g}", ha="right", va="bottom", fontsize=8)
    ax.text(record.hdi_high, 0.02 * top, f"{record.hdi_high:.3g}", ha="left", va="bottom", fontsize=8)

    if record.comp_val is not None:
        ax.axvline(record.comp_val, color=COMP_COLOR, ls="--")
        ax.text(
            record.comp_val,
            0.7 * top,
            f"{100 - record.pct_gt_comp_val:.1f}% < {record.comp_val:.3g} < {record.pct_gt_comp_val:.1f}%",
            ha="center",
            color=COMP_COLOR,
            fontsize=8,
        )
    if record.rope_low is not None:
        ax.axvline(record.rope_low, color=ROPE_COLOR, ls=":")
        ax.axvline(record.rope_high, color=ROPE_COLOR, ls=":")
        ax.text(
            (record.rope_low + record.rope_high) / 2,
            0.55 * top,
            f"{record.pct_in_rope:.1f}% in ROPE",
            ha="center",
            color=ROPE_COLOR,
            fontsize=8,
        )

    if label is not None:
        ax.set_xlabel(label)
    return ax


def plot_posterior_predictive(
    observed: NDArray[np.float64],
    pooled: Mapping[str, NDArray[np.float64]],
    group: int,
    ax: Optional[plt.Axes] = None,
    n_curves: int = 20,
    bins: int = 20,
) -> plt.Axes:
    """Histogram of one group's data with posterior predictive t densities."""
    if ax is None:
        _, ax = plt.subplots(figsize=(5, 3.5))

    observed = np.asarray(observed, dtype=np.float64)
    span = np.ptp(observed) or 1.0
    grid = np.linspace(observed.min() - 0.5 * span, observed.max() + 0.5 * span, 200)

    curves = posterior_predictive_densities(pooled, group, grid, n_curves=n_curves)
    for curve in curves:
        ax.plot(grid, curve, color=CURVE_COLOR, alpha=0.3, lw=1)
    ax.hist(observed, bins=bins, density=True, color="red", alpha=0.4, edgecolor="white", label="Data")

    ax.set_title(f"Data group {group} w. post. pred.")
    ax.set_xlabel("y")
    ax.set_ylabel("p(y)")
    ax.legend(loc="upper right", fontsize=8)
    return ax


def plot_two_group_results(
    observations: ObservationSet,
    pooled: Mapping[str, NDArray[np.float64]],
    summaries: Mapping[str, SummaryRecord],
) -> plt.Figure:
    """
    Full results figure: predictive checks for both groups and a
    posterior histogram for every summarized quantity.
    """
    quantities = derived_quantities(pooled)
    names = [name for name in quantities if name in summaries]

    n_cols = 3
    n_rows = 1 + int(np.ceil(len(names) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(4 * n_cols, 3 * n_rows))
    axes = np.atleast_2d(axes)

    for j in (1, 2):
        plot_posterior_predictive(observations.group(j), pooled, j, ax=axes[0, j - 1])
    axes[0, 2].axis("off")

    flat = axes[1:].ravel()
    for ax, name in zip(flat, names):
        plot_posterior(quantities[name], summaries[name], ax=ax, label=name)
    for ax in flat[len(names):]:
        ax.axis("off")

    fig.tight_layout()
    return fig


def plot_diagnostics(diagnostics: ParameterDiagnostics) -> plt.Figure:
    """Trace, autocorrelation, shrink factor and density panels of one parameter."""
    fig, axes = plt.subplots(2, 2, figsize=(10, 7))
    (ax_trace, ax_acf), (ax_shrink, ax_density) = axes
    n_chains = diagnostics.traces.shape[1]

    for c in range(n_chains):
        ax_trace.plot(diagnostics.traces[:, c], lw=0.5, label=f"chain {c + 1}")
    ax_trace.set_xlabel("Iterations")
    ax_trace.set_ylabel("Param. Value")

    lags = np.arange(diagnostics.autocorrelation.shape[0])
    for c in range(n_chains):
        ax_acf.plot(lags, diagnostics.autocorrelation[:, c], marker="o", ms=3)
    ax_acf.axhline(0, color="grey", lw=0.5)
    ax_acf.set_xlabel("Lag")
    ax_acf.set_ylabel("Autocorrelation")
    if diagnostics.ess is not None:
        ax_acf.set_title(f"ESS = {diagnostics.ess:.1f}")

    if diagnostics.shrink_history is not None:
        iterations, values = diagnostics.shrink_history
        ax_shrink.plot(iterations, values)
        ax_shrink.axhline(1.0, color="grey", ls="--", lw=0.5)
        ax_shrink.set_xlabel("Last iteration in chain")
        ax_shrink.set_ylabel("Shrink factor")
    else:
        ax_shrink.text(0.5, 0.5, "Shrink factor needs 2+ chains", ha="center", transform=ax_shrink.transAxes)
        ax_shrink.axis("off")

    if diagnostics.density is not None:
        ax_density.plot(diagnostics.density_grid, diagnostics.density)
        ax_density.set_xlabel("Param. Value")
        ax_density.set_ylabel("Density")
    if diagnostics.mcse is not None:
        ax_density.set_title(f"MCSE = {diagnostics.mcse:.3g}")

    fig.suptitle(diagnostics.name)
    fig.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    output_dir: Union[str, Path],
    filename: str,
    dpi: int = 150,
) -> Path:
    """Save a figure as PNG and PDF, then close it."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    save_path_png = output_dir / f"{filename}.png"
    save_path_pdf = output_dir / f"{filename}.pdf"

    fig.savefig(save_path_png, dpi=dpi, bbox_inches="tight")
    fig.savefig(save_path_pdf, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved figure %s", save_path_png)
    return save_path_png
