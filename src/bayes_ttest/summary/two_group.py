"""
Two-group comparison quantities and their summaries.

From the pooled draws of mu[1], mu[2], sigma[1], sigma[2] and nu:

    mu[2]-mu[1]        difference of means
    sigma[2]-sigma[1]  difference of scales
    effect_size        (mu[2] - mu[1]) / sqrt((sigma[1]² + sigma[2]²) / 2)
    log10(nu)          normality on a log scale (nu is right-skewed)
"""

from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from bayes_ttest.summary.posterior import SummaryRecord, summarize_posterior

PARAMETERS = ("mu[1]", "mu[2]", "sigma[1]", "sigma[2]", "nu")

MEAN_DIFF = "mu[2]-mu[1]"
SCALE_DIFF = "sigma[2]-sigma[1]"
EFFECT_SIZE = "effect_size"
LOG_NU = "log10(nu)"


def derived_quantities(pooled: Mapping[str, NDArray[np.float64]]) -> Dict[str, NDArray[np.float64]]:
    """
    Parameters and derived comparison quantities, draw by draw.

    Parameters
    ----------
    pooled : Mapping[str, NDArray[np.float64]]
        Pooled series containing at least PARAMETERS.

    Returns
    -------
    quantities : Dict[str, NDArray[np.float64]]
        Ordered: the five parameters, log10(nu), difference of means,
        difference of scales, effect size.

    Raises
    ------
    KeyError
        If a required parameter is missing.
    """
    missing = [name for name in PARAMETERS if name not in pooled]
    if missing:
        raise KeyError(f"Pooled chain is missing parameters: {missing}")

    mu1, mu2 = (np.asarray(pooled[n], dtype=np.float64) for n in ("mu[1]", "mu[2]"))
    sigma1, sigma2 = (np.asarray(pooled[n], dtype=np.float64) for n in ("sigma[1]", "sigma[2]"))
    nu = np.asarray(pooled["nu"], dtype=np.float64)

    pooled_sd = np.sqrt((sigma1**2 + sigma2**2) / 2)

    quantities = {name: np.asarray(pooled[name], dtype=np.float64) for name in PARAMETERS}
    quantities[LOG_NU] = np.log10(nu)
    quantities[MEAN_DIFF] = mu2 - mu1
    quantities[SCALE_DIFF] = sigma2 - sigma1
    quantities[EFFECT_SIZE] = (mu2 - mu1) / pooled_sd
    return quantities


def summarize_two_groups(
    pooled: Mapping[str, NDArray[np.float64]],
    cred_mass: float = 0.95,
    comp_values: Optional[Mapping[str, float]] = None,
    ropes: Optional[Mapping[str, Tuple[float, float]]] = None,
) -> Dict[str, SummaryRecord]:
    """
    Summary record for every parameter and derived quantity.

    Parameters
    ----------
    pooled : Mapping[str, NDArray[np.float64]]
        Pooled chain (chains already concatenated).
    cred_mass : float
        HDI mass. Default 0.95.
    comp_values : Mapping[str, float], optional
        Comparison value per quantity name.
    ropes : Mapping[str, Tuple[float, float]], optional
        ROPE per quantity name.

    Returns
    -------
    summaries : Dict[str, SummaryRecord]
        Keyed as in derived_quantities().
    """
    comp_values = comp_values or {}
    ropes = ropes or {}
    quantities = derived_quantities(pooled)

    unknown = (set(comp_values) | set(ropes)) - set(quantities)
    if unknown:
        raise KeyError(f"Unknown quantities: {sorted(unknown)}")

    return {
        name: summarize_posterior(
            draws,
            cred_mass=cred_mass,
            comp_val=comp_values.get(name),
            rope=ropes.get(name),
        )
        for name, draws in quantities.items()
    }


def summary_frame(summaries: Mapping[str, SummaryRecord]) -> pd.DataFrame:
    """Summary records as a table, one row per quantity."""
    columns = [
        "mean", "median", "mode", "hdi_low", "hdi_high", "cred_mass", "n_draws",
        "comp_val", "pct_gt_comp_val",
        "rope_low", "rope_high", "pct_lt_rope", "pct_in_rope", "pct_gt_rope",
    ]
    rows = {name: {col: getattr(record, col) for col in columns} for name, record in summaries.items()}
    frame = pd.DataFrame.from_dict(rows, orient="index", columns=columns)
    # Drop comparison/ROPE columns nobody asked for
    return frame.dropna(axis=1, how="all")
