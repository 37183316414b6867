"""
Posterior predictive checks for one group.

Replicated data sets are drawn from StudentT(nu, mu[j], sigma[j]) at
posterior draws and compared with the observed group.
"""

from typing import Dict, Mapping, Optional

import numpy as np
from numpy.typing import NDArray
from scipy import stats


def _posterior_rows(pooled: Mapping[str, NDArray[np.float64]], group: int) -> NDArray[np.float64]:
    names = (f"mu[{group}]", f"sigma[{group}]", "nu")
    missing = [n for n in names if n not in pooled]
    if missing:
        raise KeyError(f"Pooled chain is missing parameters: {missing}")
    return np.column_stack([np.asarray(pooled[n], dtype=np.float64) for n in names])


def posterior_predictive_draws(
    pooled: Mapping[str, NDArray[np.float64]],
    group: int,
    n_obs: int,
    n_draws: int = 500,
    random_seed: Optional[int] = None,
) -> NDArray[np.float64]:
    """
    Replicated observations of one group.

    Parameters
    ----------
    pooled : Mapping[str, NDArray[np.float64]]
        Pooled chain with mu[group], sigma[group] and nu.
    group : int
        Group label (1-based).
    n_obs : int
        Observations per replicated data set.
    n_draws : int
        Number of posterior draws used (with replacement if more than
        available). Default 500.
    random_seed : int, optional
        Random seed.

    Returns
    -------
    replicates : NDArray[np.float64]
        Shape (n_draws, n_obs).
    """
    if n_obs < 1 or n_draws < 1:
        raise ValueError(f"n_obs and n_draws must be >= 1. Got {n_obs}, {n_draws}")

    rng = np.random.default_rng(random_seed)
    rows = _posterior_rows(pooled, group)
    picks = rng.choice(len(rows), size=n_draws, replace=n_draws > len(rows))
    mu, sigma, nu = rows[picks].T

    return stats.t.rvs(
        df=nu[:, np.newaxis],
        loc=mu[:, np.newaxis],
        scale=sigma[:, np.newaxis],
        size=(n_draws, n_obs),
        random_state=rng,
    )


def posterior_predictive_pvalues(
    pooled: Mapping[str, NDArray[np.float64]],
    observed: NDArray[np.float64],
    group: int,
    n_draws: int = 500,
    random_seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Posterior predictive p-values of one group.

    Parameters
    ----------
    pooled : Mapping[str, NDArray[np.float64]]
        Pooled chain.
    observed : NDArray[np.float64]
        Observations of the group.
    group : int
        Group label (1-based).
    n_draws : int
        Replicated data sets. Default 500.
    random_seed : int, optional
        Random seed.

    Returns
    -------
    ppc_stats : Dict[str, float]
        - mean_pvalue: P(replicated mean >= observed mean)
        - std_pvalue: P(replicated std >= observed std)
        - max_pvalue: P(replicated max |y| >= observed max |y|)
    """
    observed = np.asarray(observed, dtype=np.float64)
    pp = posterior_predictive_draws(pooled, group, len(observed), n_draws, random_seed)

    obs_mean = np.mean(observed)
    mean_pvalue = float(np.mean(np.mean(pp, axis=1) >= obs_mean))

    obs_std = np.std(observed)
    std_pvalue = float(np.mean(np.std(pp, axis=1) >= obs_std))

    obs_max = np.max(np.abs(observed))
    max_pvalue = float(np.mean(np.max(np.abs(pp), axis=1) >= obs_max))

    return {
        "mean_pvalue": mean_pvalue,
        "std_pvalue": std_pvalue,
        "max_pvalue": max_pvalue,
    }


def posterior_predictive_densities(
    pooled: Mapping[str, NDArray[np.float64]],
    group: int,
    grid: NDArray[np.float64],
    n_curves: int = 20,
    random_seed: Optional[int] = None,
) -> NDArray[np.float64]:
    """
    Student-t densities on grid at evenly spaced posterior draws.

    Returns
    -------
    curves : NDArray[np.float64]
        Shape (n_curves, len(grid)).
    """
    rows = _posterior_rows(pooled, group)
    n_curves = min(n_curves, len(rows))
    if n_curves < 1:
        raise ValueError("Need at least one posterior draw")

    if random_seed is None:
        picks = np.linspace(0, len(rows) - 1, n_curves).round().astype(np.int64)
    else:
        picks = np.random.default_rng(random_seed).choice(len(rows), size=n_curves, replace=False)
    mu, sigma, nu = rows[picks].T

    grid = np.asarray(grid, dtype=np.float64)
    return stats.t.pdf(
        grid[np.newaxis, :],
        df=nu[:, np.newaxis],
        loc=mu[:, np.newaxis],
        scale=sigma[:, np.newaxis],
    )
