"""
Convergence diagnostics over the chains of one parameter.

All functions take draws laid out as (n_samples, n_chains) and are
read-only reductions; no threshold is applied here.

Key diagnostics:
- Shrink factor (potential scale reduction): near 1 when chains agree
- Autocorrelation: sample ACF per lag
- ESS (effective sample size): autocorrelation-adjusted sample count
- MCSE: Monte Carlo standard error of the posterior mean
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.stats import gaussian_kde

DEFAULT_MAX_LAG = 35


def _as_draws(draws) -> NDArray[np.float64]:
    arr = np.asarray(draws, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr[:, np.newaxis]
    if arr.ndim != 2:
        raise ValueError(f"draws must have shape (n_samples, n_chains). Got {arr.shape}")
    return arr


def autocorrelation(samples: NDArray[np.float64], max_lag: Optional[int] = None) -> NDArray[np.float64]:
    """
    Sample autocorrelation function of one chain.

    Parameters
    ----------
    samples : NDArray[np.float64]
        Draws of one chain, shape (n_samples,)
    max_lag : int, optional
        Largest lag. If None, min(n_samples // 2, 35).

    Returns
    -------
    acf : NDArray[np.float64]
        Autocorrelations for lags 0..max_lag, shape (max_lag + 1,).
        A constant chain gives 1 at lag 0 and 0 elsewhere.
    """
    samples = np.asarray(samples, dtype=np.float64)
    n_samples = len(samples)
    if n_samples < 2:
        raise ValueError(f"Need at least 2 samples. Got {n_samples}")
    if max_lag is None:
        max_lag = min(n_samples // 2, DEFAULT_MAX_LAG)
    max_lag = min(int(max_lag), n_samples - 1)
    if max_lag < 0:
        raise ValueError(f"max_lag must be >= 0. Got {max_lag}")

    centered = samples - np.mean(samples)
    c0 = np.dot(centered, centered)

    acf = np.zeros(max_lag + 1)
    acf[0] = 1.0
    if c0 == 0:
        return acf

    for lag in range(1, max_lag + 1):
        acf[lag] = np.dot(centered[:-lag], centered[lag:]) / c0
    return acf


def shrink_factor(draws) -> float:
    """
    Potential scale reduction factor (Gelman-Rubin shrink factor).

    Parameters
    ----------
    draws : array-like
        Draws of one parameter, shape (n_samples, n_chains).

    Returns
    -------
    shrink : float
        sqrt(var_hat / W); 1.0 when within-chain variance is zero.
    """
    draws = _as_draws(draws)
    n_draws, n_chains = draws.shape

    if n_chains < 2:
        raise ValueError("Need at least 2 chains for the shrink factor")
    if n_draws < 2:
        raise ValueError("Need at least 2 samples per chain for the shrink factor")

    # Between-chain variance
    chain_means = np.mean(draws, axis=0)
    B = n_draws * np.var(chain_means, ddof=1)

    # Within-chain variance
    W = np.mean(np.var(draws, axis=0, ddof=1))

    # Estimated posterior variance
    var_hat = ((n_draws - 1) / n_draws) * W + (1 / n_draws) * B

    return float(np.sqrt(var_hat / W)) if W > 0 else 1.0


def shrink_factor_history(draws, n_bins: int = 50) -> Tuple[NDArray[np.int64], NDArray[np.float64]]:
    """
    Shrink factor over growing iteration windows.

    At each checkpoint the factor is computed on the latter half of the
    draws up to that point.

    Parameters
    ----------
    draws : array-like
        Shape (n_samples, n_chains).
    n_bins : int
        Number of checkpoints. Default 50.

    Returns
    -------
    last_iteration : NDArray[np.int64]
        Checkpoint iteration counts.
    shrink : NDArray[np.float64]
        Shrink factor at each checkpoint.
    """
    draws = _as_draws(draws)
    n_draws = draws.shape[0]
    if n_draws < 4:
        raise ValueError(f"Need at least 4 samples per chain. Got {n_draws}")

    checkpoints = np.unique(np.linspace(4, n_draws, num=min(n_bins, n_draws - 3)).astype(np.int64))
    values = np.array([shrink_factor(draws[end // 2:end]) for end in checkpoints])
    return checkpoints, values


def _chain_ess(samples: NDArray[np.float64]) -> float:
    n = len(samples)
    c0 = np.var(samples, ddof=1)

    if c0 < 1e-10:
        return float(n)  # No variation -> ESS = n

    mean = np.mean(samples)
    tau_int = 0.5
    max_lag = min(n // 2, 100)

    for lag in range(1, max_lag):
        acov = np.mean((samples[:-lag] - mean) * (samples[lag:] - mean))
        rho = acov / c0

        if rho < 0.05:  # Stop when autocorr negligible
            break

        tau_int += rho

    return float(max(1.0, n / (2 * tau_int)))


def effective_sample_size(draws) -> float:
    """
    Effective sample size summed over chains.

    Parameters
    ----------
    draws : array-like
        Shape (n_samples, n_chains) or (n_samples,).

    Returns
    -------
    ess : float
        Sum of per-chain ESS estimates.
    """
    draws = _as_draws(draws)
    if draws.shape[0] < 2:
        raise ValueError("Need at least 2 samples per chain for ESS")
    return float(sum(_chain_ess(draws[:, c]) for c in range(draws.shape[1])))


def monte_carlo_standard_error(draws) -> float:
    """Pooled posterior SD divided by sqrt(ESS)."""
    draws = _as_draws(draws)
    ess = effective_sample_size(draws)
    return float(np.std(draws, ddof=1) / np.sqrt(ess))


def density(samples, n_points: int = 512) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Gaussian kernel density estimate of a sample.

    Parameters
    ----------
    samples : array-like
        Pooled draws, any shape (flattened).
    n_points : int
        Grid size. Default 512.

    Returns
    -------
    grid : NDArray[np.float64]
        Evaluation points spanning the sample range plus one bandwidth.
    values : NDArray[np.float64]
        Density at grid.
    """
    samples = np.ravel(np.asarray(samples, dtype=np.float64))
    if len(samples) < 2 or np.ptp(samples) == 0:
        raise ValueError("Density estimate needs at least 2 distinct values")

    kde = gaussian_kde(samples)
    pad = float(np.sqrt(kde.covariance[0, 0]))
    grid = np.linspace(samples.min() - pad, samples.max() + pad, n_points)
    return grid, kde(grid)


@dataclass(frozen=True)
class ParameterDiagnostics:
    """Diagnostics of one monitored parameter across chains."""

    name: str
    traces: NDArray[np.float64]            # (n_samples, n_chains)
    autocorrelation: NDArray[np.float64]   # (max_lag + 1, n_chains)
    shrink_factor: Optional[float]         # None for a single chain or draw
    shrink_history: Optional[Tuple[NDArray[np.int64], NDArray[np.float64]]]
    ess: Optional[float]                   # None with one draw per chain
    mcse: Optional[float]
    density_grid: Optional[NDArray[np.float64]]
    density: Optional[NDArray[np.float64]]


def diagnose(chain_set, name: str, max_lag: Optional[int] = None) -> ParameterDiagnostics:
    """
    Trace, autocorrelation, shrink factor and density of one parameter.

    Parameters
    ----------
    chain_set : ChainSet
        Restructured, un-pooled chains.
    name : str
        Scalar parameter name, e.g. "mu[1]".
    max_lag : int, optional
        Largest autocorrelation lag.

    Returns
    -------
    diagnostics : ParameterDiagnostics
    """
    draws = np.array(chain_set[name])
    n_samples, n_chains = draws.shape

    if n_samples >= 2:
        acf = np.column_stack([autocorrelation(draws[:, c], max_lag) for c in range(n_chains)])
        ess = effective_sample_size(draws)
        mcse = monte_carlo_standard_error(draws)
    else:
        # One draw per chain: only lag 0 exists
        acf = np.ones((1, n_chains))
        ess, mcse = None, None

    if n_chains >= 2 and n_samples >= 2:
        rhat = shrink_factor(draws)
        history = shrink_factor_history(draws) if n_samples >= 4 else None
    else:
        rhat, history = None, None

    if np.ptp(draws) > 0:
        grid, values = density(draws)
    else:
        grid, values = None, None

    return ParameterDiagnostics(
        name=name,
        traces=draws,
        autocorrelation=acf,
        shrink_factor=rhat,
        shrink_history=history,
        ess=ess,
        mcse=mcse,
        density_grid=grid,
        density=values,
    )


def diagnose_all(chain_set, max_lag: Optional[int] = None) -> Dict[str, ParameterDiagnostics]:
    """diagnose() for every parameter in the chain set."""
    return {name: diagnose(chain_set, name, max_lag) for name in chain_set.names}
