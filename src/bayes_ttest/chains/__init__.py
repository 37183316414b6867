"""
Chain restructuring: raw sampler output to per-parameter series.

- restructure_chains: validated chain-major -> (n_samples, n_chains) layout
- ChainSet: per-chain draws of scalar parameters
- pool_chains / PooledChain: chains concatenated along the sample axis
"""

from bayes_ttest.chains.restructure import (
    ChainSet,
    PooledChain,
    pool_chains,
    restructure_chains,
)

__all__ = [
    "ChainSet",
    "PooledChain",
    "pool_chains",
    "restructure_chains",
]
