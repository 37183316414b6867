"""
Restructuring raw sampler output into per-parameter chain arrays.

Raw output is chain-major: one mapping per chain from parameter name to
draws. Scalar parameters arrive as (n_samples,), vector parameters as
(n_samples, dim) or (dim, n_samples). After restructuring every parameter
is a scalar series stored as (n_samples, n_chains); vector parameters are
split into 1-based names mu[1], mu[2], ...

Pooling concatenates chains along the sample axis in chain order:

    pooled = [chain 1 draws, chain 2 draws, ..., chain N draws]
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from bayes_ttest.exceptions import ChainStructureError

logger = logging.getLogger(__name__)


def _read_only(arr: NDArray[np.float64]) -> NDArray[np.float64]:
    arr.flags.writeable = False
    return arr


class PooledChain(Mapping):
    """Read-only mapping from parameter name to pooled 1-D draws."""

    def __init__(self, draws: Dict[str, NDArray[np.float64]]) -> None:
        lengths = {len(v) for v in draws.values()}
        if len(lengths) > 1:
            raise ChainStructureError(f"Pooled series have different lengths: {sorted(lengths)}")
        self._draws = {name: _read_only(np.array(v, dtype=np.float64)) for name, v in draws.items()}
        self.n_draws = lengths.pop() if lengths else 0

    def __getitem__(self, name: str) -> NDArray[np.float64]:
        return self._draws[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._draws)

    def __len__(self) -> int:
        return len(self._draws)

    def __repr__(self) -> str:
        """String representation."""
        return f"PooledChain(n_draws={self.n_draws}, names={list(self._draws)})"


class ChainSet:
    """
    Per-chain draws of scalar parameters.

    Attributes
    ----------
    names : List[str]
        Scalar parameter names, in sampler order
    n_chains : int
        Number of chains
    n_samples : int
        Draws per chain
    """

    def __init__(self, draws: Dict[str, NDArray[np.float64]]) -> None:
        """
        Initialize chain set.

        Parameters
        ----------
        draws : Dict[str, NDArray[np.float64]]
            Parameter name -> array of shape (n_samples, n_chains).
        """
        if not draws:
            raise ChainStructureError("Chain set has no parameters")
        shapes = {np.shape(v) for v in draws.values()}
        if len(shapes) != 1 or len(next(iter(shapes))) != 2:
            raise ChainStructureError(f"All parameters must share one (n_samples, n_chains) shape. Got {shapes}")

        self._draws = {name: _read_only(np.array(v, dtype=np.float64)) for name, v in draws.items()}
        self.n_samples, self.n_chains = shapes.pop()

    @property
    def names(self) -> List[str]:
        return list(self._draws)

    def __getitem__(self, name: str) -> NDArray[np.float64]:
        """Draws of one parameter, shape (n_samples, n_chains)."""
        return self._draws[name]

    def __contains__(self, name: str) -> bool:
        return name in self._draws

    def chain(self, name: str, index: int) -> NDArray[np.float64]:
        """Draws of one parameter in one chain (0-based chain index)."""
        if not (0 <= index < self.n_chains):
            raise IndexError(f"chain index must be in [0, {self.n_chains - 1}]. Got {index}")
        return self._draws[name][:, index]

    def pool(self) -> PooledChain:
        return pool_chains(self)

    def to_inference_data(self):
        """Posterior as arviz InferenceData, dims (chain, draw)."""
        import arviz as az

        return az.from_dict(posterior={name: arr.T for name, arr in self._draws.items()})

    def __repr__(self) -> str:
        """String representation."""
        return f"ChainSet(n_chains={self.n_chains}, n_samples={self.n_samples}, names={self.names})"


def _sample_count(chain: Mapping, expected: Optional[int] = None) -> int:
    """
    Per-chain sample count.

    Scalar series fix the count. Without them the expected count is used;
    failing that, the one axis length shared by every vector parameter.
    """
    scalar_lengths = {len(np.ravel(v)) for v in chain.values() if np.ndim(v) == 1}
    if len(scalar_lengths) > 1:
        raise ChainStructureError(f"Scalar parameters have different lengths: {sorted(scalar_lengths)}")
    if scalar_lengths:
        return scalar_lengths.pop()
    if expected is not None:
        return expected

    candidates: Optional[set] = None
    for name, value in chain.items():
        shape = np.shape(value)
        if len(shape) == 0:
            raise ChainStructureError(f"Draws of {name} must be an array, got a scalar")
        if len(shape) != 2:
            raise ChainStructureError(f"{name} must be 1-D or 2-D. Got shape {shape}")
        candidates = set(shape) if candidates is None else candidates & set(shape)

    if not candidates or len(candidates) > 1:
        shapes = {name: np.shape(value) for name, value in chain.items()}
        raise ChainStructureError(
            f"Cannot tell the sample axis of vector-only output {shapes}; pass n_samples"
        )
    return candidates.pop()


def _orient(name: str, value: ArrayLike, n_samples: int) -> NDArray[np.float64]:
    """Array with the sample axis first, shape (n_samples,) or (n_samples, dim)."""
    try:
        arr = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ChainStructureError(f"Draws of {name} are not numeric: {exc}") from exc

    if arr.ndim == 1:
        if len(arr) != n_samples:
            raise ChainStructureError(f"{name} has {len(arr)} draws, expected {n_samples}")
        return arr
    if arr.ndim == 2:
        if arr.shape[0] == n_samples:
            return arr
        if arr.shape[1] == n_samples:
            return arr.T
        raise ChainStructureError(f"{name} has shape {arr.shape}, no axis of length {n_samples}")
    raise ChainStructureError(f"{name} must be 1-D or 2-D. Got shape {arr.shape}")


def restructure_chains(
    raw: Sequence[Mapping[str, ArrayLike]],
    n_samples: Optional[int] = None,
) -> ChainSet:
    """
    Canonical per-parameter layout from raw chain-major sampler output.

    The whole chain set is validated before any output is built.

    Parameters
    ----------
    raw : Sequence[Mapping[str, ArrayLike]]
        One mapping per chain from parameter name to draws.
    n_samples : int, optional
        Expected draws per chain. Required to orient output that holds
        only vector parameters with no single shared axis length.

    Returns
    -------
    chain_set : ChainSet
        Scalar series per name, shape (n_samples, n_chains).

    Raises
    ------
    ChainStructureError
        If chains disagree on parameter names, sample counts or vector
        dimensions. Also raised when an array has no sample axis and when
        a split name such as mu[1] already exists.
    """
    if len(raw) == 0:
        raise ChainStructureError("No chains to restructure")

    names = list(raw[0].keys())
    if not names:
        raise ChainStructureError("Chain 1 has no parameters")
    for c, chain in enumerate(raw[1:], start=2):
        if set(chain.keys()) != set(names):
            raise ChainStructureError(
                f"Chain {c} parameters {sorted(chain.keys())} differ from chain 1 {sorted(names)}"
            )

    if n_samples is not None and n_samples < 1:
        raise ChainStructureError(f"n_samples must be >= 1. Got {n_samples}")

    counts = [_sample_count(chain, n_samples) for chain in raw]
    if len(set(counts)) != 1:
        raise ChainStructureError(f"Chains have different sample counts: {counts}")
    if n_samples is not None and counts[0] != n_samples:
        raise ChainStructureError(f"Chains have {counts[0]} samples, expected {n_samples}")
    n_samples = counts[0]
    if n_samples == 0:
        raise ChainStructureError("Chains have no draws")

    oriented: List[Dict[str, NDArray[np.float64]]] = [
        {name: _orient(name, chain[name], n_samples) for name in names} for chain in raw
    ]
    for name in names:
        shapes = {chain[name].shape for chain in oriented}
        if len(shapes) != 1:
            raise ChainStructureError(f"{name} has different shapes across chains: {sorted(shapes)}")
        shape = shapes.pop()
        if len(shape) == 2:
            clashes = [f"{name}[{k + 1}]" for k in range(shape[1]) if f"{name}[{k + 1}]" in raw[0]]
            if clashes:
                raise ChainStructureError(f"Splitting {name} would overwrite parameters {clashes}")

    draws: Dict[str, NDArray[np.float64]] = {}
    for name in names:
        stacked = np.stack([chain[name] for chain in oriented], axis=-1)
        if stacked.ndim == 2:
            draws[name] = stacked
        else:
            # (n_samples, dim, n_chains) -> name[1], ..., name[dim]
            for k in range(stacked.shape[1]):
                draws[f"{name}[{k + 1}]"] = stacked[:, k, :]

    chain_set = ChainSet(draws)
    logger.debug("Restructured %d chains x %d samples: %s", chain_set.n_chains, n_samples, chain_set.names)
    return chain_set


def pool_chains(chain_set: ChainSet) -> PooledChain:
    """
    Concatenate every parameter's chains along the sample axis.

    Returns
    -------
    pooled : PooledChain
        Series of length n_chains * n_samples; chain order preserved and
        draw order preserved within each chain.
    """
    # Column-major ravel of (n_samples, n_chains) lays chains end to end
    return PooledChain({name: chain_set[name].ravel(order="F") for name in chain_set.names})
