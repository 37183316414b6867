"""Chain configuration forwarded to the sampler."""

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_MONITOR = ("mu", "sigma", "nu")
VERBOSITY_LEVELS = (0, 1, 2)


@dataclass(frozen=True)
class SamplerOptions:
    """
    Validated sampler options.

    Attributes
    ----------
    monitor : Tuple[str, ...]
        Parameter names to record. Default ("mu", "sigma", "nu").
    n_chains : int
        Number of independent chains. Default 3.
    burn_in : int
        Draws discarded per chain before saving. Default 1000.
    adapt_steps : int
        Adaptation steps before burn-in (JAGS only). Default 500.
    thin : int
        Keep every thin-th draw. Default 1.
    n_samples : int
        Saved draws per chain, after thinning. Default 10000.
    verbosity : int
        0 silent, 1 progress, 2 progress plus engine output. Default 1.
    parallel : bool
        Run chains in parallel where the engine supports it. Default False.
    random_seed : int, optional
        Seed forwarded to the engine.
    """

    monitor: Tuple[str, ...] = DEFAULT_MONITOR
    n_chains: int = 3
    burn_in: int = 1000
    adapt_steps: int = 500
    thin: int = 1
    n_samples: int = 10000
    verbosity: int = 1
    parallel: bool = False
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        monitor = tuple(self.monitor)
        object.__setattr__(self, "monitor", monitor)

        if not monitor:
            raise ValueError("monitor must name at least one parameter")
        if len(set(monitor)) != len(monitor):
            raise ValueError(f"monitor contains duplicates: {monitor}")
        if self.n_chains < 1:
            raise ValueError(f"n_chains must be >= 1. Got {self.n_chains}")
        if self.burn_in < 0:
            raise ValueError(f"burn_in must be >= 0. Got {self.burn_in}")
        if self.adapt_steps < 0:
            raise ValueError(f"adapt_steps must be >= 0. Got {self.adapt_steps}")
        if self.thin < 1:
            raise ValueError(f"thin must be >= 1. Got {self.thin}")
        if self.n_samples < 1:
            raise ValueError(f"n_samples must be >= 1. Got {self.n_samples}")
        if self.verbosity not in VERBOSITY_LEVELS:
            raise ValueError(f"verbosity must be one of {VERBOSITY_LEVELS}. Got {self.verbosity}")

    @property
    def draws_per_chain(self) -> int:
        """Post-burn-in iterations per chain before thinning."""
        return self.n_samples * self.thin

    @property
    def total_samples(self) -> int:
        return self.n_samples * self.n_chains
