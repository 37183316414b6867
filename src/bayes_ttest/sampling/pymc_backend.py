"""
In-process sampler backend built on PyMC.

Rebuilds the model from the configuration payload (the model description
file is not parsed) and samples it with a PyMC step method:
- "slice": coordinate-wise slice sampling, Gibbs-style updates
- "metropolis": random-walk Metropolis
- "nuts": No-U-Turn Sampler
"""

import logging
from pathlib import Path
from typing import Mapping, Sequence, Tuple

import numpy as np
import pymc as pm

from bayes_ttest.exceptions import SamplerError
from bayes_ttest.model.builder import build_pymc_model
from bayes_ttest.sampling.base import RawChains
from bayes_ttest.sampling.options import SamplerOptions

logger = logging.getLogger(__name__)


def posterior_to_raw(idata, monitor: Tuple[str, ...], thin: int = 1) -> RawChains:
    """
    Chain-major raw output from an arviz InferenceData posterior.

    Parameters
    ----------
    idata : arviz.InferenceData
        Posterior inference data.
    monitor : Tuple[str, ...]
        Variables to extract.
    thin : int
        Keep every thin-th draw.

    Returns
    -------
    raw : RawChains
        One mapping per chain; scalar variables as (draws,), vector
        variables as (draws, dim).
    """
    posterior = idata.posterior
    missing = [name for name in monitor if name not in posterior]
    if missing:
        raise SamplerError(f"Monitored parameters missing from posterior: {missing}")

    raw = []
    for c in range(posterior.sizes["chain"]):
        raw.append({
            name: np.asarray(posterior[name].isel(chain=c).values)[::thin]
            for name in monitor
        })
    return raw


class PyMCSampler:
    """
    PyMC sampler backend.

    Forwards burn-in as tuning steps, the parallel flag as the core count
    and verbosity as the progress bar.
    """

    STEPS = ("slice", "metropolis", "nuts")

    def __init__(self, step: str = "slice", target_accept: float = 0.85) -> None:
        """
        Initialize sampler.

        Parameters
        ----------
        step : str
            Step method, one of STEPS. Default "slice".
        target_accept : float
            NUTS acceptance rate target (0.5-0.99). Default 0.85.
        """
        if step not in self.STEPS:
            raise ValueError(f"step must be one of {self.STEPS}. Got {step!r}")
        if not (0.5 < target_accept < 0.99):
            raise ValueError(f"target_accept must be in (0.5, 0.99). Got {target_accept}")

        self.step = step
        self.target_accept = target_accept

    def _step_method(self):
        if self.step == "slice":
            return pm.Slice()
        if self.step == "metropolis":
            return pm.Metropolis()
        return pm.NUTS(target_accept=self.target_accept)

    def run(
        self,
        payload: Mapping[str, object],
        model_path: Path,
        inits: Sequence[Mapping[str, object]],
        options: SamplerOptions,
    ) -> RawChains:
        """
        Sample the model described by the payload.

        Returns
        -------
        raw : RawChains
            Monitored parameters, n_samples draws per chain.
        """
        logger.debug("Building PyMC model for %s", model_path)
        model = build_pymc_model(payload)

        initvals = [dict(record) for record in inits] if inits else None

        with model:
            idata = pm.sample(
                draws=options.draws_per_chain,
                tune=options.burn_in,
                chains=options.n_chains,
                cores=options.n_chains if options.parallel else 1,
                step=self._step_method(),
                initvals=initvals,
                random_seed=options.random_seed,
                progressbar=options.verbosity > 0,
                return_inferencedata=True,
                discard_tuned_samples=True,
                compute_convergence_checks=False,
            )

        return posterior_to_raw(idata, options.monitor, options.thin)

    def __repr__(self) -> str:
        """String representation."""
        return f"PyMCSampler(step={self.step!r}, target_accept={self.target_accept})"
