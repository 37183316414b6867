"""
Sampler protocol and the single sampler invocation of a run.

A sampler receives the configuration payload, the path of the model
description, one initial-value record per chain and the options, and
returns raw chain-major output:

    [ {parameter name: draws}, ... ]   # one mapping per chain
"""

import logging
import time
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

import numpy as np

from bayes_ttest.exceptions import SamplerError
from bayes_ttest.model.text import model_file
from bayes_ttest.sampling.options import SamplerOptions

logger = logging.getLogger(__name__)

RawChains = List[Dict[str, np.ndarray]]


class Sampler(Protocol):
    """An MCMC engine."""

    def run(
        self,
        payload: Mapping[str, object],
        model_path: Path,
        inits: Sequence[Mapping[str, object]],
        options: SamplerOptions,
    ) -> RawChains:
        ...


def run_sampler(
    sampler: Sampler,
    payload: Mapping[str, object],
    text: str,
    inits: Optional[Sequence[Mapping[str, object]]],
    options: SamplerOptions,
) -> RawChains:
    """
    Write the model description and invoke the sampler once.

    Parameters
    ----------
    sampler : Sampler
        Engine to run.
    payload : Mapping[str, object]
        Configuration payload.
    text : str
        Model description.
    inits : Sequence[Mapping[str, object]], optional
        One initial-value record per chain.
    options : SamplerOptions
        Chain configuration.

    Returns
    -------
    raw : RawChains
        Raw per-chain output as returned by the sampler.

    Raises
    ------
    OSError
        If the model description cannot be written.
    SamplerError
        If the sampler fails or returns no chains. No retry is attempted.
    """
    inits = list(inits) if inits is not None else []
    if inits and len(inits) != options.n_chains:
        raise ValueError(f"Got {len(inits)} initial-value records for {options.n_chains} chains")

    with model_file(text) as path:
        logger.info(
            "Running %s: %d chains, burn-in %d, %d saved samples per chain (thin %d)",
            type(sampler).__name__,
            options.n_chains,
            options.burn_in,
            options.n_samples,
            options.thin,
        )
        start_time = time.time()
        try:
            raw = sampler.run(payload, path, inits, options)
        except SamplerError:
            logger.error("%s failed", type(sampler).__name__)
            raise
        except Exception as exc:
            logger.error("%s failed: %s", type(sampler).__name__, exc)
            raise SamplerError(f"Sampler invocation failed: {exc}") from exc
        sampling_time = time.time() - start_time

    if not raw:
        raise SamplerError("Sampler returned no chains")

    logger.info("Sampling finished in %.1fs (%d chains)", sampling_time, len(raw))
    return list(raw)
