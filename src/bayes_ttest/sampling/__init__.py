"""
Sampler invocation: options, protocol and engine backends.

The MCMC engine is an injected dependency:
- SamplerOptions: validated chain configuration
- Sampler / run_sampler: protocol and the single invocation of a run
- PyMCSampler: in-process PyMC backend
- JagsSampler: JAGS command-line backend (CODA output)
"""

from bayes_ttest.sampling.base import RawChains, Sampler, run_sampler
from bayes_ttest.sampling.jags import JagsSampler, format_rdump, read_coda
from bayes_ttest.sampling.options import SamplerOptions
from bayes_ttest.sampling.pymc_backend import PyMCSampler, posterior_to_raw

__all__ = [
    "SamplerOptions",
    "Sampler",
    "RawChains",
    "run_sampler",
    "PyMCSampler",
    "posterior_to_raw",
    "JagsSampler",
    "format_rdump",
    "read_coda",
]
