"""
Bayesian two-group t-test: priors, model assembly and posterior post-processing.

The MCMC sampling itself is delegated to an injected sampler backend
(PyMC in-process, or the JAGS executable). Everything else lives here:

1. priors: gamma shape/rate conversion and prior specification
2. model: observations, configuration payload, model description text
3. sampling: sampler options, sampler protocol and backends
4. chains: restructuring raw sampler output, pooling chains
5. diagnostics: trace, autocorrelation, shrink factor, density
6. summary: HDI, effect size, posterior predictive checks
7. plotting: matplotlib figures

**Usage:**
```python
from bayes_ttest import BayesianTwoGroupTest, SamplerOptions
from bayes_ttest.sampling import PyMCSampler

test = BayesianTwoGroupTest(PyMCSampler(), SamplerOptions(n_samples=2000))
result = test.fit(y1, y2)
print(result.summary_frame())
```
"""

from bayes_ttest.exceptions import (
    ChainStructureError,
    PriorSpecificationError,
    SamplerError,
)
from bayes_ttest.priors import PriorSpec
from bayes_ttest.sampling import SamplerOptions
from bayes_ttest.workflow import BayesianTwoGroupTest, TTestResult

__version__ = "0.1.0"

__all__ = [
    "BayesianTwoGroupTest",
    "TTestResult",
    "PriorSpec",
    "SamplerOptions",
    "PriorSpecificationError",
    "ChainStructureError",
    "SamplerError",
]
