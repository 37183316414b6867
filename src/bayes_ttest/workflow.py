"""
End-to-end two-group t-test.

observations -> priors -> payload + model text -> sampler -> restructured
chains -> pooled chain -> summaries (diagnostics and plots on demand).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd
from numpy.typing import ArrayLike

from bayes_ttest.chains.restructure import ChainSet, PooledChain, restructure_chains
from bayes_ttest.diagnostics.convergence import ParameterDiagnostics, diagnose_all
from bayes_ttest.model.builder import ModelBuilder
from bayes_ttest.model.data import ObservationSet
from bayes_ttest.model.payload import ConfigurationPayload
from bayes_ttest.priors.spec import PriorSpec
from bayes_ttest.sampling.base import Sampler, run_sampler
from bayes_ttest.sampling.options import SamplerOptions
from bayes_ttest.summary.posterior import SummaryRecord
from bayes_ttest.summary.two_group import summarize_two_groups, summary_frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TTestResult:
    """Outputs of one t-test run."""

    observations: ObservationSet
    priors: PriorSpec
    payload: ConfigurationPayload
    chains: ChainSet
    pooled: PooledChain
    summaries: Dict[str, SummaryRecord]

    def diagnostics(self, max_lag: Optional[int] = None) -> Dict[str, ParameterDiagnostics]:
        """Convergence diagnostics of every monitored parameter."""
        return diagnose_all(self.chains, max_lag)

    def summary_frame(self) -> pd.DataFrame:
        return summary_frame(self.summaries)

    def plot(self):
        """Posterior predictive and posterior histogram figure."""
        from bayes_ttest.plotting.figures import plot_two_group_results

        return plot_two_group_results(self.observations, self.pooled, self.summaries)


class BayesianTwoGroupTest:
    """
    Robust Bayesian comparison of two groups.

    The sampler is injected; anything implementing Sampler works.
    """

    def __init__(
        self,
        sampler: Sampler,
        options: Optional[SamplerOptions] = None,
        cred_mass: float = 0.95,
    ) -> None:
        """
        Initialize test.

        Parameters
        ----------
        sampler : Sampler
            MCMC engine.
        options : SamplerOptions, optional
            Chain configuration. If None, defaults.
        cred_mass : float
            HDI mass for summaries. Default 0.95.
        """
        if not (0 < cred_mass < 1):
            raise ValueError(f"cred_mass must be in (0, 1). Got {cred_mass}")

        self.sampler = sampler
        self.options = options or SamplerOptions()
        self.cred_mass = cred_mass

    def fit(
        self,
        y1: ArrayLike,
        y2: ArrayLike,
        priors: Optional[PriorSpec] = None,
        comp_values: Optional[Mapping[str, float]] = None,
        ropes: Optional[Mapping[str, Tuple[float, float]]] = None,
    ) -> TTestResult:
        """
        Run the full pipeline on two samples.

        Parameters
        ----------
        y1, y2 : ArrayLike
            Observations of group 1 and group 2.
        priors : PriorSpec, optional
            Prior specification. If None, data-scaled defaults.
        comp_values, ropes : Mapping, optional
            Comparison values / ROPEs per summarized quantity.

        Returns
        -------
        result : TTestResult

        Raises
        ------
        PriorSpecificationError
            If a prior SD is not positive.
        SamplerError
            If the sampler fails.
        ChainStructureError
            If the sampler output is inconsistent across chains.
        """
        observations = ObservationSet.from_groups(y1, y2)
        builder = ModelBuilder(observations, priors)
        payload, text = builder.assemble()
        logger.info("Assembled payload for %s", observations)

        inits = builder.initial_values(self.options.n_chains, self.options.random_seed)
        raw = run_sampler(self.sampler, payload, text, inits, self.options)

        chains = restructure_chains(raw, n_samples=self.options.n_samples)
        pooled = chains.pool()
        logger.info("Pooled %d chains into %d draws", chains.n_chains, pooled.n_draws)

        summaries = summarize_two_groups(pooled, self.cred_mass, comp_values, ropes)
        return TTestResult(
            observations=observations,
            priors=builder.prior_spec,
            payload=payload,
            chains=chains,
            pooled=pooled,
            summaries=summaries,
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"BayesianTwoGroupTest(sampler={self.sampler!r}, options={self.options}, cred_mass={self.cred_mass})"
