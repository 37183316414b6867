"""
Model builder: payload, model text and PyMC model for the robust t-test.

Mathematical model:
    mu_j    ~ Normal(muM_j, muSD_j)                # Group locations
    sigma_j ~ Gamma(sigmaSh_j, sigmaRa_j)          # Group scales
    nu      ~ Gamma(nuSh, nuRa)                    # Shared normality
    y_i     ~ StudentT(nu, mu_{x_i}, sigma_{x_i})  # Observations

The payload and text are what an external engine consumes; the PyMC model
is the in-process equivalent built from the same payload.
"""

from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import pymc as pm

from bayes_ttest.model.data import ObservationSet
from bayes_ttest.model.payload import ConfigurationPayload
from bayes_ttest.model.text import model_text
from bayes_ttest.priors.spec import PriorSpec


def build_pymc_model(payload: Mapping[str, object]) -> pm.Model:
    """
    Build the PyMC model described by a configuration payload.

    Parameters
    ----------
    payload : Mapping[str, object]
        Configuration payload (see ConfigurationPayload).

    Returns
    -------
    model : pm.Model
        Model with free variables mu, sigma (per group) and nu, and the
        observed variable y.
    """
    n_groups = int(payload["Ngroups"])
    y = np.array(payload["y"], dtype=np.float64)
    group_idx = np.array(payload["x"], dtype=np.int64) - 1

    coords = {"group": np.arange(1, n_groups + 1), "obs": np.arange(len(y))}

    with pm.Model(coords=coords) as model:
        mu = pm.Normal(
            "mu",
            mu=np.array(payload["muM"], dtype=np.float64),
            sigma=np.array(payload["muSD"], dtype=np.float64),
            dims="group",
        )
        sigma = pm.Gamma(
            "sigma",
            alpha=np.array(payload["sigmaSh"], dtype=np.float64),
            beta=np.array(payload["sigmaRa"], dtype=np.float64),
            dims="group",
        )
        nu = pm.Gamma("nu", alpha=float(payload["nuSh"]), beta=float(payload["nuRa"]))

        pm.StudentT(
            "y",
            nu=nu,
            mu=mu[group_idx],
            sigma=sigma[group_idx],
            observed=y,
            dims="obs",
        )

    return model


def initial_values(
    observations: ObservationSet,
    n_chains: int,
    random_seed: Optional[int] = None,
) -> List[Dict[str, object]]:
    """
    Per-chain initial values near the group sample statistics.

    Each chain starts at the group means jittered by one standard error
    and the group SDs jittered multiplicatively, with nu = 30.

    Parameters
    ----------
    observations : ObservationSet
        Observed data.
    n_chains : int
        Number of chains.
    random_seed : int, optional
        Seed for the jitter.

    Returns
    -------
    inits : List[Dict[str, object]]
        One record per chain with keys mu, sigma, nu.
    """
    if n_chains < 1:
        raise ValueError(f"n_chains must be >= 1. Got {n_chains}")

    rng = np.random.default_rng(random_seed)
    pooled_sd = float(np.std(observations.y, ddof=1)) if observations.n_total > 1 else 0.0
    if pooled_sd <= 0:
        pooled_sd = 1.0

    means = np.empty(observations.n_groups)
    sds = np.empty(observations.n_groups)
    for j in range(1, observations.n_groups + 1):
        yj = observations.group(j)
        means[j - 1] = np.mean(yj)
        sd = float(np.std(yj, ddof=1)) if len(yj) > 1 else 0.0
        sds[j - 1] = sd if sd > 0 else pooled_sd

    sizes = np.array(observations.group_sizes, dtype=np.float64)
    std_err = sds / np.sqrt(sizes)

    inits = []
    for _ in range(n_chains):
        inits.append({
            "mu": means + rng.normal(0.0, 1.0, size=means.shape) * std_err,
            "sigma": sds * np.exp(rng.normal(0.0, 0.1, size=sds.shape)),
            "nu": 30.0,
        })
    return inits


class ModelBuilder:
    """
    Robust two-group model builder.

    Attributes
    ----------
    observations : ObservationSet
        Observed data with group labels
    prior_spec : PriorSpec
        Prior specification
    payload : ConfigurationPayload or None
        Payload (None until assembled)
    model : pm.Model or None
        PyMC model (None until built)
    """

    def __init__(
        self,
        observations: ObservationSet,
        prior_spec: Optional[PriorSpec] = None,
    ) -> None:
        """
        Initialize model builder.

        Parameters
        ----------
        observations : ObservationSet
            Observed data.
        prior_spec : PriorSpec, optional
            Prior specification. If None, data-scaled defaults.
        """
        self.observations = observations
        self.prior_spec = prior_spec or PriorSpec.from_data(observations)
        if self.prior_spec.n_groups != observations.n_groups:
            raise ValueError(
                f"prior_spec has {self.prior_spec.n_groups} groups, "
                f"observations have {observations.n_groups}"
            )
        self.payload: Optional[ConfigurationPayload] = None
        self.model: Optional[pm.Model] = None

    def assemble(self) -> Tuple[ConfigurationPayload, str]:
        """
        Payload and model description for an external sampler.

        Returns
        -------
        payload : ConfigurationPayload
            Read-only data and hyperparameters.
        text : str
            Model description in JAGS grammar.
        """
        self.payload = ConfigurationPayload.from_inputs(self.observations, self.prior_spec)
        return self.payload, model_text(self.observations.n_groups)

    def build(self) -> pm.Model:
        """Build the PyMC model, assembling the payload first if needed."""
        if self.payload is None:
            self.assemble()
        self.model = build_pymc_model(self.payload)
        return self.model

    def get_model(self) -> pm.Model:
        """
        Get the built model.

        Raises
        ------
        RuntimeError
            If model has not been built yet.
        """
        if self.model is None:
            raise RuntimeError("Model has not been built. Call .build() first.")
        return self.model

    def initial_values(self, n_chains: int, random_seed: Optional[int] = None) -> List[Dict[str, object]]:
        """Per-chain initial values for these observations (see initial_values())."""
        return initial_values(self.observations, n_chains, random_seed)

    def __repr__(self) -> str:
        """String representation."""
        return f"ModelBuilder(observations={self.observations}, prior_spec={self.prior_spec})"
