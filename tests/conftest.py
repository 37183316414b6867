"""Shared fixtures: synthetic data and an in-memory sampler."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from bayes_ttest.model.data import ObservationSet


class FakeSampler:
    """
    Sampler returning independent draws around fixed parameter values.

    Vector parameters are returned as (n_samples, n_groups), or
    transposed when transpose_vectors is set.
    """

    def __init__(self, mu=(10.0, 12.0), sigma=(2.0, 2.0), nu=20.0, spread=0.1, transpose_vectors=False):
        self.mu = np.asarray(mu)
        self.sigma = np.asarray(sigma)
        self.nu = nu
        self.spread = spread
        self.transpose_vectors = transpose_vectors
        self.calls = []

    def run(self, payload, model_path, inits, options):
        self.calls.append({
            "payload": payload,
            "model_path": model_path,
            "model_text": model_path.read_text(),
            "inits": inits,
            "options": options,
        })
        rng = np.random.default_rng(options.random_seed)
        n = options.n_samples
        raw = []
        for _ in range(options.n_chains):
            mu = self.mu + rng.normal(0, self.spread, size=(n, len(self.mu)))
            sigma = np.abs(self.sigma + rng.normal(0, self.spread, size=(n, len(self.sigma))))
            nu = np.abs(self.nu + rng.normal(0, self.spread, size=n))
            if self.transpose_vectors:
                mu, sigma = mu.T, sigma.T
            raw.append({"mu": mu, "sigma": sigma, "nu": nu})
        return raw


class FailingSampler:
    def run(self, payload, model_path, inits, options):
        raise RuntimeError("engine crashed")


@pytest.fixture
def fake_sampler():
    return FakeSampler()


@pytest.fixture
def two_groups():
    rng = np.random.default_rng(0)
    return rng.normal(100, 15, size=40), rng.normal(108, 20, size=35)


@pytest.fixture
def observations(two_groups):
    return ObservationSet.from_groups(*two_groups)
