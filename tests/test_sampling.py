"""
Tests for sampler options, invocation and the engine backends.

The real engines are not required: JAGS file handling is tested on
hand-written CODA output, and PyMC sampling is marked slow.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from bayes_ttest.exceptions import SamplerError
from bayes_ttest.model import ModelBuilder
from bayes_ttest.sampling import (
    JagsSampler,
    PyMCSampler,
    SamplerOptions,
    format_rdump,
    read_coda,
    run_sampler,
)
from bayes_ttest.sampling.jags import jags_script

from conftest import FailingSampler, FakeSampler


class TestSamplerOptions:
    """Tests for SamplerOptions."""

    def test_defaults(self) -> None:
        options = SamplerOptions()
        assert options.monitor == ("mu", "sigma", "nu")
        assert options.n_chains == 3
        assert options.burn_in == 1000
        assert options.thin == 1
        assert options.n_samples == 10000
        assert options.verbosity == 1
        assert options.parallel is False

    def test_derived_counts(self) -> None:
        options = SamplerOptions(n_chains=4, n_samples=500, thin=3)
        assert options.draws_per_chain == 1500
        assert options.total_samples == 2000

    def test_monitor_list_becomes_tuple(self) -> None:
        options = SamplerOptions(monitor=["mu", "nu"])
        assert options.monitor == ("mu", "nu")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n_chains": 0},
            {"burn_in": -1},
            {"adapt_steps": -5},
            {"thin": 0},
            {"n_samples": 0},
            {"verbosity": 3},
            {"monitor": ()},
            {"monitor": ("mu", "mu")},
        ],
    )
    def test_invalid_options_raise(self, kwargs) -> None:
        with pytest.raises(ValueError):
            SamplerOptions(**kwargs)

    def test_frozen(self) -> None:
        options = SamplerOptions()
        with pytest.raises(AttributeError):
            options.n_chains = 5  # type: ignore[misc]


class TestRunSampler:
    """Tests for the single sampler invocation."""

    def test_passes_inputs_through(self, observations) -> None:
        payload, text = ModelBuilder(observations).assemble()
        options = SamplerOptions(n_chains=2, n_samples=50, random_seed=3)
        inits = ModelBuilder(observations).initial_values(2, random_seed=3)
        sampler = FakeSampler()

        raw = run_sampler(sampler, payload, text, inits, options)

        assert len(raw) == 2
        assert len(sampler.calls) == 1
        call = sampler.calls[0]
        assert call["payload"] is payload
        assert call["model_text"] == text
        assert call["options"] is options
        assert len(call["inits"]) == 2
        # The model file only lives for the duration of the run
        assert not call["model_path"].exists()

    def test_failure_becomes_sampler_error(self, observations) -> None:
        payload, text = ModelBuilder(observations).assemble()

        with pytest.raises(SamplerError, match="engine crashed") as excinfo:
            run_sampler(FailingSampler(), payload, text, None, SamplerOptions(n_chains=1))
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_empty_output_raises(self, observations) -> None:
        class EmptySampler:
            def run(self, payload, model_path, inits, options):
                return []

        payload, text = ModelBuilder(observations).assemble()
        with pytest.raises(SamplerError, match="no chains"):
            run_sampler(EmptySampler(), payload, text, None, SamplerOptions())

    def test_inits_count_must_match_chains(self, observations) -> None:
        payload, text = ModelBuilder(observations).assemble()
        with pytest.raises(ValueError, match="initial-value"):
            run_sampler(FakeSampler(), payload, text, [{}], SamplerOptions(n_chains=2))


class TestJagsFiles:
    """Tests for JAGS input files and CODA output parsing."""

    def test_format_rdump(self) -> None:
        text = format_rdump({
            "y": np.array([1.5, 2.0]),
            "x": np.array([1, 2]),
            "Ntotal": 2,
            "nuSh": 4.0,
            ".RNG.name": "base::Mersenne-Twister",
        })
        lines = text.splitlines()
        assert lines[0] == '"y" <- c(1.5, 2.0)'
        assert lines[1] == '"x" <- c(1, 2)'
        assert lines[2] == '"Ntotal" <- 2'
        assert lines[3] == '"nuSh" <- 4.0'
        assert lines[4] == '".RNG.name" <- "base::Mersenne-Twister"'

    def test_jags_script(self, tmp_path) -> None:
        options = SamplerOptions(n_chains=2, burn_in=100, adapt_steps=50, thin=2, n_samples=10)
        script = jags_script(
            tmp_path / "model.txt",
            tmp_path / "data.R",
            [tmp_path / "inits1.R", tmp_path / "inits2.R"],
            options,
        )
        assert "compile, nchains(2)" in script
        assert f'parameters in "{tmp_path / "inits2.R"}", chain(2)' in script
        assert "adapt 50" in script
        assert "update 100" in script
        assert "monitor sigma, thin(2)" in script
        assert "update 20" in script
        assert script.rstrip().endswith("exit")

    def _write_coda(self, tmp_path, n=5, n_chains=2):
        index = tmp_path / "CODAindex.txt"
        index.write_text(f"mu[1] 1 {n}\nmu[2] {n + 1} {2 * n}\nnu {2 * n + 1} {3 * n}\n")
        paths = []
        for c in range(n_chains):
            path = tmp_path / f"CODAchain{c + 1}.txt"
            values = np.arange(3 * n) + 100 * c
            path.write_text("".join(f"{(i % n) + 1} {v}\n" for i, v in enumerate(values)))
            paths.append(path)
        return index, paths

    def test_read_coda(self, tmp_path) -> None:
        index, paths = self._write_coda(tmp_path)
        raw = read_coda(index, paths)

        assert len(raw) == 2
        assert list(raw[0]) == ["mu[1]", "mu[2]", "nu"]
        assert_array_equal(raw[0]["mu[1]"], [0, 1, 2, 3, 4])
        assert_array_equal(raw[1]["nu"], [110, 111, 112, 113, 114])

    def test_read_coda_missing_file(self, tmp_path) -> None:
        index, _ = self._write_coda(tmp_path)
        with pytest.raises(SamplerError, match="Cannot read"):
            read_coda(index, [tmp_path / "CODAchain9.txt"])

    def test_read_coda_range_outside_file(self, tmp_path) -> None:
        index, paths = self._write_coda(tmp_path)
        index.write_text("mu[1] 1 1000\n")
        with pytest.raises(SamplerError, match="outside"):
            read_coda(index, paths)

    def test_read_coda_malformed_index(self, tmp_path) -> None:
        index, paths = self._write_coda(tmp_path)
        index.write_text("mu[1] 1\n")
        with pytest.raises(SamplerError, match="Malformed"):
            read_coda(index, paths)

    def test_missing_executable(self, observations) -> None:
        payload, text = ModelBuilder(observations).assemble()
        sampler = JagsSampler(executable="definitely-not-a-jags-binary")
        inits = ModelBuilder(observations).initial_values(2)

        with pytest.raises(SamplerError, match="not found"):
            run_sampler(sampler, payload, text, inits, SamplerOptions(n_chains=2))


class TestPyMCSampler:
    """Tests for the PyMC backend."""

    def test_init(self) -> None:
        sampler = PyMCSampler(step="nuts", target_accept=0.9)
        assert sampler.step == "nuts"
        assert sampler.target_accept == 0.9

    def test_invalid_step(self) -> None:
        with pytest.raises(ValueError):
            PyMCSampler(step="gibbs")

    def test_invalid_target_accept(self) -> None:
        with pytest.raises(ValueError):
            PyMCSampler(target_accept=0.5)
        with pytest.raises(ValueError):
            PyMCSampler(target_accept=0.99)

    def test_repr(self) -> None:
        assert "slice" in repr(PyMCSampler())

    @pytest.mark.slow
    def test_sampling_small_model(self, observations) -> None:
        builder = ModelBuilder(observations)
        payload, text = builder.assemble()
        options = SamplerOptions(n_chains=2, burn_in=100, n_samples=50, thin=2, verbosity=0, random_seed=1)
        inits = builder.initial_values(2, random_seed=1)

        raw = run_sampler(PyMCSampler(), payload, text, inits, options)

        assert len(raw) == 2
        assert raw[0]["mu"].shape == (50, 2)
        assert raw[0]["nu"].shape == (50,)
        assert np.all(raw[1]["sigma"] > 0)
        assert_allclose(np.mean(raw[0]["mu"][:, 0]), np.mean(observations.group(1)), atol=15)
