"""
Unit tests for chain restructuring and pooling.

Tests cover:
- Splitting vector parameters into named scalar series
- Orientation of transposed vector parameters
- Rejection of inconsistent chain sets
- Pooling length and order
"""

import pytest
import numpy as np
from numpy.testing import assert_array_equal

from bayes_ttest.chains import ChainSet, PooledChain, pool_chains, restructure_chains
from bayes_ttest.exceptions import ChainStructureError


def make_raw(n_chains: int = 3, n_samples: int = 6, transpose: bool = False):
    """Chain c, draw i: mu = (c*100 + i, c*100 + i + 0.5), nu = c*100 + i."""
    raw = []
    for c in range(n_chains):
        draws = c * 100 + np.arange(n_samples, dtype=float)
        mu = np.column_stack([draws, draws + 0.5])
        raw.append({"mu": mu.T if transpose else mu, "nu": draws.copy()})
    return raw


class TestRestructure:
    """Tests for restructure_chains."""

    def test_splits_vector_parameter(self) -> None:
        chains = restructure_chains(make_raw(n_chains=2, n_samples=6))

        assert chains.names == ["mu[1]", "mu[2]", "nu"]
        assert chains.n_chains == 2
        assert chains.n_samples == 6
        assert chains["mu[1]"].shape == (6, 2)
        assert_array_equal(chains.chain("mu[1]", 0), np.arange(6))
        assert_array_equal(chains.chain("mu[2]", 1), 100 + np.arange(6) + 0.5)

    def test_transposed_vector_parameter(self) -> None:
        straight = restructure_chains(make_raw(transpose=False))
        flipped = restructure_chains(make_raw(transpose=True))

        for name in straight.names:
            assert_array_equal(straight[name], flipped[name])

    def test_scalar_names_pass_through(self) -> None:
        raw = [{"mu[1]": np.arange(4.0), "mu[2]": np.arange(4.0) + 1, "nu": np.ones(4)} for _ in range(2)]
        chains = restructure_chains(raw)
        assert chains.names == ["mu[1]", "mu[2]", "nu"]
        assert chains.n_samples == 4

    def test_lists_accepted(self) -> None:
        raw = [{"nu": [1.0, 2.0, 3.0]}, {"nu": [4.0, 5.0, 6.0]}]
        chains = restructure_chains(raw)
        assert_array_equal(chains["nu"], [[1, 4], [2, 5], [3, 6]])

    def test_different_sample_counts_raise(self) -> None:
        raw = make_raw(n_chains=2, n_samples=6)
        raw[1] = make_raw(n_chains=1, n_samples=5)[0]
        with pytest.raises(ChainStructureError, match="sample counts"):
            restructure_chains(raw)

    def test_different_parameter_names_raise(self) -> None:
        raw = make_raw(n_chains=2)
        del raw[1]["nu"]
        with pytest.raises(ChainStructureError, match="differ"):
            restructure_chains(raw)

    def test_inconsistent_lengths_within_chain_raise(self) -> None:
        raw = make_raw(n_chains=2, n_samples=6)
        raw[0]["extra"] = np.zeros(4)
        raw[1]["extra"] = np.zeros(4)
        with pytest.raises(ChainStructureError):
            restructure_chains(raw)

    def test_vector_dimension_mismatch_raises(self) -> None:
        raw = make_raw(n_chains=2, n_samples=6)
        raw[1]["mu"] = np.zeros((6, 3))
        with pytest.raises(ChainStructureError, match="different shapes"):
            restructure_chains(raw)

    def test_no_sample_axis_raises(self) -> None:
        raw = make_raw(n_chains=2, n_samples=6)
        for chain in raw:
            chain["mu"] = np.zeros((4, 3))
        with pytest.raises(ChainStructureError, match="no axis"):
            restructure_chains(raw)

    def test_three_dimensional_raises(self) -> None:
        raw = make_raw(n_chains=1, n_samples=6)
        raw[0]["mu"] = np.zeros((6, 2, 2))
        with pytest.raises(ChainStructureError, match="1-D or 2-D"):
            restructure_chains(raw)

    def test_vector_only_fewer_samples_than_groups(self) -> None:
        # 2 saved samples of a 3-group parameter, per chain
        raw = [{"mu": np.arange(6.0).reshape(2, 3) + 100 * c} for c in range(2)]

        with pytest.raises(ChainStructureError, match="sample axis"):
            restructure_chains(raw)

        chains = restructure_chains(raw, n_samples=2)
        assert chains.n_samples == 2
        assert chains.names == ["mu[1]", "mu[2]", "mu[3]"]
        assert_array_equal(chains.chain("mu[1]", 0), [0.0, 3.0])
        assert_array_equal(chains.chain("mu[3]", 1), [102.0, 105.0])

    def test_vector_only_single_sample(self) -> None:
        raw = [{"mu": [[10.0, 12.0]], "sigma": [[2.0, 2.5]]} for _ in range(3)]
        chains = restructure_chains(raw, n_samples=1)

        assert chains.n_samples == 1
        assert chains.n_chains == 3
        assert_array_equal(chains["sigma[2]"], [[2.5, 2.5, 2.5]])

    def test_vector_only_shared_axis(self) -> None:
        raw = [{"mu": np.zeros((6, 2)), "tau": np.zeros((3, 6))} for _ in range(2)]
        chains = restructure_chains(raw)
        assert chains.n_samples == 6
        assert chains.names == ["mu[1]", "mu[2]", "tau[1]", "tau[2]", "tau[3]"]

    def test_expected_sample_count_mismatch_raises(self) -> None:
        with pytest.raises(ChainStructureError, match="expected 5"):
            restructure_chains(make_raw(n_samples=6), n_samples=5)

    def test_split_name_collision_raises(self) -> None:
        raw = make_raw(n_chains=2)
        for chain in raw:
            chain["mu[1]"] = np.zeros(6)
        with pytest.raises(ChainStructureError, match="overwrite"):
            restructure_chains(raw)

    def test_empty_raises(self) -> None:
        with pytest.raises(ChainStructureError):
            restructure_chains([])
        with pytest.raises(ChainStructureError):
            restructure_chains([{}])

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            restructure_chains([])

    def test_does_not_mutate_input(self) -> None:
        raw = make_raw(n_chains=2)
        before = [{k: v.copy() for k, v in chain.items()} for chain in raw]
        restructure_chains(raw)
        for chain, saved in zip(raw, before):
            for name in saved:
                assert_array_equal(chain[name], saved[name])

    def test_read_only(self) -> None:
        chains = restructure_chains(make_raw())
        with pytest.raises(ValueError):
            chains["nu"][0, 0] = 1.0

    def test_chain_index_out_of_range(self) -> None:
        chains = restructure_chains(make_raw(n_chains=2))
        with pytest.raises(IndexError):
            chains.chain("nu", 2)

    def test_to_inference_data(self) -> None:
        chains = restructure_chains(make_raw(n_chains=2, n_samples=6))
        idata = chains.to_inference_data()
        assert idata.posterior.sizes["chain"] == 2
        assert idata.posterior.sizes["draw"] == 6
        assert "mu[1]" in idata.posterior


class TestPooling:
    """Tests for pool_chains."""

    @pytest.mark.parametrize("n_chains,n_samples", [(1, 10), (3, 6), (4, 25)])
    def test_pooled_length(self, n_chains: int, n_samples: int) -> None:
        pooled = pool_chains(restructure_chains(make_raw(n_chains, n_samples)))
        assert pooled.n_draws == n_chains * n_samples
        for name in pooled:
            assert len(pooled[name]) == n_chains * n_samples

    def test_pooled_order(self) -> None:
        pooled = restructure_chains(make_raw(n_chains=3, n_samples=4)).pool()
        expected = np.concatenate([c * 100 + np.arange(4.0) for c in range(3)])
        assert_array_equal(pooled["nu"], expected)
        assert_array_equal(pooled["mu[2]"], expected + 0.5)

    def test_pooled_is_mapping(self) -> None:
        pooled = restructure_chains(make_raw()).pool()
        assert isinstance(pooled, PooledChain)
        assert set(pooled) == {"mu[1]", "mu[2]", "nu"}
        assert len(pooled) == 3

    def test_pooled_length_mismatch_raises(self) -> None:
        with pytest.raises(ChainStructureError):
            PooledChain({"a": np.zeros(3), "b": np.zeros(4)})

    def test_chain_set_validates_shapes(self) -> None:
        with pytest.raises(ChainStructureError):
            ChainSet({"a": np.zeros((3, 2)), "b": np.zeros((4, 2))})
