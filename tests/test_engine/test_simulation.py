"""
Monte Carlo Simulator Tests.

Includes property-based tests via Hypothesis.
"""

import pytest
from hypothesis import given, settings as hyp_settings
from hypothesis import strategies as st

from lexprob.engine.network import BayesianNetwork
from lexprob.engine.simulation import (
    LCG_MODULUS,
    N_BUCKETS,
    LinearCongruentialGenerator,
    MonteCarloSimulator,
    SimulationResult,
)
from lexprob.exceptions import InvalidIterationCount

SEED = 42


class TestLinearCongruentialGenerator:
    """Test the PRNG recurrence."""

    def test_first_draws(self):
        """state = (state × 1103515245 + 12345) mod 2^31, draw = state / (2^31 − 1)."""
        rng = LinearCongruentialGenerator(0)
        assert rng.next_float() == 12345 / (2 ** 31 - 1)
        assert rng.state == 12345

        expected_state = (12345 * 1103515245 + 12345) % 2 ** 31
        assert rng.next_float() == expected_state / (2 ** 31 - 1)
        assert rng.state == expected_state

    def test_same_seed_same_stream(self):
        """Two generators with one seed agree draw for draw."""
        a = LinearCongruentialGenerator(SEED)
        b = LinearCongruentialGenerator(SEED)
        assert [a.next_float() for _ in range(50)] == [b.next_float() for _ in range(50)]

    @given(seed=st.integers(min_value=0, max_value=2 ** 63))
    @hyp_settings(max_examples=100)
    def test_state_stays_31_bit(self, seed):
        """Draws stay within [0, 1] and state within 31 bits."""
        rng = LinearCongruentialGenerator(seed)
        for _ in range(5):
            value = rng.next_float()
            assert 0.0 <= value <= 1.0
            assert 0 <= rng.state < LCG_MODULUS


class TestSimulationResult:
    """Test result helpers."""

    def test_helpers(self):
        """Significance, CI width and coefficient of variation."""
        result = SimulationResult(1000, 0.75, 0.05, 0.5, 0.95, (0.70, 0.80), [])
        assert result.is_significant
        assert result.confidence_width == pytest.approx(0.10)
        assert result.coefficient_of_variation == pytest.approx(0.0667, abs=1e-3)

    def test_zero_mean_cv(self):
        """Coefficient of variation is 0 for a zero mean."""
        result = SimulationResult(10, 0.0, 0.0, 0.0, 0.0, (0.0, 0.0), [])
        assert result.coefficient_of_variation == 0.0

    def test_not_significant(self):
        """std_dev ≥ 0.1 is not significant."""
        result = SimulationResult(10, 0.5, 0.2, 0.0, 1.0, (0.4, 0.6), [])
        assert not result.is_significant


class TestSimulate:
    """Test simulate()."""

    def setup_method(self):
        self.network = BayesianNetwork()
        self.network.add_node("condition", 0.75)

    def test_parentless_target(self):
        """A parentless target yields its prior on every iteration."""
        result = MonteCarloSimulator(self.network, seed=SEED).simulate("condition", 1000)
        assert result.iterations == 1000
        assert result.mean == 0.75
        assert result.std_dev == 0.0
        assert result.min == result.max == 0.75
        assert result.confidence_interval == (0.75, 0.75)
        assert len(result.distribution) == N_BUCKETS
        assert dict(result.distribution)["0.70-0.80"] == 1000

    def test_seeded_runs_identical(self):
        """Same seed and iterations → identical results."""
        first = MonteCarloSimulator(self.network, seed=SEED).simulate("condition", 500)
        second = MonteCarloSimulator(self.network, seed=SEED).simulate("condition", 500)
        assert first == second
        assert sum(count for _, count in first.distribution) == 500

    def test_seeded_runs_identical_with_parents(self, eligibility_network):
        """Determinism holds when sampled parents change the outcome."""
        first = MonteCarloSimulator(eligibility_network, seed=SEED).simulate("eligible", 800)
        second = MonteCarloSimulator(eligibility_network, seed=SEED).simulate("eligible", 800)
        assert first == second
        assert first.std_dev > 0.0

    def test_repeat_calls_restart_stream(self, eligibility_network):
        """Each call starts a fresh stream from the seed."""
        simulator = MonteCarloSimulator(eligibility_network, seed=SEED)
        assert simulator.simulate("eligible", 300) == simulator.simulate("eligible", 300)

    def test_bucket_labels(self):
        """Ten equal-width labelled buckets over [0, 1]."""
        result = MonteCarloSimulator(self.network, seed=SEED).simulate("condition", 10)
        labels = [label for label, _ in result.distribution]
        assert labels[0] == "0.00-0.10"
        assert labels[4] == "0.40-0.50"
        assert labels[-1] == "0.90-1.00"

    def test_mean_tracks_marginal(self, income_network):
        """Sampled mean approaches P(employed)·0.85 + P(¬employed)·0.085."""
        result = MonteCarloSimulator(income_network, seed=SEED).simulate(
            "income_sufficient", 4000
        )
        expected = 0.7 * 0.85 + 0.3 * 0.085
        assert abs(result.mean - expected) < 0.05
        assert result.min == pytest.approx(0.085)
        assert result.max == pytest.approx(0.85)

    def test_unknown_target(self):
        """Missing target → every outcome 0.0."""
        result = MonteCarloSimulator(self.network, seed=SEED).simulate("missing", 100)
        assert result.mean == 0.0
        assert result.confidence_interval == (0.0, 0.0)
        assert result.distribution[0] == ("0.00-0.10", 100)

    def test_certain_outcome_in_last_bucket(self):
        """Outcome 1.0 is counted in the last bucket."""
        network = BayesianNetwork()
        network.add_conditional_probability("child", ["parent"], 1.0)
        result = MonteCarloSimulator(network, seed=SEED).simulate_with_evidence(
            "child", [("parent", True)], 200
        )
        assert result.distribution[-1] == ("0.90-1.00", 200)
        assert result.confidence_interval == (1.0, 1.0)

    @pytest.mark.parametrize("iterations", [0, -5])
    def test_invalid_iterations(self, iterations):
        """Iteration count must be positive."""
        simulator = MonteCarloSimulator(self.network, seed=SEED)
        with pytest.raises(InvalidIterationCount):
            simulator.simulate("condition", iterations)

    def test_unseeded(self):
        """Unseeded simulators still produce valid summaries."""
        simulator = MonteCarloSimulator(self.network)
        assert simulator.seed is None
        result = simulator.simulate("condition", 100)
        assert result.mean == 0.75

    def test_seed_accessor(self):
        """The seed is exposed as given."""
        assert MonteCarloSimulator(self.network, seed=123).seed == 123

    def test_isolated_from_original_network(self):
        """The simulator works on a frozen private copy."""
        simulator = MonteCarloSimulator(self.network, seed=SEED)
        self.network.add_node("condition", 0.1)
        assert simulator.simulate("condition", 10).mean == 0.75
        assert simulator.network.is_frozen


class TestSimulateWithEvidence:
    """Test simulate_with_evidence()."""

    def test_fixed_parent(self):
        """Fixing the only parent pins every outcome."""
        network = BayesianNetwork()
        network.add_node("parent", 0.8)
        network.add_conditional_probability("child", ["parent"], 0.9)

        result = MonteCarloSimulator(network, seed=SEED).simulate_with_evidence(
            "child", [("parent", True)], 500
        )
        assert result.iterations == 500
        assert result.mean == pytest.approx(0.9)
        assert result.std_dev == pytest.approx(0.0, abs=1e-12)

    def test_partial_evidence_keeps_sampling(self, eligibility_network):
        """Unfixed parents are still sampled."""
        result = MonteCarloSimulator(eligibility_network, seed=SEED).simulate_with_evidence(
            "eligible", {"age_verified": True}, 2000
        )
        assert result.min == pytest.approx(0.95 * 0.3)
        assert result.max == pytest.approx(0.95)
        assert result.confidence_interval[0] <= result.mean <= result.confidence_interval[1]

    def test_empty_evidence_matches_simulate(self, eligibility_network):
        """No fixed evidence draws exactly like simulate()."""
        simulator = MonteCarloSimulator(eligibility_network, seed=SEED)
        assert simulator.simulate_with_evidence("eligible", [], 400) == simulator.simulate(
            "eligible", 400
        )

    def test_fixed_nodes_consume_no_draws(self):
        """A fixed node leaves the stream to the remaining nodes."""
        network = BayesianNetwork()
        network.add_node("fixed", 0.5)
        network.add_node("free", 0.5)
        network.add_conditional_probability("target", ["free"], 0.8)

        with_fixed = MonteCarloSimulator(network, seed=SEED).simulate_with_evidence(
            "target", {"fixed": True}, 200
        )

        reduced = BayesianNetwork()
        reduced.add_node("free", 0.5)
        reduced.add_conditional_probability("target", ["free"], 0.8)
        without = MonteCarloSimulator(reduced, seed=SEED).simulate("target", 200)

        # "target" itself draws in both networks; only "fixed" is skipped
        assert with_fixed == without

    def test_repeated_fixed_id_first_pair_wins(self):
        """A repeated id keeps its first value, matching query()."""
        network = BayesianNetwork()
        network.add_node("p", 0.5)
        network.add_conditional_probability("child", ["p"], 0.9)
        pairs = [("p", True), ("p", False)]

        result = MonteCarloSimulator(network, seed=SEED).simulate_with_evidence(
            "child", pairs, 100
        )
        assert result.mean == pytest.approx(0.9)
        assert result.mean == pytest.approx(network.query("child", pairs))


class TestSimulationProperties:
    """Property-based tests using Hypothesis."""

    @given(
        seed=st.integers(min_value=0, max_value=2 ** 32),
        iterations=st.integers(min_value=1, max_value=200),
        p=st.floats(min_value=0.0, max_value=1.0),
        prior_a=st.floats(min_value=0.0, max_value=1.0),
        prior_b=st.floats(min_value=0.0, max_value=1.0),
    )
    @hyp_settings(max_examples=50, deadline=None)
    def test_summary_invariants(self, seed, iterations, p, prior_a, prior_b):
        """Histogram sums to N; CI ordered and clamped; extrema bracket the mean."""
        network = BayesianNetwork()
        network.add_node("a", prior_a)
        network.add_node("b", prior_b)
        network.add_conditional_probability("target", ["a", "b"], p)

        result = MonteCarloSimulator(network, seed=seed).simulate("target", iterations)

        assert result.iterations == iterations
        assert len(result.distribution) == N_BUCKETS
        assert sum(count for _, count in result.distribution) == iterations
        lower, upper = result.confidence_interval
        assert 0.0 <= lower <= upper <= 1.0
        assert result.min - 1e-12 <= result.mean <= result.max + 1e-12
        assert result.std_dev >= 0.0
