"""
Monte Carlo Simulator.

Estimates the distribution of a target node's *queried probability* under
random truth assignments of every other node. Each iteration draws one
uniform number per node (network insertion order), sets the node to
``draw < prior``, and records ``query(target, sampled_evidence)``.

Reproducibility: a seeded simulator yields bit-identical results for the
same network, target and iteration count. Unseeded simulators seed from
wall-clock seconds at call time and are not reproducible.
"""

import math
import statistics
import time
from dataclasses import dataclass
from typing import Optional

import structlog

from lexprob.config import Settings, get_settings
from lexprob.engine.network import BayesianNetwork, Evidence, normalize_evidence
from lexprob.exceptions import check_iterations

logger = structlog.get_logger(__name__)

# ── Configuration ─────────────────────────────────────────────────────────

LCG_MULTIPLIER: int = 1103515245
LCG_INCREMENT: int = 12345
LCG_MODULUS: int = 2 ** 31
LCG_SCALE: float = float(2 ** 31 - 1)

Z_SCORE_95: float = 1.96
N_BUCKETS: int = 10
SIGNIFICANT_STD_DEV: float = 0.1  # is_significant upper bound (exclusive)


class LinearCongruentialGenerator:
    """
    31-bit LCG: state = (state × 1103515245 + 12345) mod 2^31.

    Each draw is state / (2^31 − 1). One instance per simulation run, so
    runs never share a stream.
    """

    def __init__(self, seed: int):
        self.state = seed

    def next_float(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_SCALE


@dataclass(frozen=True)
class SimulationResult:
    """Summary statistics of a Monte Carlo run."""
    iterations: int
    mean: float
    std_dev: float                              # Population std dev
    min: float
    max: float
    confidence_interval: tuple[float, float]    # 95%, clamped to [0, 1]
    distribution: list[tuple[str, int]]         # 10 equal-width buckets

    @property
    def is_significant(self) -> bool:
        return self.std_dev < SIGNIFICANT_STD_DEV

    @property
    def confidence_width(self) -> float:
        return self.confidence_interval[1] - self.confidence_interval[0]

    @property
    def coefficient_of_variation(self) -> float:
        """Relative std dev; 0.0 when the mean is 0."""
        if self.mean == 0.0:
            return 0.0
        return self.std_dev / self.mean


class MonteCarloSimulator:
    """
    Random-sampling estimator for legal outcome probabilities.

    Holds a private frozen copy of the network.
    """

    def __init__(self, network: BayesianNetwork, seed: Optional[int] = None):
        self._network = network.copy().freeze()
        self._seed = seed

    def simulate(self, target: str, iterations: int) -> SimulationResult:
        """Sample every node independently from its prior."""
        return self._run(target, {}, iterations)

    def simulate_with_evidence(
        self,
        target: str,
        fixed_evidence: Optional[Evidence],
        iterations: int,
    ) -> SimulationResult:
        """
        Like simulate(), but nodes named in ``fixed_evidence`` keep their
        fixed value and consume no draw.

        When ``fixed_evidence`` repeats an id, the first pair wins, the same
        rule query() applies. Last-pair-wins callers must dedupe first.
        """
        return self._run(target, normalize_evidence(fixed_evidence), iterations)

    @property
    def network(self) -> BayesianNetwork:
        return self._network

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    # ── Private helpers ──────────────────────────────────────────────────

    def _run(self, target: str, fixed: dict[str, bool], iterations: int) -> SimulationResult:
        check_iterations(iterations)
        seed = self._seed if self._seed is not None else int(time.time())
        rng = LinearCongruentialGenerator(seed)
        nodes = self._network.nodes

        outcomes: list[float] = []
        for _ in range(iterations):
            sampled: dict[str, bool] = {}
            for node_id, node in nodes.items():
                if node_id in fixed:
                    sampled[node_id] = fixed[node_id]
                else:
                    sampled[node_id] = rng.next_float() < node.prior
            outcomes.append(self._network.query(target, sampled))

        result = self._summarize(outcomes)
        logger.debug(
            "simulation_complete",
            target=target,
            iterations=iterations,
            n_fixed=len(fixed),
            seeded=self._seed is not None,
            mean=round(result.mean, 6),
            std_dev=round(result.std_dev, 6),
        )
        return result

    @staticmethod
    def _summarize(outcomes: list[float]) -> SimulationResult:
        n = len(outcomes)
        mean = statistics.fmean(outcomes)
        std_dev = statistics.pstdev(outcomes, mu=mean)

        margin = Z_SCORE_95 * std_dev / math.sqrt(n)
        confidence_interval = (max(0.0, mean - margin), min(1.0, mean + margin))

        counts = [0] * N_BUCKETS
        for outcome in outcomes:
            bucket = min(math.floor(outcome * N_BUCKETS), N_BUCKETS - 1)
            counts[bucket] += 1

        distribution = [
            (f"{i / N_BUCKETS:.2f}-{(i + 1) / N_BUCKETS:.2f}", count)
            for i, count in enumerate(counts)
        ]

        return SimulationResult(
            iterations=n,
            mean=mean,
            std_dev=std_dev,
            min=min(outcomes),
            max=max(outcomes),
            confidence_interval=confidence_interval,
            distribution=distribution,
        )


def create_simulator(
    network: BayesianNetwork, settings: Optional[Settings] = None
) -> MonteCarloSimulator:
    """Factory function to create a MonteCarloSimulator from settings."""
    settings = settings or get_settings()
    return MonteCarloSimulator(
        network.copy(strict=network.strict or settings.strict_queries),
        seed=settings.random_seed,
    )
