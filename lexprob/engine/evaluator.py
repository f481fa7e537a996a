"""
Probabilistic Evaluator.

Turns a network query into a yes/no decision: a proposition holds when its
probability given the evidence meets the threshold.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from lexprob.config import Settings, get_settings
from lexprob.engine.network import BayesianNetwork, Evidence
from lexprob.exceptions import check_probability

logger = structlog.get_logger(__name__)

# ── Configuration ─────────────────────────────────────────────────────────

DEFAULT_THRESHOLD: float = 0.5
HIGH_CONFIDENCE: float = 0.8      # is_highly_confident lower bound
UNCERTAIN_BELOW: float = 0.6      # is_uncertain upper bound (exclusive)


@dataclass(frozen=True)
class ProbabilisticResult:
    """Outcome of evaluating a proposition, with its confidence."""
    outcome: bool
    confidence: float       # P(proposition | evidence)
    explanation: str

    def __post_init__(self) -> None:
        check_probability(self.confidence, name="confidence")

    @property
    def is_highly_confident(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE

    @property
    def is_uncertain(self) -> bool:
        return self.confidence < UNCERTAIN_BELOW

    @property
    def confidence_level(self) -> str:
        """Coarse label: Very High | High | Moderate | Low | Very Low."""
        c = self.confidence
        if c >= 0.9:
            return "Very High"
        if c >= 0.8:
            return "High"
        if c >= 0.6:
            return "Moderate"
        if c >= 0.4:
            return "Low"
        return "Very Low"


class ProbabilisticEvaluator:
    """
    Threshold-based evaluation of propositions over a Bayesian network.

    Holds a private frozen copy of the network.
    """

    def __init__(self, network: BayesianNetwork, threshold: float = DEFAULT_THRESHOLD):
        self._network = network.copy().freeze()
        self._threshold = check_probability(threshold, name="threshold")

    def evaluate(self, proposition: str, evidence: Optional[Evidence] = None) -> ProbabilisticResult:
        """Evaluate a proposition given evidence."""
        probability = self._network.query(proposition, evidence)
        outcome = probability >= self._threshold
        explanation = (
            f"Probability: {probability * 100:.2f}%, "
            f"Threshold: {self._threshold * 100:.2f}%"
        )

        logger.debug(
            "proposition_evaluated",
            proposition=proposition,
            probability=probability,
            threshold=self._threshold,
            outcome=outcome,
        )
        return ProbabilisticResult(outcome, probability, explanation)

    @property
    def network(self) -> BayesianNetwork:
        return self._network

    @property
    def threshold(self) -> float:
        return self._threshold

    def set_threshold(self, threshold: float) -> None:
        self._threshold = check_probability(threshold, name="threshold")


def create_evaluator(
    network: BayesianNetwork, settings: Optional[Settings] = None
) -> ProbabilisticEvaluator:
    """Factory function to create a ProbabilisticEvaluator from settings."""
    settings = settings or get_settings()
    return ProbabilisticEvaluator(
        network.copy(strict=network.strict or settings.strict_queries),
        threshold=settings.default_threshold,
    )
