"""
Probabilistic Entailment Engine.

Given known facts, reports every other proposition whose probability meets
the threshold, each with a Monte Carlo confidence interval computed with
the facts held fixed.

Results follow network insertion order.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

import structlog

from lexprob.config import Settings, get_settings
from lexprob.engine.network import BayesianNetwork, Evidence, normalize_evidence
from lexprob.engine.simulation import MonteCarloSimulator
from lexprob.exceptions import check_iterations, check_probability

logger = structlog.get_logger(__name__)

# ── Configuration ─────────────────────────────────────────────────────────

DEFAULT_THRESHOLD: float = 0.5
DEFAULT_SIMULATIONS: int = 1000
HIGHLY_PROBABLE: float = 0.8      # highly_probable_entailments lower bound
MODERATELY_PROBABLE: float = 0.6  # explanation label band
UNCERTAIN_BELOW: float = 0.6


@dataclass(frozen=True)
class ProbabilisticEntailment:
    """A likely conclusion derived from evidence."""
    proposition: str
    probability: float
    confidence_interval: tuple[float, float]
    evidence: list[tuple[str, bool]] = field(default_factory=list)
    explanation: str = ""

    def __post_init__(self) -> None:
        check_probability(self.probability)

    @property
    def is_highly_probable(self) -> bool:
        return self.probability >= HIGHLY_PROBABLE

    @property
    def is_uncertain(self) -> bool:
        return self.probability < UNCERTAIN_BELOW

    @property
    def confidence_width(self) -> float:
        return self.confidence_interval[1] - self.confidence_interval[0]

    @property
    def probability_category(self) -> str:
        """Very High (≥0.9) | High (≥0.75) | Moderate (≥0.5) | Low (≥0.25) | Very Low."""
        p = self.probability
        if p >= 0.9:
            return "Very High"
        if p >= 0.75:
            return "High"
        if p >= 0.5:
            return "Moderate"
        if p >= 0.25:
            return "Low"
        return "Very Low"


class ProbabilisticEntailmentEngine:
    """
    Computes which legal conclusions follow from facts, with probability
    and confidence intervals.
    """

    def __init__(
        self,
        network: BayesianNetwork,
        threshold: float = DEFAULT_THRESHOLD,
        simulations: int = DEFAULT_SIMULATIONS,
        seed: Optional[int] = None,
    ):
        self._network = network.copy().freeze()
        self._threshold = check_probability(threshold, name="threshold")
        self._simulations = check_iterations(simulations, name="simulations")
        self._seed = seed

    def entail(self, evidence: Optional[Evidence] = None) -> list[ProbabilisticEntailment]:
        """
        Every node outside ``evidence`` whose probability ≥ threshold.

        Explanation bands: High (≥0.8), Moderate (≥0.6), otherwise Low.
        Each result records a pair-list ``evidence`` exactly as given,
        duplicates included; a mapping is recorded as its items.
        """
        if evidence is None or isinstance(evidence, Mapping):
            known = normalize_evidence(evidence)
            evidence_list = list(known.items())
        else:
            evidence_list = [(node_id, state) for node_id, state in evidence]
            known = normalize_evidence(evidence_list)
        entailments: list[ProbabilisticEntailment] = []

        for node_id in self._network.nodes:
            if node_id in known:
                continue

            probability = self._network.query(node_id, known)
            if probability < self._threshold:
                continue

            simulator = MonteCarloSimulator(self._network, seed=self._seed)
            sim_result = simulator.simulate_with_evidence(node_id, known, self._simulations)
            ci_lower, ci_upper = sim_result.confidence_interval

            if probability >= HIGHLY_PROBABLE:
                label = "High"
            elif probability >= MODERATELY_PROBABLE:
                label = "Moderate"
            else:
                label = "Low"

            explanation = (
                f"Probability: {probability * 100:.1f}%, Category: {label}, "
                f"CI: ({ci_lower:.2f}, {ci_upper:.2f})"
            )
            entailments.append(ProbabilisticEntailment(
                proposition=node_id,
                probability=probability,
                confidence_interval=sim_result.confidence_interval,
                evidence=list(evidence_list),
                explanation=explanation,
            ))

        logger.info(
            "entailment_complete",
            n_evidence=len(known),
            n_nodes=self._network.node_count(),
            n_entailed=len(entailments),
            threshold=self._threshold,
        )
        return entailments

    def highly_probable_entailments(
        self, evidence: Optional[Evidence] = None
    ) -> list[ProbabilisticEntailment]:
        """entail() restricted to probability ≥ 0.8."""
        return [e for e in self.entail(evidence) if e.is_highly_probable]

    @property
    def network(self) -> BayesianNetwork:
        return self._network

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def simulations(self) -> int:
        return self._simulations

    def set_simulations(self, simulations: int) -> None:
        self._simulations = check_iterations(simulations, name="simulations")


def create_entailment_engine(
    network: BayesianNetwork, settings: Optional[Settings] = None
) -> ProbabilisticEntailmentEngine:
    """Factory function to create a ProbabilisticEntailmentEngine from settings."""
    settings = settings or get_settings()
    return ProbabilisticEntailmentEngine(
        network.copy(strict=network.strict or settings.strict_queries),
        threshold=settings.default_threshold,
        simulations=settings.entailment_simulations,
        seed=settings.random_seed,
    )
