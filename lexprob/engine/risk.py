"""
Risk Quantifier.

Maps the probability of a risk proposition onto a four-band category and
attaches a Monte Carlo confidence interval.

Bands (lower bound inclusive):
    p ≥ 0.75 → CRITICAL
    p ≥ 0.50 → HIGH
    p ≥ 0.25 → MODERATE
    else     → LOW
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import structlog

from lexprob.config import Settings, get_settings
from lexprob.engine.network import BayesianNetwork, Evidence, normalize_evidence
from lexprob.engine.simulation import MonteCarloSimulator
from lexprob.exceptions import check_iterations

logger = structlog.get_logger(__name__)

# ── Configuration ─────────────────────────────────────────────────────────

DEFAULT_SIMULATIONS: int = 5000
CRITICAL_THRESHOLD: float = 0.75
HIGH_THRESHOLD: float = 0.5
MODERATE_THRESHOLD: float = 0.25
ACCEPTABLE_BELOW: float = 0.5


class RiskCategory(str, Enum):
    """Risk band derived purely from a probability."""
    LOW = "low"              # < 0.25
    MODERATE = "moderate"    # 0.25 - 0.5
    HIGH = "high"            # 0.5 - 0.75
    CRITICAL = "critical"    # >= 0.75

    @classmethod
    def from_probability(cls, probability: float) -> "RiskCategory":
        if probability >= CRITICAL_THRESHOLD:
            return cls.CRITICAL
        if probability >= HIGH_THRESHOLD:
            return cls.HIGH
        if probability >= MODERATE_THRESHOLD:
            return cls.MODERATE
        return cls.LOW

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    RiskCategory.LOW: "Low risk - proceed with normal monitoring",
    RiskCategory.MODERATE: "Moderate risk - enhanced monitoring recommended",
    RiskCategory.HIGH: "High risk - immediate attention required",
    RiskCategory.CRITICAL: "Critical risk - urgent action needed",
}


@dataclass(frozen=True)
class RiskLevel:
    """Result of risk quantification."""
    risk_id: str
    risk_probability: float
    confidence_interval: tuple[float, float]
    category: RiskCategory
    explanation: str

    @property
    def is_acceptable(self) -> bool:
        return self.risk_probability < ACCEPTABLE_BELOW

    @property
    def requires_immediate_action(self) -> bool:
        return self.category in (RiskCategory.HIGH, RiskCategory.CRITICAL)


class RiskQuantifier:
    """
    Assesses legal/regulatory risk using network queries and Monte Carlo
    confidence intervals.
    """

    def __init__(
        self,
        network: BayesianNetwork,
        simulations: int = DEFAULT_SIMULATIONS,
        seed: Optional[int] = None,
    ):
        self._network = network.copy().freeze()
        self._simulations = check_iterations(simulations, name="simulations")
        self._seed = seed

    def quantify_risk(self, risk_id: str, evidence: Optional[Evidence] = None) -> RiskLevel:
        """Probability, category and confidence interval for one risk."""
        known = normalize_evidence(evidence)
        probability = self._network.query(risk_id, known)

        simulator = MonteCarloSimulator(self._network, seed=self._seed)
        sim_result = simulator.simulate_with_evidence(risk_id, known, self._simulations)
        ci_lower, ci_upper = sim_result.confidence_interval

        category = RiskCategory.from_probability(probability)
        explanation = (
            f"{category.description} - Probability: {probability * 100:.1f}%, "
            f"CI: ({ci_lower:.2f}, {ci_upper:.2f})"
        )

        if category is RiskCategory.CRITICAL:
            logger.warning("risk_critical", risk_id=risk_id, probability=probability)
        else:
            logger.debug(
                "risk_quantified",
                risk_id=risk_id,
                probability=probability,
                category=category.value,
            )

        return RiskLevel(
            risk_id=risk_id,
            risk_probability=probability,
            confidence_interval=sim_result.confidence_interval,
            category=category,
            explanation=explanation,
        )

    def assess_risks(
        self, risk_ids: Sequence[str], evidence: Optional[Evidence] = None
    ) -> list[RiskLevel]:
        """quantify_risk() for each id, in input order."""
        known = normalize_evidence(evidence)
        return [self.quantify_risk(risk_id, known) for risk_id in risk_ids]

    def high_priority_risks(
        self, risk_ids: Sequence[str], evidence: Optional[Evidence] = None
    ) -> list[RiskLevel]:
        """Assessed risks in the HIGH or CRITICAL band."""
        return [r for r in self.assess_risks(risk_ids, evidence) if r.requires_immediate_action]

    @property
    def network(self) -> BayesianNetwork:
        return self._network

    @property
    def simulations(self) -> int:
        return self._simulations


def create_risk_quantifier(
    network: BayesianNetwork, settings: Optional[Settings] = None
) -> RiskQuantifier:
    """Factory function to create a RiskQuantifier from settings."""
    settings = settings or get_settings()
    return RiskQuantifier(
        network.copy(strict=network.strict or settings.strict_queries),
        simulations=settings.risk_simulations,
        seed=settings.random_seed,
    )
