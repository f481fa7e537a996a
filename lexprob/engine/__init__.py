"""
lexprob Reasoning Engine — probabilistic legal reasoning.

Components:
- network: Bayesian network with conditional probability tables
- evaluator: Threshold-based yes/no decisions over network queries
- simulation: Seeded Monte Carlo estimation with confidence intervals
- entailment: Likely conclusions from known facts
- risk: Probability → risk category mapping, batch assessment
"""

from lexprob.engine.entailment import (
    ProbabilisticEntailment,
    ProbabilisticEntailmentEngine,
    create_entailment_engine,
)
from lexprob.engine.evaluator import (
    ProbabilisticEvaluator,
    ProbabilisticResult,
    create_evaluator,
)
from lexprob.engine.network import BayesianNetwork, BayesianNode, normalize_evidence
from lexprob.engine.risk import RiskCategory, RiskLevel, RiskQuantifier, create_risk_quantifier
from lexprob.engine.simulation import (
    LinearCongruentialGenerator,
    MonteCarloSimulator,
    SimulationResult,
    create_simulator,
)

__all__ = [
    # Network
    "BayesianNetwork",
    "BayesianNode",
    "normalize_evidence",
    # Evaluation
    "ProbabilisticEvaluator",
    "ProbabilisticResult",
    "create_evaluator",
    # Simulation
    "LinearCongruentialGenerator",
    "MonteCarloSimulator",
    "SimulationResult",
    "create_simulator",
    # Entailment
    "ProbabilisticEntailment",
    "ProbabilisticEntailmentEngine",
    "create_entailment_engine",
    # Risk
    "RiskCategory",
    "RiskLevel",
    "RiskQuantifier",
    "create_risk_quantifier",
]
