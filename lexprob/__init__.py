"""
lexprob — Probabilistic Legal Reasoning Engine.

Architecture:
    lexprob/
    ├── engine/          # Network, evaluator, Monte Carlo, entailment, risk
    ├── schemas/         # Pydantic snapshot models
    ├── config.py        # Settings (env / .env)
    ├── exceptions.py    # Error codes and exception hierarchy
    └── logging_config.py

Module Boundaries:
    - The rule-evaluation layer builds a network once per rule
    - Per-case calls pass evidence as (attribute, bool) pairs
    - Consumers never mutate the network they were given
    - Nothing is persisted; snapshots are for the caller to store

Data Flow:
    add_node / add_conditional_probability → BayesianNetwork
    → Evaluator | MonteCarloSimulator | EntailmentEngine | RiskQuantifier

Version: 1.0.0
"""

__version__ = "1.0.0"
