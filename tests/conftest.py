"""
Test fixtures for lexprob tests.

Provides:
- Small legal networks used across engine tests
- Settings isolated from the caller's environment
"""

from typing import Iterator

import pytest

from lexprob.config import Settings, get_settings
from lexprob.engine.network import BayesianNetwork


@pytest.fixture
def eligibility_network() -> BayesianNetwork:
    """eligible ← (age_verified, income_verified), p_all_true = 0.95."""
    network = BayesianNetwork()
    network.add_node("age_verified", 0.90)
    network.add_node("income_verified", 0.85)
    network.add_conditional_probability("eligible", ["age_verified", "income_verified"], 0.95)
    return network


@pytest.fixture
def income_network() -> BayesianNetwork:
    """income_sufficient ← employed, p_true = 0.85."""
    network = BayesianNetwork()
    network.add_node("employed", 0.70)
    network.add_conditional_probability("income_sufficient", ["employed"], 0.85)
    return network


@pytest.fixture
def licensing_network() -> BayesianNetwork:
    """Mixed network: one dependent conclusion plus independent facts."""
    network = BayesianNetwork()
    network.add_node("has_license", 0.70)
    network.add_conditional_probability("can_practice_law", ["has_license"], 0.98)
    network.add_node("bar_member", 0.65)
    network.add_node("pending_complaint", 0.20)
    return network


@pytest.fixture
def isolated_settings(monkeypatch) -> Iterator[Settings]:
    """Default settings with no LEXPROB_* environment leaking in."""
    for name in (
        "LEXPROB_DEFAULT_THRESHOLD",
        "LEXPROB_ENTAILMENT_SIMULATIONS",
        "LEXPROB_RISK_SIMULATIONS",
        "LEXPROB_RANDOM_SEED",
        "LEXPROB_STRICT_QUERIES",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield Settings(_env_file=None)
    get_settings.cache_clear()
