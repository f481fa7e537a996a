"""
lexprob Configuration.

Pydantic Settings v2 — loads from .env, environment variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Decision thresholds ──────────────────────────────────────────────
    default_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, alias="LEXPROB_DEFAULT_THRESHOLD",
        description="Probability at or above which a proposition is treated as true",
    )

    # ── Monte Carlo ──────────────────────────────────────────────────────
    entailment_simulations: int = Field(
        default=1000, ge=1, alias="LEXPROB_ENTAILMENT_SIMULATIONS",
    )
    risk_simulations: int = Field(default=5000, ge=1, alias="LEXPROB_RISK_SIMULATIONS")
    random_seed: Optional[int] = Field(
        default=None, alias="LEXPROB_RANDOM_SEED",
        description="Fixed PRNG seed; unset means wall-clock seeding",
    )

    # ── Network queries ──────────────────────────────────────────────────
    strict_queries: bool = Field(
        default=False, alias="LEXPROB_STRICT_QUERIES",
        description="Raise UnknownNode instead of returning 0.0 for missing ids",
    )

    # ── Operational ──────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["console", "json"] = Field(default="console", alias="LOG_FORMAT")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
