"""
Configuration - Environment-driven engine settings.

Environment variables:
    EIGHTS_ENV              development / production
    EIGHTS_DEAL_DELAY       Seconds spent in DEALING before the deal lands
    EIGHTS_OPPONENT_DELAY   Seconds the opponent "thinks" before acting
    EIGHTS_SEED             Optional integer seed for reproducible deals
    EIGHTS_LOG_LEVEL        DEBUG / INFO / WARNING / ERROR
    ALLOWED_ORIGINS         Comma-separated CORS origins for the API
"""

from __future__ import annotations
from dataclasses import dataclass
import os

EIGHTS_ENV = os.getenv("EIGHTS_ENV", "development")
EIGHTS_LOG_LEVEL = os.getenv("EIGHTS_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

DEFAULT_DEAL_DELAY = 0.5
DEFAULT_OPPONENT_DELAY = 1.5
DEFAULT_HAND_SIZE = 8


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class EngineConfig:
    """Timing and dealing settings for one game loop."""
    deal_delay: float = DEFAULT_DEAL_DELAY
    opponent_delay: float = DEFAULT_OPPONENT_DELAY
    hand_size: int = DEFAULT_HAND_SIZE
    seed: int | None = None

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from EIGHTS_* environment variables."""
        return cls(
            deal_delay=_env_float("EIGHTS_DEAL_DELAY", DEFAULT_DEAL_DELAY),
            opponent_delay=_env_float("EIGHTS_OPPONENT_DELAY", DEFAULT_OPPONENT_DELAY),
            seed=_env_int("EIGHTS_SEED"),
        )

    @classmethod
    def instant(cls, seed: int | None = None) -> EngineConfig:
        """No delays; used by the CLI and simulations."""
        return cls(deal_delay=0.0, opponent_delay=0.0, seed=seed)
