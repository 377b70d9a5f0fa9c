"""Core configuration and utilities for the judging engine."""

from judging_engine.core.config import (
    DEFAULT_DATABASE_URL,
    EngineConfig,
    MatchmakingConfig,
    RatingConfig,
    load_config,
)
from judging_engine.core.errors import (
    ConfigurationError,
    ForbiddenError,
    InvalidStateError,
    JudgingError,
    NoCriteriaDefinedError,
    NoEligibleTeamsError,
    NotFoundError,
    ValidationError,
)
from judging_engine.core.locks import KeyedLocks

__all__ = [
    "DEFAULT_DATABASE_URL",
    "EngineConfig",
    "MatchmakingConfig",
    "RatingConfig",
    "KeyedLocks",
    "load_config",
    "ConfigurationError",
    "ForbiddenError",
    "InvalidStateError",
    "JudgingError",
    "NoCriteriaDefinedError",
    "NoEligibleTeamsError",
    "NotFoundError",
    "ValidationError",
]
