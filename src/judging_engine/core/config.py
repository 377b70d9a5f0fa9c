"""Configuration schemas and loading for the judging engine."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from judging_engine.core.errors import ConfigurationError

DEFAULT_DATABASE_URL = "duckdb:///judging.duckdb"


class RatingConfig(BaseModel):
    """Elo parameters for pairwise comparisons.

    Attributes:
        k_factor: Maximum rating movement per vote.
        scale: Rating difference at which the favourite is 10x as likely to win.
        initial_rating: Rating given to a team on its first comparison.
    """

    k_factor: float = 32.0
    scale: float = 400.0
    initial_rating: float = 0.0

    @field_validator("k_factor", "scale")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            msg = "must be positive"
            raise ValueError(msg)
        return v


class MatchmakingConfig(BaseModel):
    """Team selection settings.

    Attributes:
        require_team_location: In pairwise modes, only route judges to teams
            that have a table/location token.
        seed: Seed for the selection random source. None draws from the OS.
    """

    require_team_location: bool = True
    seed: int | None = None


class EngineConfig(BaseModel):
    """Complete engine configuration."""

    database_url: str = DEFAULT_DATABASE_URL
    rating: RatingConfig = Field(default_factory=RatingConfig)
    matchmaking: MatchmakingConfig = Field(default_factory=MatchmakingConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if "://" not in v:
            msg = "database_url must be a SQLAlchemy URL such as 'duckdb:///judging.duckdb'"
            raise ValueError(msg)
        return v


def load_config(path: str | Path) -> EngineConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated EngineConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file is not a YAML mapping.
        pydantic.ValidationError: If config values are invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top of {config_path}",
            "Write the configuration as 'key: value' pairs.",
        )

    return EngineConfig.model_validate(data)
