"""Rating updates for pairwise judging."""

from __future__ import annotations

from typing import TYPE_CHECKING

from judging_engine.ranking.elo import (
    DEFAULT_K_FACTOR,
    DEFAULT_SCALE,
    EloSystem,
    calculate_expected_win_chance,
    update_elo,
)

if TYPE_CHECKING:
    from judging_engine.core.config import EngineConfig


def create_elo_system(config: EngineConfig) -> EloSystem:
    """Create the Elo system described by the engine config."""
    return EloSystem(
        k_factor=config.rating.k_factor,
        scale=config.rating.scale,
        initial_rating=config.rating.initial_rating,
    )


__all__ = [
    "DEFAULT_K_FACTOR",
    "DEFAULT_SCALE",
    "EloSystem",
    "calculate_expected_win_chance",
    "create_elo_system",
    "update_elo",
]
