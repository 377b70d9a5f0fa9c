"""Elo rating calculations for pairwise demo judging."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_K_FACTOR = 32.0
DEFAULT_SCALE = 400.0

WIN = 1.0
DRAW = 0.5
LOSS = 0.0


def calculate_expected_win_chance(
    rating_a: float, rating_b: float, scale: float = DEFAULT_SCALE
) -> float:
    """Calculate expected score for team A against team B.

    Uses the standard Elo formula:
    E_A = 1 / (1 + 10^((R_B - R_A) / scale))

    Args:
        rating_a: Rating of team A.
        rating_b: Rating of team B.
        scale: Rating difference that makes A ten times as likely to win.

    Returns:
        Probability that A wins (0.0 to 1.0).
    """
    return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / scale))


def update_elo(
    winner_rating: float,
    loser_rating: float,
    is_draw: bool = False,
    k_factor: float = DEFAULT_K_FACTOR,
    scale: float = DEFAULT_SCALE,
) -> tuple[float, float]:
    """Update Elo ratings after a decided comparison.

    On a draw both teams are pulled toward each other by scoring each side
    against a target of 0.5 instead of 1 and 0.

    Args:
        winner_rating: Current rating of the winning (or first drawn) team.
        loser_rating: Current rating of the losing (or second drawn) team.
        is_draw: Whether the judge declared a draw.
        k_factor: Maximum rating movement per vote.
        scale: Elo scale factor.

    Returns:
        Tuple of (new_winner_rating, new_loser_rating).
    """
    expected_winner = calculate_expected_win_chance(winner_rating, loser_rating, scale)
    expected_loser = calculate_expected_win_chance(loser_rating, winner_rating, scale)

    if is_draw:
        actual_winner, actual_loser = DRAW, DRAW
    else:
        actual_winner, actual_loser = WIN, LOSS

    new_winner = winner_rating + k_factor * (actual_winner - expected_winner)
    new_loser = loser_rating + k_factor * (actual_loser - expected_loser)

    return new_winner, new_loser


@dataclass(frozen=True)
class EloSystem:
    """Elo parameters bound together for the comparison resolver.

    Attributes:
        k_factor: Maximum rating movement per vote.
        scale: Elo scale factor.
        initial_rating: Rating assumed for a team before its first comparison.
    """

    k_factor: float = DEFAULT_K_FACTOR
    scale: float = DEFAULT_SCALE
    initial_rating: float = 0.0

    def expected(self, rating_a: float, rating_b: float) -> float:
        return calculate_expected_win_chance(rating_a, rating_b, self.scale)

    def update(
        self, winner_rating: float, loser_rating: float, is_draw: bool = False
    ) -> tuple[float, float]:
        """Return (new_winner_rating, new_loser_rating) for one vote."""
        return update_elo(
            winner_rating,
            loser_rating,
            is_draw=is_draw,
            k_factor=self.k_factor,
            scale=self.scale,
        )
