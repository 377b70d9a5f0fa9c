"""Team standings for pairwise and criteria-based events."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlmodel import Session, select
from tabulate import tabulate

from judging_engine.models import Event, JudgingMode, Result, TeamRating
from judging_engine.services.storage import AsyncRepository
from judging_engine.services.storage.queries import approved_teams, get_event

if TYPE_CHECKING:
    from sqlalchemy import Engine


@dataclass(frozen=True)
class TeamStanding:
    """One row of the leaderboard.

    Attributes:
        team_id: Team identifier.
        rating: Elo rating (pairwise) or mean overall score (criteria).
        confidence: Votes (pairwise) or results (criteria) behind the rating.
        team_name: Display name.
    """

    team_id: str
    rating: float
    confidence: int
    team_name: str = ""


def sort_standings(rows: list[TeamStanding]) -> list[TeamStanding]:
    """Order by rating desc, then confidence desc, then team id asc."""
    return sorted(rows, key=lambda r: (-r.rating, -r.confidence, r.team_id))


class StandingsService(AsyncRepository):
    """Builds the ranked outcome of an event."""

    def __init__(self, engine: Engine, initial_rating: float = 0.0) -> None:
        super().__init__(engine)
        self.initial_rating = initial_rating

    async def team_standings(self, event_id: str) -> list[TeamStanding]:
        """Return the event's leaderboard.

        Raises:
            NotFoundError: If the event does not exist.
        """

        def _get(session: Session) -> list[TeamStanding]:
            event = get_event(session, event_id)
            if event.judging_mode is JudgingMode.CRITERIA_BASED:
                return self._criteria_standings(session, event)
            return self._pairwise_standings(session, event)

        return sort_standings(await self._run_session(_get))

    def _pairwise_standings(self, session: Session, event: Event) -> list[TeamStanding]:
        ratings = {
            r.team_id: r
            for r in session.exec(select(TeamRating).where(TeamRating.event_id == event.id)).all()
        }
        rows = []
        for team in approved_teams(session):
            rating = ratings.get(team.id)
            rows.append(
                TeamStanding(
                    team_id=team.id,
                    rating=rating.rating if rating else self.initial_rating,
                    confidence=rating.confidence if rating else 0,
                    team_name=team.name,
                )
            )
        return rows

    @staticmethod
    def _criteria_standings(session: Session, event: Event) -> list[TeamStanding]:
        by_team: defaultdict[str, list[float]] = defaultdict(list)
        for result in session.exec(select(Result).where(Result.event_id == event.id)).all():
            by_team[result.team_id].append(result.overall_score)

        names = {t.id: t.name for t in approved_teams(session)}
        return [
            TeamStanding(
                team_id=team_id,
                rating=sum(scores) / len(scores),
                confidence=len(scores),
                team_name=names[team_id],
            )
            for team_id, scores in by_team.items()
            if team_id in names
        ]


def render_standings(standings: list[TeamStanding]) -> str:
    """Render standings as a markdown table."""
    headers = ["Rank", "Team", "Rating", "Confidence"]
    rows = [
        [rank, s.team_name or s.team_id, s.rating, s.confidence]
        for rank, s in enumerate(standings, start=1)
    ]
    return tabulate(rows, headers=headers, tablefmt="github", floatfmt=".2f")
