"""Comparison resolver: applies a pairwise vote to both teams' ratings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session

from judging_engine.core.errors import (
    ForbiddenError,
    InvalidStateError,
    ValidationError,
)
from judging_engine.models import AssignmentStatus, TeamRating, TeamStatus, Vote
from judging_engine.ranking import EloSystem
from judging_engine.services.assignment import close_assignment
from judging_engine.services.storage import AsyncRepository
from judging_engine.services.storage.queries import (
    get_assignment,
    get_event,
    get_judge,
    get_team,
    team_rating,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


@dataclass(frozen=True)
class VoteOutcome:
    """Ratings of both teams after a vote was applied."""

    winner_score: float
    loser_score: float
    vote_id: str


class ComparisonResolver(AsyncRepository):
    """Records pairwise votes and updates the rating store.

    The rating updates, the vote row, the assignment status and the judge's
    current pointer are written in one transaction.
    """

    def __init__(self, engine: Engine, elo: EloSystem | None = None) -> None:
        super().__init__(engine)
        self.elo = elo or EloSystem()

    async def record_vote(
        self,
        judge_id: str,
        event_id: str,
        winning_team_id: str,
        losing_team_id: str,
        is_draw: bool,
        assignment_id: str,
    ) -> VoteOutcome:
        """Apply one decided comparison.

        Args:
            judge_id: Submitting judge.
            event_id: Event the vote belongs to.
            winning_team_id: Preferred team (first team on a draw).
            losing_team_id: Other team (second team on a draw).
            is_draw: Whether the judge found both teams equal.
            assignment_id: Pending assignment the vote resolves.

        Returns:
            New ratings of the winning and losing teams.

        Raises:
            ValidationError: If team references are missing, identical, or do
                not include the assignment's team.
            NotFoundError: If the event, a team, the judge or the assignment
                does not exist.
            InvalidStateError: If the event is not active or not pairwise, a
                team is not approved, or the assignment is no longer pending.
            ForbiddenError: If the assignment belongs to another judge or event.
        """
        if not winning_team_id or not losing_team_id:
            raise ValidationError("A vote needs both a winning and a losing team")
        if winning_team_id == losing_team_id:
            raise ValidationError("A team cannot be compared against itself")
        if not assignment_id:
            raise ValidationError("A vote must reference the assignment it resolves")

        def _record(session: Session) -> VoteOutcome:
            event = get_event(session, event_id)
            if not event.is_active:
                raise InvalidStateError(f"Event '{event_id}' is {event.status}, not active")
            if not event.judging_mode.is_pairwise:
                raise InvalidStateError(
                    f"Event '{event_id}' uses {event.mode} judging",
                    "Submit criteria results instead of votes.",
                )
            for team in (get_team(session, winning_team_id), get_team(session, losing_team_id)):
                if team.status != TeamStatus.APPROVED:
                    raise InvalidStateError(
                        f"Team '{team.id}' is {team.status}, not approved",
                        "Only approved teams can be compared.",
                    )
            get_judge(session, judge_id)

            assignment = get_assignment(session, assignment_id)
            if assignment.judge_id != judge_id:
                raise ForbiddenError(
                    f"Assignment '{assignment_id}' does not belong to judge '{judge_id}'"
                )
            if assignment.event_id != event_id:
                raise ForbiddenError(
                    f"Assignment '{assignment_id}' does not belong to event '{event_id}'"
                )
            if assignment.status != AssignmentStatus.PENDING:
                raise InvalidStateError(
                    f"Assignment '{assignment_id}' is already {assignment.status}"
                )
            if assignment.team_id not in (winning_team_id, losing_team_id):
                raise ValidationError(
                    f"Vote does not include the assigned team '{assignment.team_id}'"
                )

            winner = self._rating_row(session, event_id, winning_team_id)
            loser = self._rating_row(session, event_id, losing_team_id)
            winner.rating, loser.rating = self.elo.update(winner.rating, loser.rating, is_draw)
            winner.confidence += 1
            loser.confidence += 1
            session.add(winner)
            session.add(loser)

            vote = Vote(
                event_id=event_id,
                judge_id=judge_id,
                winning_team_id=winning_team_id,
                losing_team_id=losing_team_id,
                is_draw=is_draw,
                assignment_id=assignment_id,
            )
            session.add(vote)
            close_assignment(session, assignment, AssignmentStatus.COMPLETED)
            return VoteOutcome(
                winner_score=winner.rating,
                loser_score=loser.rating,
                vote_id=vote.id,
            )

        outcome = await self._run_transaction(_record)
        logger.info(
            "vote_recorded",
            event_id=event_id,
            judge_id=judge_id,
            winner=winning_team_id,
            loser=losing_team_id,
            draw=is_draw,
            winner_score=round(outcome.winner_score, 2),
            loser_score=round(outcome.loser_score, 2),
        )
        return outcome

    def _rating_row(self, session: Session, event_id: str, team_id: str) -> TeamRating:
        row = team_rating(session, event_id, team_id)
        if row is None:
            row = TeamRating(event_id=event_id, team_id=team_id, rating=self.elo.initial_rating)
        return row
