"""Assignment lifecycle: pending -> completed | skipped.

Completed and skipped are terminal. Closing an assignment either way frees
the judge to request the next team.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from sqlmodel import Session, col, select

from judging_engine.core.errors import ForbiddenError, InvalidStateError
from judging_engine.models import Assignment, AssignmentStatus, Judge
from judging_engine.services.storage import AsyncRepository
from judging_engine.services.storage.queries import get_assignment, get_event

logger = structlog.get_logger()

TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.PENDING: frozenset({AssignmentStatus.COMPLETED, AssignmentStatus.SKIPPED}),
    AssignmentStatus.COMPLETED: frozenset(),
    AssignmentStatus.SKIPPED: frozenset(),
}


def can_transition(current: AssignmentStatus | str, target: AssignmentStatus | str) -> bool:
    return AssignmentStatus(target) in TRANSITIONS[AssignmentStatus(current)]


def transition(assignment: Assignment, target: AssignmentStatus) -> None:
    """Move an assignment to ``target`` or raise InvalidStateError."""
    if not can_transition(assignment.status, target):
        raise InvalidStateError(
            f"Assignment '{assignment.id}' is {assignment.status}, cannot become {target}",
            "Only pending assignments can be completed or skipped.",
        )
    assignment.status = target
    assignment.resolved_at = datetime.now(UTC)


def close_assignment(session: Session, assignment: Assignment, target: AssignmentStatus) -> None:
    """Resolve an assignment and clear the owning judge's current pointer.

    Stages the changes on ``session``; the caller commits.
    """
    transition(assignment, target)
    session.add(assignment)

    judge = session.get(Judge, assignment.judge_id)
    if judge is not None and judge.current_assignment_id == assignment.id:
        judge.current_assignment_id = None
        session.add(judge)


class AssignmentService(AsyncRepository):
    """Skip and inspect assignments."""

    async def get_assignment(self, assignment_id: str) -> Assignment:
        return await self._run_session(lambda session: get_assignment(session, assignment_id))

    async def skip(self, assignment_id: str) -> Assignment:
        """Skip a pending assignment without recording a vote or result.

        The team stays eligible for every judge, this one included.

        Raises:
            NotFoundError: If the assignment does not exist.
            InvalidStateError: If the assignment is already completed or skipped.
        """

        def _skip(session: Session) -> Assignment:
            assignment = get_assignment(session, assignment_id)
            close_assignment(session, assignment, AssignmentStatus.SKIPPED)
            return assignment

        assignment = await self._run_transaction(_skip)
        logger.info(
            "assignment_skipped",
            assignment_id=assignment_id,
            judge_id=assignment.judge_id,
            team_id=assignment.team_id,
        )
        return assignment

    async def complete_first_visit(self, judge_id: str, assignment_id: str) -> Assignment:
        """Complete a judge's opening pairwise visit, which has nothing to compare against.

        The team becomes the baseline for the judge's first vote. No vote is
        written and no rating moves.

        Raises:
            NotFoundError: If the assignment or its event does not exist.
            ForbiddenError: If the assignment belongs to another judge.
            InvalidStateError: If the event is not an active pairwise event, the
                assignment is not pending, or the judge already completed a visit.
        """

        def _complete(session: Session) -> Assignment:
            assignment = get_assignment(session, assignment_id)
            if assignment.judge_id != judge_id:
                raise ForbiddenError(
                    f"Assignment '{assignment_id}' does not belong to judge '{judge_id}'"
                )
            event = get_event(session, assignment.event_id)
            if not event.is_active or not event.judging_mode.is_pairwise:
                raise InvalidStateError(
                    f"Event '{event.id}' is not an active pairwise event",
                )
            statement = select(Assignment.id).where(
                Assignment.event_id == event.id,
                Assignment.judge_id == judge_id,
                Assignment.status == AssignmentStatus.COMPLETED,
            )
            if session.exec(statement).first() is not None:
                raise InvalidStateError(
                    f"Judge '{judge_id}' already has a baseline team",
                    "Record a vote against the previous team instead.",
                )
            close_assignment(session, assignment, AssignmentStatus.COMPLETED)
            return assignment

        assignment = await self._run_transaction(_complete)
        logger.info(
            "first_visit_completed",
            judge_id=judge_id,
            team_id=assignment.team_id,
            assignment_id=assignment_id,
        )
        return assignment

    async def list_for_judge(self, event_id: str, judge_id: str) -> list[Assignment]:
        """All assignments a judge received in an event, newest first."""

        def _get(session: Session) -> list[Assignment]:
            statement = (
                select(Assignment)
                .where(Assignment.event_id == event_id, Assignment.judge_id == judge_id)
                .order_by(col(Assignment.created_at).desc())
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)
