"""Criteria-based result submission."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from sqlmodel import Session, col, select

from judging_engine.core.errors import InvalidStateError, NoCriteriaDefinedError
from judging_engine.models import AssignmentStatus, JudgingMode, Result, TeamStatus
from judging_engine.scoring import score
from judging_engine.services.assignment import close_assignment
from judging_engine.services.storage import AsyncRepository
from judging_engine.services.storage.queries import (
    event_criteria,
    get_assignment,
    get_event,
    get_team,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class CriteriaOutcome:
    overall_score: float
    result_id: str


class CriteriaResultService(AsyncRepository):
    """Scores a judge's criteria sheet and closes the assignment."""

    async def submit(
        self,
        assignment_id: str,
        scores: Mapping[str, float],
        comment: str = "",
    ) -> CriteriaOutcome:
        """Validate, score and store one criteria sheet.

        A resubmission by the same judge for the same team replaces the earlier
        result. Nothing is written when validation fails.

        Raises:
            NotFoundError: If the assignment, its event or its team does not exist.
            InvalidStateError: If the event is not an active criteria-based
                event, the assignment is not pending, or its team is not approved.
            NoCriteriaDefinedError: If the event has no criteria.
            ValidationError: If a score is unknown or out of bounds.
        """

        def _submit(session: Session) -> tuple[CriteriaOutcome, str, str]:
            assignment = get_assignment(session, assignment_id)
            event = get_event(session, assignment.event_id)
            if not event.is_active:
                raise InvalidStateError(f"Event '{event.id}' is {event.status}, not active")
            if event.judging_mode is not JudgingMode.CRITERIA_BASED:
                raise InvalidStateError(
                    f"Event '{event.id}' uses {event.mode} judging",
                    "Record a pairwise vote instead.",
                )
            if assignment.status != AssignmentStatus.PENDING:
                raise InvalidStateError(
                    f"Assignment '{assignment_id}' is already {assignment.status}"
                )
            team = get_team(session, assignment.team_id)
            if team.status != TeamStatus.APPROVED:
                raise InvalidStateError(
                    f"Team '{team.id}' is {team.status}, not approved",
                    "Skip the assignment and request the next team.",
                )

            criteria = event_criteria(session, event.id)
            if not criteria:
                raise NoCriteriaDefinedError(event.id)
            overall = score(criteria, scores)

            result = self._existing_result(
                session, event.id, assignment.judge_id, assignment.team_id
            )
            if result is None:
                result = Result(
                    event_id=event.id,
                    judge_id=assignment.judge_id,
                    team_id=assignment.team_id,
                    assignment_id=assignment_id,
                    overall_score=overall,
                )
            result.assignment_id = assignment_id
            result.scores = {cid: float(v) for cid, v in scores.items()}
            result.overall_score = overall
            result.comment = comment or ""
            result.timestamp = datetime.now(UTC)
            session.add(result)

            close_assignment(session, assignment, AssignmentStatus.COMPLETED)
            outcome = CriteriaOutcome(overall_score=overall, result_id=result.id)
            return outcome, assignment.judge_id, assignment.team_id

        outcome, judge_id, team_id = await self._run_transaction(_submit)
        logger.info(
            "criteria_result_recorded",
            assignment_id=assignment_id,
            judge_id=judge_id,
            team_id=team_id,
            overall=round(outcome.overall_score, 3),
        )
        return outcome

    @staticmethod
    def _existing_result(
        session: Session, event_id: str, judge_id: str, team_id: str
    ) -> Result | None:
        statement = select(Result).where(
            Result.event_id == event_id,
            Result.judge_id == judge_id,
            Result.team_id == team_id,
        )
        return session.exec(statement).first()

    async def results_for_team(self, event_id: str, team_id: str) -> list[Result]:
        """All results a team received in an event, newest first."""

        def _get(session: Session) -> list[Result]:
            statement = (
                select(Result)
                .where(Result.event_id == event_id, Result.team_id == team_id)
                .order_by(col(Result.timestamp).desc())
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)
