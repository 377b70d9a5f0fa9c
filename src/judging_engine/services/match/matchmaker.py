"""Matchmaker: decides which team a judge visits next."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session

from judging_engine.core.errors import ForbiddenError, InvalidStateError, NoEligibleTeamsError
from judging_engine.models import (
    Assignment,
    AssignmentStatus,
    Event,
    Judge,
    JudgeClass,
    Team,
    TeamStatus,
)
from judging_engine.services.assignment import close_assignment
from judging_engine.services.storage import AsyncRepository
from judging_engine.services.storage.queries import (
    approved_teams,
    get_event,
    get_judge,
    judged_counts,
    judged_team_ids,
    pending_assignment_for,
)

from .selection import eligible_candidates, select_candidate

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class Matchmaker(AsyncRepository):
    """Selects the next team for a judge and opens a pending assignment.

    Callers must serialize requests for the same judge; the one-pending rule
    is re-checked inside the creating transaction.
    """

    def __init__(
        self,
        engine: Engine,
        rng: random.Random | None = None,
        require_team_location: bool = True,
    ) -> None:
        """Initialize the matchmaker.

        Args:
            engine: Database engine.
            rng: Random source for team selection.
            require_team_location: In pairwise modes, skip teams without a table.
        """
        super().__init__(engine)
        self.rng = rng or random.Random()  # noqa: S311
        self.require_team_location = require_team_location

    async def next_assignment(self, event_id: str, judge_id: str) -> Assignment:
        """Return the judge's next assignment, creating it if needed.

        A judge that already holds a pending assignment gets that same
        assignment back, unless its team has since been rejected or, in a
        pairwise event that requires tables, lost its location. Such an
        assignment is skipped and a fresh team is chosen; the skip sticks
        even when no replacement is left.

        Raises:
            NotFoundError: If the event or judge does not exist.
            InvalidStateError: If the event is not active.
            ForbiddenError: If the judge belongs to another event.
            NoEligibleTeamsError: If no team is left for this judge.
        """

        def _next(session: Session) -> tuple[Assignment | None, bool, Assignment | None]:
            event = get_event(session, event_id)
            if not event.is_active:
                raise InvalidStateError(f"Event '{event_id}' is {event.status}, not active")
            judge = get_judge(session, judge_id)
            if judge.event_id != event_id:
                raise ForbiddenError(f"Judge '{judge_id}' is not registered for event '{event_id}'")

            pending = pending_assignment_for(session, judge_id)
            dropped = None
            if pending is not None:
                if self._is_judgeable(event, session.get(Team, pending.team_id)):
                    return pending, False, None
                # Team was rejected or lost its table after the visit was handed out.
                close_assignment(session, pending, AssignmentStatus.SKIPPED)
                dropped = pending

            team_ids = [t.id for t in approved_teams(session) if self._is_judgeable(event, t)]
            candidates = eligible_candidates(
                team_ids,
                already_judged=judged_team_ids(session, event_id, judge_id),
                judged_counts=judged_counts(session, event_id),
                min_judges_per_project=event.min_judges_per_project,
                exclude=self._own_team(judge),
            )
            chosen = select_candidate(candidates, self.rng)
            if chosen is None:
                return None, False, dropped

            assignment = Assignment(event_id=event_id, judge_id=judge_id, team_id=chosen.team_id)
            session.add(assignment)
            judge.current_assignment_id = assignment.id
            session.add(judge)
            return assignment, True, dropped

        assignment, created, dropped = await self._run_transaction(_next)
        if dropped is not None:
            logger.info(
                "assignment_dropped",
                event_id=event_id,
                judge_id=judge_id,
                team_id=dropped.team_id,
                assignment_id=dropped.id,
            )
        if assignment is None:
            raise NoEligibleTeamsError(event_id, judge_id)
        logger.info(
            "assignment_created" if created else "assignment_reused",
            event_id=event_id,
            judge_id=judge_id,
            team_id=assignment.team_id,
            assignment_id=assignment.id,
        )
        return assignment

    def _is_judgeable(self, event: Event, team: Team | None) -> bool:
        if team is None or team.status != TeamStatus.APPROVED:
            return False
        if event.judging_mode.is_pairwise and self.require_team_location:
            return bool(team.location)
        return True

    @staticmethod
    def _own_team(judge: Judge) -> tuple[str, ...]:
        if judge.judge_class == JudgeClass.INTERNAL_PARTICIPANT and judge.team_id:
            return (judge.team_id,)
        return ()
