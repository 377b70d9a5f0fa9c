"""Database persistence for the team and judge rosters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from judging_engine.core.errors import ValidationError
from judging_engine.models import Judge, JudgeClass, Team, TeamStatus

from .queries import get_event, get_judge, get_team
from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class RosterRepository(AsyncRepository):
    """Persist teams and judges supplied by the registration system."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def add_team(
        self,
        name: str,
        status: TeamStatus | str = TeamStatus.PENDING,
        location: str | None = None,
    ) -> Team:
        if not name or not name.strip():
            raise ValidationError("Team name cannot be empty")
        team = Team(name=name.strip(), status=TeamStatus(status), location=location)

        def _save(session: Session) -> Team:
            session.add(team)
            return team

        return await self._run_transaction(_save)

    async def update_team(
        self,
        team_id: str,
        status: TeamStatus | str | None = None,
        location: str | None = None,
    ) -> Team:
        """Change a team's review status and/or its location token."""

        def _update(session: Session) -> Team:
            team = get_team(session, team_id)
            if status is not None:
                team.status = TeamStatus(status)
            if location is not None:
                team.location = location or None
            session.add(team)
            return team

        return await self._run_transaction(_update)

    async def get_team(self, team_id: str) -> Team:
        return await self._run_session(lambda session: get_team(session, team_id))

    async def list_teams(self) -> list[Team]:
        def _get(session: Session) -> list[Team]:
            return list(session.exec(select(Team).order_by(col(Team.name))).all())

        return await self._run_session(_get)

    async def add_judge(
        self,
        event_id: str,
        name: str,
        judge_class: JudgeClass | str = JudgeClass.EXTERNAL,
        team_id: str | None = None,
        assigned_room: int | None = None,
    ) -> Judge:
        """Register a judge for an event.

        Participant judges may name their own team so they are never sent to it.
        """
        if not name or not name.strip():
            raise ValidationError("Judge name cannot be empty")
        klass = JudgeClass(judge_class)
        if team_id is not None and klass is not JudgeClass.INTERNAL_PARTICIPANT:
            raise ValidationError("Only internal-participant judges belong to a team")

        def _save(session: Session) -> Judge:
            event = get_event(session, event_id)
            if team_id is not None:
                get_team(session, team_id)
            if assigned_room is not None and not 0 <= assigned_room < event.room_count:
                raise ValidationError(
                    f"Room {assigned_room} does not exist",
                    f"Event has {event.room_count} room(s), numbered from 0.",
                )
            judge = Judge(
                event_id=event_id,
                name=name.strip(),
                judge_class=klass,
                team_id=team_id,
                assigned_room=assigned_room,
            )
            session.add(judge)
            return judge

        judge = await self._run_transaction(_save)
        logger.info("judge_added", event_id=event_id, judge_id=judge.id, judge_class=str(klass))
        return judge

    async def get_judge(self, judge_id: str) -> Judge:
        return await self._run_session(lambda session: get_judge(session, judge_id))

    async def list_judges(self, event_id: str) -> list[Judge]:
        def _get(session: Session) -> list[Judge]:
            statement = select(Judge).where(Judge.event_id == event_id).order_by(col(Judge.name))
            return list(session.exec(statement).all())

        return await self._run_session(_get)
