"""Database persistence for events and their criteria."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, delete, select

from judging_engine.core.errors import InvalidStateError, ValidationError
from judging_engine.models import (
    EVENT_STATUS_ORDER,
    Assignment,
    Criterion,
    Event,
    EventStatus,
    Judge,
    JudgingMode,
    Result,
    TeamRating,
    Vote,
)
from judging_engine.scoring import validate_criterion_definition

from .queries import event_criteria, get_event
from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class EventRepository(AsyncRepository):
    """Create, advance and delete judging events."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def create_event(
        self,
        name: str,
        mode: JudgingMode | str,
        start_time: datetime,
        end_time: datetime,
        min_judges_per_project: int = 2,
        room_count: int = 1,
    ) -> Event:
        """Create an event in ``setup`` status."""
        try:
            judging_mode = JudgingMode(mode)
        except ValueError as e:
            modes = ", ".join(m.value for m in JudgingMode)
            raise ValidationError(f"Unknown judging mode '{mode}'", f"Use one of: {modes}.") from e
        if start_time >= end_time:
            raise ValidationError("Event must start before it ends")
        if min_judges_per_project < 1:
            raise ValidationError("min_judges_per_project must be at least 1")
        if room_count < 1:
            raise ValidationError("room_count must be at least 1")

        event = Event(
            name=name,
            mode=judging_mode,
            start_time=start_time,
            end_time=end_time,
            min_judges_per_project=min_judges_per_project,
            room_count=room_count,
        )

        def _save(session: Session) -> Event:
            session.add(event)
            return event

        saved = await self._run_transaction(_save)
        logger.info("event_created", event_id=saved.id, mode=saved.mode)
        return saved

    async def get_event(self, event_id: str) -> Event:
        return await self._run_session(lambda session: get_event(session, event_id))

    async def advance_status(self, event_id: str, status: EventStatus | str) -> Event:
        """Move an event one step forward in its lifecycle.

        Raises:
            InvalidStateError: On backwards, repeated or skipped transitions.
        """
        target = EventStatus(status)

        def _advance(session: Session) -> Event:
            event = get_event(session, event_id)
            current = EventStatus(event.status)
            if EVENT_STATUS_ORDER.index(target) != EVENT_STATUS_ORDER.index(current) + 1:
                raise InvalidStateError(
                    f"Event '{event_id}' cannot move from {current} to {target}",
                    "Events go setup -> active -> completed.",
                )
            event.status = target
            session.add(event)
            return event

        event = await self._run_transaction(_advance)
        logger.info("event_status_changed", event_id=event_id, status=str(target))
        return event

    async def add_criterion(
        self,
        event_id: str,
        name: str,
        weight: float = 1.0,
        min_score: float = 1.0,
        max_score: float = 10.0,
        description: str = "",
    ) -> Criterion:
        validate_criterion_definition(name, weight, min_score, max_score)

        def _save(session: Session) -> Criterion:
            get_event(session, event_id)
            criterion = Criterion(
                event_id=event_id,
                name=name.strip(),
                description=description,
                weight=weight,
                min_score=min_score,
                max_score=max_score,
            )
            session.add(criterion)
            return criterion

        return await self._run_transaction(_save)

    async def list_criteria(self, event_id: str) -> list[Criterion]:
        return await self._run_session(lambda session: event_criteria(session, event_id))

    async def delete_event(self, event_id: str) -> None:
        """Delete an event and everything it owns in one transaction.

        Children go first so no pending assignment or vote is ever left
        pointing at a missing event.
        """

        def _delete(session: Session) -> dict[str, int]:
            get_event(session, event_id)
            removed: dict[str, int] = {}
            for model in (Vote, Result, Assignment, Judge, Criterion, TeamRating):
                statement = delete(model).where(col(model.event_id) == event_id)
                removed[model.__name__.lower()] = session.exec(statement).rowcount
            session.exec(delete(Event).where(col(Event.id) == event_id))
            return removed

        removed = await self._run_transaction(_delete)
        logger.info("event_deleted", event_id=event_id, **removed)

    async def list_events(self) -> list[Event]:
        def _get(session: Session) -> list[Event]:
            statement = select(Event).order_by(col(Event.created_at))
            return list(session.exec(statement).all())

        return await self._run_session(_get)
