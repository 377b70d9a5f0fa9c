"""Judging event record and its lifecycle vocabulary."""

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel


class JudgingMode(StrEnum):
    """How judges evaluate teams during an event."""

    PAIRWISE_PARTICIPANT = "pairwise-participant"
    PAIRWISE_JUDGE = "pairwise-judge"
    CRITERIA_BASED = "criteria-based"

    @property
    def is_pairwise(self) -> bool:
        return self is not JudgingMode.CRITERIA_BASED


class EventStatus(StrEnum):
    """Event lifecycle. Transitions only move forward."""

    SETUP = "setup"
    ACTIVE = "active"
    COMPLETED = "completed"


EVENT_STATUS_ORDER = (EventStatus.SETUP, EventStatus.ACTIVE, EventStatus.COMPLETED)


class Event(SQLModel, table=True):
    """A judging session that owns its judges, criteria, assignments and votes."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    mode: str
    status: str = EventStatus.SETUP
    start_time: datetime
    end_time: datetime
    min_judges_per_project: int = 2
    room_count: int = 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def judging_mode(self) -> JudgingMode:
        return JudgingMode(self.mode)

    @property
    def is_active(self) -> bool:
        return self.status == EventStatus.ACTIVE
