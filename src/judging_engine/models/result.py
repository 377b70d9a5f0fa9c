import uuid
from datetime import UTC, datetime

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class Result(SQLModel, table=True):
    """A judge's criteria scores for one team. One row per (event, judge, team)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    event_id: str = Field(index=True)
    judge_id: str = Field(index=True)
    team_id: str = Field(index=True)
    assignment_id: str
    scores: dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON))
    overall_score: float
    comment: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
