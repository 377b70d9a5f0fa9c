import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Vote(SQLModel, table=True):
    """A decided pairwise comparison. Rows are never updated."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    event_id: str = Field(index=True)
    judge_id: str = Field(index=True)
    winning_team_id: str
    losing_team_id: str
    is_draw: bool = False
    assignment_id: str = Field(unique=True)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
