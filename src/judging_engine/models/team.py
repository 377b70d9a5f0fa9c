import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel


class TeamStatus(StrEnum):
    """Registration review status. Only approved teams are judged."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Team(SQLModel, table=True):
    """A competing team from the registration roster."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True)
    status: str = TeamStatus.PENDING
    location: str | None = None  # table number or other physical spot
