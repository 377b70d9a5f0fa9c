import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel


class JudgeClass(StrEnum):
    INTERNAL_PARTICIPANT = "internal-participant"
    EXTERNAL = "external"


class Judge(SQLModel, table=True):
    """A judge bound to one event.

    ``current_assignment_id`` points at the judge's single pending assignment
    and is only changed when an assignment is created, completed or skipped.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    event_id: str = Field(index=True)
    judge_class: str = JudgeClass.EXTERNAL
    team_id: str | None = None  # own team, for participant judges
    assigned_room: int | None = None
    current_assignment_id: str | None = None
