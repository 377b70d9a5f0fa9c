import uuid

from sqlmodel import Field, SQLModel


class Criterion(SQLModel, table=True):
    """A weighted scoring axis for criteria-based events."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    event_id: str = Field(index=True)
    name: str
    description: str = ""
    weight: float = 1.0
    min_score: float = 1.0
    max_score: float = 10.0
