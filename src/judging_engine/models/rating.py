import uuid

from sqlmodel import Field, SQLModel


class TeamRating(SQLModel, table=True):
    """Relative strength of a team within one event."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    event_id: str = Field(index=True)
    team_id: str = Field(index=True)
    rating: float = 0.0
    confidence: int = 0  # number of votes that moved the rating
