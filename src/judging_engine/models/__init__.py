from .assignment import Assignment, AssignmentStatus
from .criterion import Criterion
from .event import EVENT_STATUS_ORDER, Event, EventStatus, JudgingMode
from .judge import Judge, JudgeClass
from .rating import TeamRating
from .result import Result
from .team import Team, TeamStatus
from .vote import Vote

__all__ = [
    "EVENT_STATUS_ORDER",
    "Assignment",
    "AssignmentStatus",
    "Criterion",
    "Event",
    "EventStatus",
    "Judge",
    "JudgeClass",
    "JudgingMode",
    "Result",
    "Team",
    "TeamRating",
    "TeamStatus",
    "Vote",
]
