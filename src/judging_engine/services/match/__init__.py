from .matchmaker import Matchmaker
from .selection import Candidate, eligible_candidates, select_candidate

__all__ = [
    "Candidate",
    "Matchmaker",
    "eligible_candidates",
    "select_candidate",
]
