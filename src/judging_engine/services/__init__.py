"""Judging services built on the storage layer."""

from judging_engine.services.assignment import AssignmentService, close_assignment, transition
from judging_engine.services.match import Matchmaker
from judging_engine.services.resolver import ComparisonResolver, VoteOutcome
from judging_engine.services.results import CriteriaOutcome, CriteriaResultService
from judging_engine.services.standings import StandingsService, TeamStanding, render_standings

__all__ = [
    "AssignmentService",
    "ComparisonResolver",
    "CriteriaOutcome",
    "CriteriaResultService",
    "Matchmaker",
    "StandingsService",
    "TeamStanding",
    "VoteOutcome",
    "close_assignment",
    "render_standings",
    "transition",
]
