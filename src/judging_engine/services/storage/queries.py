"""Session-level lookups shared by the judging services.

Every helper takes an open Session so callers can compose several reads and
writes into a single transaction.
"""

from __future__ import annotations

from collections import Counter
from typing import TypeVar

from sqlmodel import Session, SQLModel, col, select

from judging_engine.core.errors import NotFoundError
from judging_engine.models import (
    Assignment,
    AssignmentStatus,
    Criterion,
    Event,
    Judge,
    Team,
    TeamRating,
    TeamStatus,
)

M = TypeVar("M", bound=SQLModel)


def get_or_raise(session: Session, model: type[M], entity_id: str | None, entity: str) -> M:
    """Load a row by primary key or raise NotFoundError."""
    row = session.get(model, entity_id) if entity_id else None
    if row is None:
        raise NotFoundError(entity, entity_id)
    return row


def get_event(session: Session, event_id: str) -> Event:
    return get_or_raise(session, Event, event_id, "event")


def get_judge(session: Session, judge_id: str) -> Judge:
    return get_or_raise(session, Judge, judge_id, "judge")


def get_team(session: Session, team_id: str) -> Team:
    return get_or_raise(session, Team, team_id, "team")


def get_assignment(session: Session, assignment_id: str) -> Assignment:
    return get_or_raise(session, Assignment, assignment_id, "assignment")


def pending_assignment_for(session: Session, judge_id: str) -> Assignment | None:
    """Return the judge's pending assignment, if any."""
    statement = select(Assignment).where(
        Assignment.judge_id == judge_id,
        Assignment.status == AssignmentStatus.PENDING,
    )
    return session.exec(statement).first()


def judged_team_ids(session: Session, event_id: str, judge_id: str) -> set[str]:
    """Teams this judge has completed or is currently visiting.

    Skipped assignments do not count as judged.
    """
    statement = select(Assignment.team_id).where(
        Assignment.event_id == event_id,
        Assignment.judge_id == judge_id,
        Assignment.status != AssignmentStatus.SKIPPED,
    )
    return set(session.exec(statement).all())


def judged_counts(session: Session, event_id: str) -> Counter[str]:
    """Number of non-skipped assignments per team in the event."""
    statement = select(Assignment.team_id).where(
        Assignment.event_id == event_id,
        Assignment.status != AssignmentStatus.SKIPPED,
    )
    return Counter(session.exec(statement).all())


def approved_teams(session: Session) -> list[Team]:
    statement = (
        select(Team).where(Team.status == TeamStatus.APPROVED).order_by(col(Team.id))
    )
    return list(session.exec(statement).all())


def event_criteria(session: Session, event_id: str) -> list[Criterion]:
    statement = (
        select(Criterion).where(Criterion.event_id == event_id).order_by(col(Criterion.id))
    )
    return list(session.exec(statement).all())


def team_rating(session: Session, event_id: str, team_id: str) -> TeamRating | None:
    statement = select(TeamRating).where(
        TeamRating.event_id == event_id,
        TeamRating.team_id == team_id,
    )
    return session.exec(statement).first()
