"""Simulated live event for exercising the engine end to end.

Teams get hidden strengths; judges walk the floor concurrently, asking for
their next team until the matchmaker reports they are done.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog

from judging_engine.core.errors import NoEligibleTeamsError
from judging_engine.engine import JudgingEngine
from judging_engine.models import Criterion, Event, Judge, JudgingMode, TeamStatus
from judging_engine.ranking import calculate_expected_win_chance
from judging_engine.services.standings import TeamStanding

logger = structlog.get_logger()

SIMULATED_CRITERIA = (
    ("Innovation", 2.0),
    ("Execution", 1.0),
    ("Presentation", 1.0),
)


@dataclass
class SimulationReport:
    """Outcome of a simulated event.

    Attributes:
        event_id: Event created for the run.
        standings: Final leaderboard.
        strengths: Hidden strength per team id.
        visits: Completed visits per judge id.
    """

    event_id: str
    standings: list[TeamStanding]
    strengths: dict[str, float]
    visits: dict[str, int] = field(default_factory=dict)

    @property
    def total_visits(self) -> int:
        return sum(self.visits.values())


async def simulate_event(
    engine: JudgingEngine,
    mode: JudgingMode | str = JudgingMode.PAIRWISE_JUDGE,
    teams: int = 8,
    judges: int = 4,
    min_judges_per_project: int = 2,
    draw_rate: float = 0.1,
    max_visits_per_judge: int | None = None,
    seed: int = 42,
) -> SimulationReport:
    """Run one simulated event through the engine.

    Args:
        engine: Engine to drive.
        mode: Judging mode of the simulated event.
        teams: Number of approved teams.
        judges: Number of external judges.
        min_judges_per_project: Event's per-team judging target.
        draw_rate: Chance that a pairwise comparison is called a draw.
        max_visits_per_judge: Optional cap on visits per judge.
        seed: Seed for strengths and judge decisions.

    Returns:
        SimulationReport with the final standings.
    """
    rng = random.Random(seed)  # noqa: S311
    judging_mode = JudgingMode(mode)
    now = datetime.now(UTC)
    event = await engine.store.events.create_event(
        name=f"Simulated {judging_mode.value} event",
        mode=judging_mode,
        start_time=now,
        end_time=now + timedelta(hours=3),
        min_judges_per_project=min_judges_per_project,
    )

    criteria: list[Criterion] = []
    if judging_mode is JudgingMode.CRITERIA_BASED:
        for name, weight in SIMULATED_CRITERIA:
            criteria.append(await engine.store.events.add_criterion(event.id, name, weight=weight))

    strengths: dict[str, float] = {}
    for i in range(1, teams + 1):
        team = await engine.store.rosters.add_team(
            f"Team {i:02d}", status=TeamStatus.APPROVED, location=f"T{i}"
        )
        strengths[team.id] = rng.gauss(0.0, 200.0)

    judge_rows = [
        await engine.store.rosters.add_judge(event.id, f"Judge {i:02d}")
        for i in range(1, judges + 1)
    ]
    await engine.store.events.advance_status(event.id, "active")

    logger.info("simulation_start", event_id=event.id, teams=teams, judges=judges)
    visit_counts = await asyncio.gather(
        *(
            _walk_floor(
                engine,
                event,
                judge,
                strengths,
                criteria,
                random.Random(rng.randrange(2**32)),  # noqa: S311
                draw_rate,
                max_visits_per_judge,
            )
            for judge in judge_rows
        )
    )
    await engine.store.events.advance_status(event.id, "completed")

    standings = await engine.get_team_standings(event.id)
    visits = {judge.id: count for judge, count in zip(judge_rows, visit_counts, strict=True)}
    logger.info("simulation_complete", event_id=event.id, visits=sum(visits.values()))
    return SimulationReport(
        event_id=event.id, standings=standings, strengths=strengths, visits=visits
    )


async def _walk_floor(
    engine: JudgingEngine,
    event: Event,
    judge: Judge,
    strengths: dict[str, float],
    criteria: list[Criterion],
    rng: random.Random,
    draw_rate: float,
    max_visits: int | None,
) -> int:
    """Drive one judge until exhausted. Returns completed visits."""
    previous: str | None = None
    visits = 0
    while max_visits is None or visits < max_visits:
        try:
            assignment = await engine.get_next_assignment(event.id, judge.id)
        except NoEligibleTeamsError:
            break

        current = assignment.team_id
        if criteria:
            scores = {c.id: _criterion_score(c, strengths[current], rng) for c in criteria}
            await engine.submit_criteria_result(assignment.id, scores, comment="simulated")
        elif previous is None:
            await engine.record_first_visit(judge.id, assignment.id)
        else:
            winner, loser = _decide(current, previous, strengths, rng)
            await engine.record_vote(
                judge.id,
                event.id,
                winner,
                loser,
                is_draw=rng.random() < draw_rate,
                assignment_id=assignment.id,
            )
        previous = current
        visits += 1
    return visits


def _decide(
    team_a: str, team_b: str, strengths: dict[str, float], rng: random.Random
) -> tuple[str, str]:
    p_a = calculate_expected_win_chance(strengths[team_a], strengths[team_b])
    return (team_a, team_b) if rng.random() < p_a else (team_b, team_a)


def _criterion_score(criterion: Criterion, strength: float, rng: random.Random) -> float:
    midpoint = (criterion.min_score + criterion.max_score) / 2
    raw = round(midpoint + strength / 100 + rng.gauss(0.0, 1.0))
    return float(min(max(raw, criterion.min_score), criterion.max_score))
