"""Judging engine facade: the operations exposed to the request layer.

Every judge interaction arrives as an independent, possibly concurrent call.
Work touching one judge is serialized by a per-judge lock, rating updates by
per-team locks. Judge locks are always taken before team locks.
"""

from __future__ import annotations

import random
from collections.abc import Awaitable, Mapping
from typing import TypeVar

import structlog

from judging_engine.core.config import EngineConfig
from judging_engine.core.errors import JudgingError, NoEligibleTeamsError
from judging_engine.core.locks import KeyedLocks
from judging_engine.models import Assignment
from judging_engine.ranking import create_elo_system
from judging_engine.services import (
    AssignmentService,
    ComparisonResolver,
    CriteriaOutcome,
    CriteriaResultService,
    Matchmaker,
    StandingsService,
    TeamStanding,
    VoteOutcome,
)
from judging_engine.services.storage import JudgingStore

logger = structlog.get_logger()

T = TypeVar("T")


class JudgingEngine:
    """Entry point for matchmaking, voting, skipping, scoring and standings."""

    def __init__(
        self,
        store: JudgingStore,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Storage layer holding rosters, events and judging records.
            config: Engine configuration. Defaults are used if None.
            rng: Random source for team selection. Seeded from the config when
                not given.
        """
        self.config = config or EngineConfig(database_url=store.database_url)
        self.store = store
        if rng is None:
            rng = random.Random(self.config.matchmaking.seed)  # noqa: S311

        engine = store.engine
        self.matchmaker = Matchmaker(
            engine,
            rng=rng,
            require_team_location=self.config.matchmaking.require_team_location,
        )
        self.resolver = ComparisonResolver(engine, elo=create_elo_system(self.config))
        self.assignments = AssignmentService(engine)
        self.results = CriteriaResultService(engine)
        self.standings = StandingsService(
            engine, initial_rating=self.config.rating.initial_rating
        )

        self._judge_locks = KeyedLocks()
        self._team_locks = KeyedLocks()

    @classmethod
    def from_config(cls, config: EngineConfig) -> JudgingEngine:
        """Build an engine and its store from configuration."""
        return cls(JudgingStore(config.database_url), config)

    async def get_next_assignment(self, event_id: str, judge_id: str) -> Assignment:
        """Return the judge's next team visit.

        Raises:
            NoEligibleTeamsError: When judging is complete for this judge for now.
        """
        async with self._judge_locks.hold(judge_id):
            return await self._reported(
                "get_next_assignment",
                self.matchmaker.next_assignment(event_id, judge_id),
            )

    async def record_vote(
        self,
        judge_id: str,
        event_id: str,
        winning_team_id: str,
        losing_team_id: str,
        is_draw: bool,
        assignment_id: str,
    ) -> VoteOutcome:
        """Apply a pairwise vote and close its assignment."""
        async with (
            self._judge_locks.hold(judge_id),
            self._team_locks.hold(
                _team_key(event_id, winning_team_id),
                _team_key(event_id, losing_team_id),
            ),
        ):
            return await self._reported(
                "record_vote",
                self.resolver.record_vote(
                    judge_id,
                    event_id,
                    winning_team_id,
                    losing_team_id,
                    is_draw,
                    assignment_id,
                ),
            )

    async def record_first_visit(self, judge_id: str, assignment_id: str) -> Assignment:
        """Close a judge's opening pairwise visit so it can anchor the first vote."""
        async with self._judge_locks.hold(judge_id):
            return await self._reported(
                "record_first_visit",
                self.assignments.complete_first_visit(judge_id, assignment_id),
            )

    async def skip_assignment(self, assignment_id: str) -> None:
        """Skip a pending assignment, freeing the judge."""
        assignment = await self._reported(
            "skip_assignment", self.assignments.get_assignment(assignment_id)
        )
        async with self._judge_locks.hold(assignment.judge_id):
            await self._reported("skip_assignment", self.assignments.skip(assignment_id))

    async def submit_criteria_result(
        self,
        assignment_id: str,
        scores: Mapping[str, float],
        comment: str = "",
    ) -> CriteriaOutcome:
        """Score a criteria sheet and close its assignment."""
        assignment = await self._reported(
            "submit_criteria_result", self.assignments.get_assignment(assignment_id)
        )
        async with (
            self._judge_locks.hold(assignment.judge_id),
            self._team_locks.hold(_team_key(assignment.event_id, assignment.team_id)),
        ):
            return await self._reported(
                "submit_criteria_result",
                self.results.submit(assignment_id, scores, comment),
            )

    async def get_team_standings(self, event_id: str) -> list[TeamStanding]:
        """Return the ranked teams of an event."""
        return await self._reported("get_team_standings", self.standings.team_standings(event_id))

    async def close(self) -> None:
        await self.store.close()

    async def _reported(self, operation: str, call: Awaitable[T]) -> T:
        """Await ``call`` and log typed failures before re-raising them."""
        try:
            return await call
        except NoEligibleTeamsError as e:
            logger.info("judging_exhausted", operation=operation, judge_id=e.judge_id)
            raise
        except JudgingError as e:
            logger.warning("judging_rejected", operation=operation, kind=e.kind, reason=e.message)
            raise


def _team_key(event_id: str, team_id: str | None) -> str | None:
    return f"{event_id}:{team_id}" if team_id else None
