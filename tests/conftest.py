"""Shared fixtures: a fresh SQLite-backed engine per test."""

import random
from datetime import UTC, datetime, timedelta

import pytest

from judging_engine.core.config import EngineConfig, MatchmakingConfig
from judging_engine.engine import JudgingEngine
from judging_engine.models import JudgingMode, TeamStatus
from judging_engine.services.storage import JudgingStore


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'judging.db'}"


@pytest.fixture
async def store(database_url):
    store = JudgingStore(database_url)
    yield store
    await store.close()


@pytest.fixture
def engine(store, database_url):
    config = EngineConfig(
        database_url=database_url,
        matchmaking=MatchmakingConfig(seed=7),
    )
    return JudgingEngine(store, config, rng=random.Random(7))


@pytest.fixture
def make_event(engine):
    """Create an event with approved, seated teams and external judges."""

    async def _make(
        mode=JudgingMode.PAIRWISE_JUDGE,
        teams=3,
        judges=1,
        min_judges_per_project=2,
        activate=True,
    ):
        now = datetime.now(UTC)
        event = await engine.store.events.create_event(
            name="Demo Day",
            mode=mode,
            start_time=now,
            end_time=now + timedelta(hours=2),
            min_judges_per_project=min_judges_per_project,
        )
        team_rows = [
            await engine.store.rosters.add_team(
                f"Team {i}", status=TeamStatus.APPROVED, location=f"T{i}"
            )
            for i in range(teams)
        ]
        judge_rows = [
            await engine.store.rosters.add_judge(event.id, f"Judge {i}") for i in range(judges)
        ]
        if activate:
            event = await engine.store.events.advance_status(event.id, "active")
        return event, team_rows, judge_rows

    return _make
