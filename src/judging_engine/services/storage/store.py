"""Unified storage entry point: engine setup plus roster and event repositories."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from sqlalchemy import Engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

import judging_engine.models  # noqa: F401  registers tables on SQLModel.metadata
from judging_engine.core.config import DEFAULT_DATABASE_URL

from .event_repository import EventRepository
from .roster_repository import RosterRepository

logger = structlog.get_logger()


def create_store_engine(database_url: str = DEFAULT_DATABASE_URL) -> Engine:
    """Create a SQLAlchemy engine suited to threaded session work.

    DuckDB files use NullPool so each worker thread opens its own connection.
    SQLite connections are allowed to cross threads.
    """
    kwargs: dict[str, Any] = {}
    if database_url.startswith("duckdb"):
        kwargs["poolclass"] = NullPool
    elif database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    return create_engine(database_url, **kwargs)


class JudgingStore:
    """Persistence layer for judging data.

    Handles:
    - Engine creation and schema setup
    - Event lifecycle and criteria (``events``)
    - Team and judge rosters (``rosters``)
    """

    def __init__(self, database_url: str = DEFAULT_DATABASE_URL) -> None:
        self.database_url = database_url
        self._engine = create_store_engine(database_url)
        SQLModel.metadata.create_all(self._engine)
        self.events = EventRepository(self._engine)
        self.rosters = RosterRepository(self._engine)
        logger.info("store_init", url=self._engine.url.render_as_string(hide_password=True))

    @property
    def engine(self) -> Engine:
        return self._engine

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await asyncio.to_thread(self._engine.dispose)
