from .event_repository import EventRepository
from .repository import AsyncRepository
from .roster_repository import RosterRepository
from .store import JudgingStore, create_store_engine

__all__ = [
    "AsyncRepository",
    "EventRepository",
    "JudgingStore",
    "RosterRepository",
    "create_store_engine",
]
