"""Persistence backends behind the Store interface."""

from sarvatra.core.config import Settings
from sarvatra.core.database import engine_from_settings
from sarvatra.stores.base import AccountStore, CommandStore, PreferenceStore, Store
from sarvatra.stores.memory import MemoryStore
from sarvatra.stores.sql import SqlStore


def build_store(settings: Settings) -> Store:
    """Create the store selected by STORE_BACKEND."""
    if settings.STORE_BACKEND == "memory":
        return MemoryStore()
    return SqlStore(engine_from_settings(settings))


__all__ = [
    "AccountStore",
    "CommandStore",
    "MemoryStore",
    "PreferenceStore",
    "SqlStore",
    "Store",
    "build_store",
]
