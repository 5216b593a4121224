"""Code graph persistence."""

from codegraft.store.database import Database
from codegraft.store.repository import CodeGraphStore, EntityFilter, StoreInfo

__all__ = ["CodeGraphStore", "Database", "EntityFilter", "StoreInfo"]
