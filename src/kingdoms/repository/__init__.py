"""Persistence adapters for Kingdoms entities."""

from .entities import EntityStore
from .json_store import JsonFileRepository
from .locks import EntityLocks
from .memory import InMemoryRepository
from .sql_store import SqlKeyValueRepository

__all__ = [
    "EntityLocks",
    "EntityStore",
    "InMemoryRepository",
    "JsonFileRepository",
    "SqlKeyValueRepository",
]
