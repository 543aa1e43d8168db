"""SQLAlchemy models for the Kingdoms SQL storage backend.

This module exports the declarative base and the key-value table.
"""

from .base import Base, TimestampMixin
from .kv import KeyValueEntry

__all__ = [
    "Base",
    "KeyValueEntry",
    "TimestampMixin",
]
