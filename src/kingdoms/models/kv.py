"""Key-value table used by :class:`kingdoms.repository.sql_store.SqlKeyValueRepository`."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """One stored value, addressed by its namespaced key."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key={self.key!r})>"
