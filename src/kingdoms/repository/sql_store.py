"""SQL repository storing each key as a row of the ``kv_entries`` table."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from kingdoms.models import KeyValueEntry


class SqlKeyValueRepository:
    """Key-value store on top of any SQLAlchemy-supported database.

    Every call opens its own short-lived session and commits before
    returning.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Any | None:
        with self._session_factory() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def put(self, key: str, value: Any) -> None:
        with self._session_factory() as session, session.begin():
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value

    def delete(self, key: str) -> None:
        with self._session_factory() as session, session.begin():
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)

    def list_by_prefix(self, prefix: str) -> list[str]:
        stmt = (
            select(KeyValueEntry.key)
            .where(KeyValueEntry.key.startswith(prefix, autoescape=True))
            .order_by(KeyValueEntry.key)
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt))
