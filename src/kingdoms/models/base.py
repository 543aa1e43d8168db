"""Declarative base for the SQL storage backend.

Only the key-value table lives here today; entity structure stays in the
JSON payload, so schema changes to units or battles never need a migration.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Shared metadata for Kingdoms tables; datetimes keep their timezone."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Row bookkeeping columns filled in by the database.

    ``updated_at`` changes on every ``put`` that rewrites a key, which makes
    it easy to see which battles or sessions were touched last.
    """

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())
