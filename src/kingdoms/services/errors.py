"""Exceptions raised by the service layer."""

from __future__ import annotations


class KingdomsError(Exception):
    """Base class for service-level failures."""


class EntityNotFoundError(KingdomsError, LookupError):
    """An id did not resolve to a stored entity."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind.capitalize()} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id
