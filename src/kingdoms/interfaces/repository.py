"""Key-value repository protocol.

This module defines the storage contract the Kingdoms services depend on.
Any object with these four methods can back the entity store, which keeps
the rules layer independent of where state is kept.
"""

from typing import Any, Protocol


class IKeyValueRepository(Protocol):
    """Protocol for a namespaced key-value store holding JSON-compatible values.

    Keys are namespaced by entity kind (``unit:``, ``domain:``, ``battle:``,
    ``intrigue:``) plus ``index:<kind>`` lists of ids.
    """

    def get(self, key: str) -> Any | None:
        """Return the value stored under ``key``.

        Args:
            key: Namespaced key such as ``"battle:1f3c..."``

        Returns:
            The stored value, or ``None`` when the key does not exist
        """
        ...

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Namespaced key
            value: JSON-compatible data (dicts, lists, strings, numbers, booleans, None)
        """
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; deleting a missing key is not an error."""
        ...

    def list_by_prefix(self, prefix: str) -> list[str]:
        """Return every stored key starting with ``prefix``, sorted."""
        ...
