"""Protocol-based interfaces for Kingdoms storage.

Services receive their repository through these protocols, so tests can
swap in the in-memory implementation or a hand-written fake.
"""

from kingdoms.interfaces.repository import IKeyValueRepository

__all__ = ["IKeyValueRepository"]
