"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`kingdoms` package without requiring an editable install in CI. It also
provides the shared fixtures for in-memory services and seeded dice.
"""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from kingdoms.factory import Services, create_services  # noqa: E402
from kingdoms.repository import EntityStore, InMemoryRepository  # noqa: E402
from kingdoms.utils.dice import seeded_rng  # noqa: E402


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def store(repository: InMemoryRepository) -> EntityStore:
    return EntityStore(repository)


@pytest.fixture
def services(repository: InMemoryRepository) -> Services:
    return create_services(repository=repository, rng=seeded_rng("tests"))


class ScriptedRandom:
    """Stand-in random source whose ``randint`` replays a fixed script of values."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)

    def randint(self, a: int, b: int) -> int:
        value = self._values.pop(0)
        assert a <= value <= b, f"scripted value {value} outside [{a}, {b}]"
        return value


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
