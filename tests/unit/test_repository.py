"""Tests for the key-value repositories."""

from __future__ import annotations

import pytest

from kingdoms.config import Settings
from kingdoms.database import (
    check_database_health,
    create_db_engine,
    create_session_factory,
    get_table_names,
    init_db,
)
from kingdoms.interfaces import IKeyValueRepository
from kingdoms.repository import InMemoryRepository, JsonFileRepository, SqlKeyValueRepository


def _sql_repository(tmp_path) -> SqlKeyValueRepository:
    engine = create_db_engine(Settings(database_url=f"sqlite:///{tmp_path}/kv.db"))
    init_db(engine)
    return SqlKeyValueRepository(create_session_factory(engine))


@pytest.fixture(params=["memory", "json", "sql"])
def repo(request, tmp_path) -> IKeyValueRepository:
    if request.param == "memory":
        return InMemoryRepository()
    if request.param == "json":
        return JsonFileRepository(tmp_path / "data")
    return _sql_repository(tmp_path)


def test_missing_key_returns_none(repo):
    assert repo.get("unit:missing") is None


def test_put_and_get(repo):
    value = {"name": "Iron Guard", "tier": 2, "traits": ["Stalwart"], "domain": None}
    repo.put("unit:1", value)
    assert repo.get("unit:1") == value


def test_put_overwrites(repo):
    repo.put("index:units", ["a"])
    repo.put("index:units", ["a", "b"])
    assert repo.get("index:units") == ["a", "b"]


def test_delete_is_idempotent(repo):
    repo.put("unit:1", {"name": "Levy"})
    repo.delete("unit:1")
    repo.delete("unit:1")
    assert repo.get("unit:1") is None


def test_list_by_prefix_is_sorted_and_exact(repo):
    for key in ("unit:b", "unit:a", "domain:a", "units_total"):
        repo.put(key, 1)
    assert repo.list_by_prefix("unit:") == ["unit:a", "unit:b"]
    assert repo.list_by_prefix("battle:") == []


def test_sql_prefix_treats_wildcards_literally(tmp_path):
    repo = _sql_repository(tmp_path)
    repo.put("a%b", 1)
    repo.put("axb", 2)
    assert repo.list_by_prefix("a%") == ["a%b"]


def test_returned_values_are_copies(repo):
    repo.put("domain:1", {"units": ["u1"]})
    loaded = repo.get("domain:1")
    loaded["units"].append("u2")
    assert repo.get("domain:1") == {"units": ["u1"]}


def test_memory_repository_initial_data():
    repo = InMemoryRepository({"unit:1": {"name": "Levy"}})
    assert len(repo) == 1
    assert repo.get("unit:1") == {"name": "Levy"}


def test_json_repository_survives_reopen(tmp_path):
    JsonFileRepository(tmp_path).put("battle:siege/varn", {"round": 2})
    reopened = JsonFileRepository(tmp_path)
    assert reopened.get("battle:siege/varn") == {"round": 2}
    assert reopened.list_by_prefix("battle:") == ["battle:siege/varn"]


def test_sql_schema_and_health(tmp_path):
    engine = create_db_engine(Settings(database_url=f"sqlite:///{tmp_path}/kv.db"))
    init_db(engine)
    assert "kv_entries" in get_table_names(engine)
    assert check_database_health(engine) is True
