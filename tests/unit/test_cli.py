"""Tests for settings, the service factory and the command-line front end."""

from __future__ import annotations

import pytest

from kingdoms import cli
from kingdoms.config import Settings, get_settings
from kingdoms.factory import create_repository
from kingdoms.repository import InMemoryRepository, JsonFileRepository, SqlKeyValueRepository


@pytest.fixture
def json_env(monkeypatch, tmp_path):
    monkeypatch.setenv("KINGDOMS_STORAGE_BACKEND", "json")
    monkeypatch.setenv("KINGDOMS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("KINGDOMS_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield tmp_path / "data"
    get_settings.cache_clear()


def test_settings_read_environment(json_env):
    settings = get_settings()
    assert settings.storage_backend == "json"
    assert settings.data_dir == json_env
    assert json_env.is_dir()


def test_settings_reject_unknown_backend(monkeypatch):
    monkeypatch.setenv("KINGDOMS_STORAGE_BACKEND", "redis")
    with pytest.raises(ValueError):
        Settings()


def test_create_repository_per_backend(tmp_path):
    assert isinstance(create_repository(Settings(storage_backend="memory")), InMemoryRepository)
    json_settings = Settings(storage_backend="json", data_dir=tmp_path / "json")
    assert isinstance(create_repository(json_settings), JsonFileRepository)
    sql_settings = Settings(storage_backend="sql", database_url=f"sqlite:///{tmp_path}/kv.db")
    assert isinstance(create_repository(sql_settings), SqlKeyValueRepository)


def test_roll_with_seed_is_reproducible(json_env, capsys):
    assert cli.main(["roll", "2d6+3", "--seed", "varn"]) == 0
    first = capsys.readouterr().out
    assert cli.main(["roll", "2d6+3", "--seed", "varn"]) == 0
    assert capsys.readouterr().out == first
    assert first.startswith("Roll: 2d6+3")


def test_roll_rejects_bad_notation(json_env, capsys):
    assert cli.main(["roll", "bogus"]) == 2
    assert "Invalid dice notation: 'bogus'" in capsys.readouterr().err


def test_check(json_env, capsys):
    assert cli.main(["check", "3", "12", "--advantage", "--seed", "x"]) == 0
    out = capsys.readouterr().out
    assert "DC: 12" in out
    assert "Bonus: +3" in out


def test_create_list_and_show(json_env, capsys):
    assert cli.main(["create", "domain", "Varn", "--size", "2", "--lore", "3"]) == 0
    domain_id = capsys.readouterr().out.strip()
    assert cli.main(["create", "unit", "Knights", "--type", "cavalry", "--domain", domain_id]) == 0
    unit_id = capsys.readouterr().out.strip()

    assert cli.main(["list", "unit"]) == 0
    assert capsys.readouterr().out.strip() == f"{unit_id}  Knights"

    assert cli.main(["show", "domain", domain_id]) == 0
    out = capsys.readouterr().out
    assert "Varn (Medium, d6)" in out
    assert "Units: 1" in out

    assert cli.main(["list", "battle"]) == 0
    assert capsys.readouterr().out.strip() == "No battles found"


def test_list_by_name(json_env, capsys):
    cli.main(["create", "battle", "Siege of Varn"])
    cli.main(["create", "battle", "Raid on Orl"])
    capsys.readouterr()
    assert cli.main(["list", "battle", "--name", "varn"]) == 0
    out = capsys.readouterr().out
    assert "Siege of Varn" in out
    assert "Raid on Orl" not in out


def test_show_missing_entity(json_env, capsys):
    assert cli.main(["show", "intrigue", "nope"]) == 1
    assert "Intrigue nope not found" in capsys.readouterr().err


@pytest.mark.parametrize("option", ["--tier", "--size"])
def test_create_rejects_out_of_range_tier_and_size(json_env, capsys, option):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["create", "unit", "Levy", option, "9"])
    assert excinfo.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
