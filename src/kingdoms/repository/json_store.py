"""JSON-file repository: one snapshot file per key."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from pydantic import TypeAdapter

SUFFIX = ".json"


class JsonFileRepository:
    """Persist key-value pairs as JSON files under a data directory.

    Keys are percent-encoded into file names, so ``battle:abc`` is stored as
    ``battle%3Aabc.json``.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[Any] = TypeAdapter(Any)

    def _path_for(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}{SUFFIX}"

    def get(self, key: str) -> Any | None:
        """Load the value stored under ``key`` or ``None`` when there is no file."""

        path = self._path_for(key)
        if not path.exists():
            return None
        return self._adapter.validate_json(path.read_bytes())

    def put(self, key: str, value: Any) -> None:
        """Serialize ``value`` to disk, replacing the previous snapshot."""

        path = self._path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_bytes(self._adapter.dump_json(value, indent=2))
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    def list_by_prefix(self, prefix: str) -> list[str]:
        """Return the keys of every snapshot whose key starts with ``prefix``."""

        keys: list[str] = []
        for path in self.base_path.glob(f"*{SUFFIX}"):
            key = unquote(path.name[: -len(SUFFIX)])
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)
