from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class LocalState:
    """Key/value document persisted as one JSON file.

    Every read goes to disk and every write replaces the whole file, so a
    value is durable as soon as `set` returns. Writes go through a temp file
    and `os.replace` so a crash never leaves a half-written document.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.exception("Failed to read local state %s", self._path)
            raise PersistenceError(f"Cannot read local state: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError("Local state file is not a JSON object")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError) as e:
            logger.exception("Failed to write local state %s", self._path)
            raise PersistenceError(f"Cannot write local state: {e}") from e
