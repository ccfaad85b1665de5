# ==============================================================================
# Файл: colony_planner/world/store.py
# Назначение: Простые реализации ключ-значение хранилища для блобов зон.
# ==============================================================================
from __future__ import annotations
import copy
import dataclasses
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ..core.errors import PersistenceError


def _ensure_path_exists(path: str) -> None:
    """Убеждается, что директория для файла существует."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _default_serializer(o):
    if dataclasses.is_dataclass(o):
        return dataclasses.asdict(o)
    if isinstance(o, np.integer):
        return int(o)
    if isinstance(o, np.floating):
        return float(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def _atomic_write_json(path: str, data: Any) -> None:
    """Атомарно записывает данные в JSON файл для предотвращения битых файлов."""
    _ensure_path_exists(path)
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, default=_default_serializer)
    os.replace(tmp_path, path)


class MemoryStore:
    """Хранилище в памяти процесса. Значения копируются на входе и выходе."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def keys(self):
        return list(self._data.keys())


class JsonFileStore:
    """Один JSON-файл на ключ в каталоге root."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> str:
        safe = key.replace("/", "__")
        return str(self.root / f"{safe}.json")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"cannot read {path}: {e}") from e

    def set(self, key: str, value: Dict[str, Any]) -> None:
        try:
            _atomic_write_json(self._path(key), value)
        except (OSError, TypeError) as e:
            raise PersistenceError(f"cannot write key {key}: {e}") from e
