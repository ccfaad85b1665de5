# ========================
# file: colony_planner/core/settings/loader.py
# ========================
from __future__ import annotations
import copy
import json
import os
from typing import Any, Dict, Mapping, Optional, Union

from ..errors import SettingsError
from .defaults import DEFAULT_SETTINGS
from .model import (
    CacheSettings,
    CadenceSettings,
    PlannerSettings,
    PlanningSettings,
    RoadSettings,
    SchedulerSettings,
    TrafficSettings,
)
from .validators import validate_dict


def deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursive dict merge. Lists/tuples are replaced, not merged element-wise."""
    out = copy.deepcopy(base)
    for k, v in overrides.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _load_json_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SettingsError(f"cannot read settings file {path}: {e}") from e


def _section(cls, data: Mapping[str, Any]):
    # неизвестные ключи в секции игнорируем
    known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
    return cls(**known)


def load_settings(
    source: Union[str, Dict[str, Any], None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> PlannerSettings:
    """Load planner settings from a JSON path or dict, merge with defaults and apply overrides.

    Args:
        source: path to a JSON file, raw dict, or None for pure defaults
        overrides: mapping of ad-hoc overrides (last layer)
    Returns:
        PlannerSettings (immutable dataclass)
    """
    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, str):
        if not os.path.isfile(source):
            raise SettingsError(f"settings file not found: {source}")
        data = _load_json_file(source)
    elif isinstance(source, dict):
        data = source
    else:
        raise TypeError("source must be str path, dict or None")

    merged = deep_merge(DEFAULT_SETTINGS, data)
    if overrides:
        merged = deep_merge(merged, overrides)

    validate_dict(merged)

    return PlannerSettings(
        planning=_section(PlanningSettings, merged["planning"]),
        roads=_section(RoadSettings, merged["roads"]),
        traffic=_section(TrafficSettings, merged["traffic"]),
        cache=_section(CacheSettings, merged["cache"]),
        cadence=_section(CadenceSettings, merged["cadence"]),
        scheduler=_section(SchedulerSettings, merged["scheduler"]),
    )
