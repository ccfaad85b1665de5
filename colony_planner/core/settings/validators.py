# ========================
# file: colony_planner/core/settings/validators.py
# ========================
from __future__ import annotations
from typing import Any, Dict

from ..errors import ValidationError

REQUIRED_SECTIONS = ("planning", "roads", "traffic", "cache", "cadence", "scheduler")


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValidationError(msg)


def validate_dict(cfg: Dict[str, Any]) -> None:
    """Conservative validation of a merged settings dict.

    Raises ValidationError on the first failing check.
    """
    for section in REQUIRED_SECTIONS:
        _require(isinstance(cfg.get(section), dict), f"settings.{section} must be a mapping")

    planning = cfg["planning"]
    _require(
        int(planning.get("max_construction_sites", 0)) >= 1,
        "planning.max_construction_sites must be >= 1",
    )

    roads = cfg["roads"]
    for key in ("min_traffic_for_road", "road_priority_floor", "road_priority_threshold"):
        _require(int(roads.get(key, -1)) >= 0, f"roads.{key} must be >= 0")
    _require(int(roads.get("max_exit_paths", -1)) >= 0, "roads.max_exit_paths must be >= 0")
    ratio = float(roads.get("rebuild_network_ratio", -1.0))
    _require(0.0 <= ratio <= 1.0, "roads.rebuild_network_ratio must be in [0, 1]")
    _require(int(roads.get("path_max_ops", 0)) > 0, "roads.path_max_ops must be > 0")

    _require(int(cfg["traffic"].get("traffic_data_ttl", 0)) > 0, "traffic.traffic_data_ttl must be > 0")

    for key in ("layout_analysis_ttl", "cost_grid_ttl"):
        _require(int(cfg["cache"].get(key, 0)) > 0, f"cache.{key} must be > 0")

    for key, value in cfg["cadence"].items():
        _require(int(value) >= 1, f"cadence.{key} must be >= 1")

    _require(
        float(cfg["scheduler"].get("tick_budget_ms", 0.0)) > 0.0,
        "scheduler.tick_budget_ms must be > 0",
    )
