# ========================
# file: colony_planner/core/settings/__init__.py
# ========================
from .model import (
    PlannerSettings,
    PlanningSettings,
    RoadSettings,
    TrafficSettings,
    CacheSettings,
    CadenceSettings,
    SchedulerSettings,
)
from .loader import load_settings, deep_merge
from .defaults import DEFAULT_SETTINGS

__all__ = [
    "PlannerSettings",
    "PlanningSettings",
    "RoadSettings",
    "TrafficSettings",
    "CacheSettings",
    "CadenceSettings",
    "SchedulerSettings",
    "load_settings",
    "deep_merge",
    "DEFAULT_SETTINGS",
]
