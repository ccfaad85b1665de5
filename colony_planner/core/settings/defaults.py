# ========================
# file: colony_planner/core/settings/defaults.py
# ========================
from __future__ import annotations
from typing import Any, Dict

# Полный набор настроек по умолчанию. Пользовательские настройки
# накладываются поверх через deep_merge.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "planning": {
        "building_planning_enabled": True,
        "use_templates": True,
        "use_dynamic_placement": True,
        "max_construction_sites": 4,
    },
    "roads": {
        "road_planning_enabled": True,
        "min_traffic_for_road": 5,
        "road_priority_floor": 80,
        "road_priority_threshold": 10,
        "max_exit_paths": 4,
        "connect_sources_to_controller": True,
        "rebuild_network_ratio": 0.8,
        "path_max_ops": 2000,
    },
    "traffic": {
        "traffic_analysis_enabled": True,
        "traffic_data_ttl": 500,
    },
    "cache": {
        "layout_analysis_ttl": 5000,
        "cost_grid_ttl": 1000,
    },
    "cadence": {
        "planning": 100,
        "construction": 15,
        "reconcile": 50,
        "traffic_maintenance": 100,
    },
    "scheduler": {
        "tick_budget_ms": 20.0,
    },
}
