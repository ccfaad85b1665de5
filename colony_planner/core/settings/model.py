from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class PlanningSettings:
    building_planning_enabled: bool = True
    use_templates: bool = True
    use_dynamic_placement: bool = True
    max_construction_sites: int = 4


@dataclass(frozen=True)
class RoadSettings:
    road_planning_enabled: bool = True
    min_traffic_for_road: int = 5
    # дороги с приоритетом не ниже этого строятся без учёта трафика
    road_priority_floor: int = 80
    road_priority_threshold: int = 10
    max_exit_paths: int = 4
    connect_sources_to_controller: bool = True
    rebuild_network_ratio: float = 0.8
    path_max_ops: int = 2000


@dataclass(frozen=True)
class TrafficSettings:
    traffic_analysis_enabled: bool = True
    traffic_data_ttl: int = 500


@dataclass(frozen=True)
class CacheSettings:
    layout_analysis_ttl: int = 5000
    cost_grid_ttl: int = 1000


@dataclass(frozen=True)
class CadenceSettings:
    planning: int = 100
    construction: int = 15
    reconcile: int = 50
    traffic_maintenance: int = 100


@dataclass(frozen=True)
class SchedulerSettings:
    tick_budget_ms: float = 20.0


@dataclass(frozen=True)
class PlannerSettings:
    planning: PlanningSettings = field(default_factory=PlanningSettings)
    roads: RoadSettings = field(default_factory=RoadSettings)
    traffic: TrafficSettings = field(default_factory=TrafficSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    cadence: CadenceSettings = field(default_factory=CadenceSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
