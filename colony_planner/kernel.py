# ==============================================================================
# Файл: colony_planner/kernel.py
# Назначение: Планировщик по тикам. Связывает анализатор, планировщики,
#             трекер трафика и сверку; запускает их по расписанию (cadence)
#             в пределах бюджета времени тика, изолируя зоны друг от друга.
# ==============================================================================
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from .algorithms.pathfinding.a_star import GridPathfinder
from .algorithms.pathfinding.cost_grid import CostGridCache
from .analytics.traffic import TrafficTracker
from .core.interfaces import IKeyValueStore, IPathfindingService, Zone
from .core.settings import PlannerSettings, load_settings
from .core.types import Pos
from .planners import structure_catalog as catalog
from .planners.layout_planner import LayoutPlanner
from .planners.reconciler import PlanReconciler
from .planners.road_planner import RoadPlanner, merge_roads
from .planners.terrain_analyzer import TerrainAnalyzer
from .setup_logging import LogThrottle
from .world.cache import TickClock
from .world.memory import PlannerMemory

logger = logging.getLogger(__name__)


class TickBudget:
    """Бюджет времени на один тик (в миллисекундах)."""

    def __init__(self, limit_ms: float, timer: Callable[[], float] = time.perf_counter):
        self.limit_ms = float(limit_ms)
        self._timer = timer
        self._started = timer()

    def elapsed_ms(self) -> float:
        return (self._timer() - self._started) * 1000.0

    def exhausted(self) -> bool:
        return self.elapsed_ms() >= self.limit_ms


@dataclass
class ZoneReport:
    planned: bool = False
    sites_placed: int = 0
    roads_placed: int = 0
    reconciled: bool = False
    traffic_pruned: int = 0


@dataclass
class TickReport:
    tick: int
    zones: Dict[str, ZoneReport] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)
    deferred: List[str] = field(default_factory=list)


def _due(now: int, cadence: int) -> bool:
    return cadence > 0 and now % cadence == 0


class PlanningKernel:
    def __init__(
        self,
        settings: Optional[PlannerSettings] = None,
        store: Optional[IKeyValueStore] = None,
        clock: Optional[Callable[[], int]] = None,
        pathfinder: Optional[IPathfindingService] = None,
    ):
        catalog.validate_catalog()
        self.settings = settings or load_settings()
        self.clock = clock or TickClock()
        self.memory = PlannerMemory(store)
        self.analyzer = TerrainAnalyzer(self.memory, self.clock, self.settings)
        self.tracker = TrafficTracker(self.memory, self.clock, self.settings)
        self.layout = LayoutPlanner(self.memory, self.clock, self.settings, self.analyzer)
        self.roads = RoadPlanner(
            self.clock,
            self.settings,
            self.analyzer,
            self.tracker,
            pathfinder or GridPathfinder(self.settings.roads.path_max_ops),
            CostGridCache(self.clock, self.settings.cache.cost_grid_ttl),
        )
        self.reconciler = PlanReconciler(self.memory, self.clock)
        self._throttle = LogThrottle(self.clock)

    def record(self, zone: Zone, pos: Pos, role: str) -> None:
        self.tracker.record(zone.name, pos, role)

    def run_zone(self, zone: Zone) -> ZoneReport:
        """Один проход по зоне. Исключения пробрасываются вызывающему."""
        now = self.clock()
        cadence = self.settings.cadence
        report = ZoneReport()
        mem = self.memory.zone(zone.name)

        if mem.plan is None or _due(now, cadence.planning):
            plan = self.layout.plan_room(zone)
            fresh = self.roads.plan_network(zone, plan)
            plan.roads = merge_roads(plan.roads, fresh)
            report.planned = True
        plan = mem.plan

        if _due(now, cadence.reconcile):
            self.reconciler.reconcile(zone)
            report.reconciled = True

        if _due(now, cadence.construction):
            report.sites_placed = self.layout.place_construction_sites(zone, plan)
            report.roads_placed = self.roads.place_road_sites(zone, plan.roads)

        if _due(now, cadence.traffic_maintenance):
            report.traffic_pruned = self.tracker.prune(zone.name) + self.tracker.optimize(zone.name)

        return report

    def run_tick(self, zones: Iterable[Zone], budget: Optional[TickBudget] = None) -> TickReport:
        """
        Обрабатывает зоны по очереди, пока не кончится бюджет. Ошибка в одной
        зоне не мешает остальным: зона пропускается до следующего тика.
        """
        if budget is None:
            budget = TickBudget(self.settings.scheduler.tick_budget_ms)
        report = TickReport(tick=self.clock())
        zones = list(zones)
        try:
            for i, zone in enumerate(zones):
                if budget.exhausted():
                    report.deferred = [z.name for z in zones[i:]]
                    self._throttle.log(
                        logger, logging.WARNING, "budget",
                        "Tick %d: budget exhausted after %.1f ms, %d zone(s) deferred",
                        report.tick, budget.elapsed_ms(), len(report.deferred),
                    )
                    break
                try:
                    report.zones[zone.name] = self.run_zone(zone)
                except Exception:
                    logger.exception("Tick %d: zone %s failed, skipped", report.tick, zone.name)
                    report.failed.append(zone.name)
        finally:
            self.memory.flush()
        return report
