# ==============================================================================
# Файл: colony_planner/planners/road_planner.py
# Назначение: Сеть дорог зоны: пути между ключевыми точками + клетки с высоким
#             трафиком, приоритизация и постановка площадок "изнутри наружу".
# ==============================================================================
from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Set, Tuple

from ..algorithms.pathfinding.cost_grid import CostGridCache
from ..analytics.traffic import TrafficTracker
from ..core import constants as const
from ..core.grid import in_build_area
from ..core.interfaces import IPathfindingService, Zone
from ..core.settings import PlannerSettings
from ..core.types import KeyPositions, PlannedRoad, Pos, ZonePlan
from ..setup_logging import LogThrottle
from ..world.cache import Clock
from .terrain_analyzer import TerrainAnalyzer, nearest_distance

logger = logging.getLogger(__name__)


def classify_path(start: Pos, goal: Pos, key: KeyPositions) -> str:
    """Тип пути по его концам: источник > контроллер > минерал > выход > внутренний."""
    ends = (start, goal)
    if any(src in ends for src in key.sources):
        return const.PATH_SOURCE
    if key.controller is not None and key.controller in ends:
        return const.PATH_CONTROLLER
    if key.mineral is not None and key.mineral in ends:
        return const.PATH_MINERAL
    if any(e in ends for e in key.exits):
        return const.PATH_EXIT
    return const.PATH_INTERNAL


def network_ratios(roads: List[PlannedRoad]) -> Dict[str, float]:
    """Доля уже размещённых дорог для каждого типа пути."""
    total: Counter = Counter(r.path_type for r in roads)
    placed: Counter = Counter(r.path_type for r in roads if r.placed)
    return {t: placed[t] / n for t, n in total.items() if n}


def is_rebuild_candidate(road: PlannedRoad, ratios: Dict[str, float], threshold: float) -> bool:
    """
    Дорога считается "была, но пропала", если её пометила сверка, либо
    она принадлежит (не внутренней) сети, которая уже почти достроена.
    """
    if road.placed:
        return False
    if road.rebuild:
        return True
    if road.path_type == const.PATH_INTERNAL:
        return False
    return ratios.get(road.path_type, 0.0) >= threshold


def merge_roads(existing: List[PlannedRoad], fresh: List[PlannedRoad]) -> List[PlannedRoad]:
    """
    Новые дороги наследуют состояние старых на тех же клетках. Размещённые
    старые дороги, которых больше нет в новом наборе, сохраняются для сверки.
    """
    old = {r.pos: r for r in existing}
    out: List[PlannedRoad] = []
    for r in fresh:
        o = old.get(r.pos)
        if o is not None:
            r.placed = o.placed
            r.correlation_id = o.correlation_id
            r.rebuild = o.rebuild
        out.append(r)
    fresh_positions = {r.pos for r in fresh}
    out.extend(o for o in existing if o.placed and o.pos not in fresh_positions)
    return out


def network_stats(roads: List[PlannedRoad]) -> Dict[str, Any]:
    placed = sum(1 for r in roads if r.placed)
    return {
        "total": len(roads),
        "placed": placed,
        "unplaced": len(roads) - placed,
        "by_type": dict(Counter(r.path_type for r in roads)),
        "average_priority": (sum(r.priority for r in roads) / len(roads)) if roads else 0.0,
    }


class RoadPlanner:
    def __init__(
        self,
        clock: Clock,
        settings: PlannerSettings,
        analyzer: TerrainAnalyzer,
        tracker: TrafficTracker,
        pathfinder: IPathfindingService,
        cost_grids: Optional[CostGridCache] = None,
    ):
        self.clock = clock
        self.settings = settings
        self.analyzer = analyzer
        self.tracker = tracker
        self.pathfinder = pathfinder
        self.cost_grids = cost_grids or CostGridCache(clock, settings.cache.cost_grid_ttl)
        self._throttle = LogThrottle(clock)

    # --- Планирование ---

    def spawn_positions(self, zone: Zone, key: Optional[KeyPositions] = None) -> List[Pos]:
        key = key if key is not None else self.analyzer.key_positions(zone)
        if key.spawns:
            return list(key.spawns)
        return [self.analyzer.get_analysis(zone).central_area]

    def path_candidates(self, key: KeyPositions, starts: List[Pos]) -> List[Tuple[Pos, Pos]]:
        cfg = self.settings.roads
        pairs: List[Tuple[Pos, Pos]] = []
        for start in starts:
            for src in key.sources:
                pairs.append((start, src))
            if key.controller is not None:
                pairs.append((start, key.controller))
            if key.mineral is not None:
                pairs.append((start, key.mineral))
            for ex in key.exits[: cfg.max_exit_paths]:
                pairs.append((start, ex))
        if cfg.connect_sources_to_controller and key.controller is not None:
            for src in key.sources:
                pairs.append((src, key.controller))
        return pairs

    def plan_network(self, zone: Zone, plan: Optional[ZonePlan] = None) -> List[PlannedRoad]:
        if not self.settings.roads.road_planning_enabled:
            return []
        key = self.analyzer.key_positions(zone)
        starts = self.spawn_positions(zone, key)
        cost_grid = self.cost_grids.get(zone)

        blocked: Set[Pos] = set(key.sources)
        if key.controller is not None:
            blocked.add(key.controller)
        if key.mineral is not None:
            blocked.add(key.mineral)
        if plan is not None:
            blocked.update(
                b.pos for b in plan.buildings if b.kind not in const.WALKABLE_STRUCTURE_KINDS
            )

        roads: Dict[Pos, PlannedRoad] = {}
        for start, goal in self.path_candidates(key, starts):
            result = self.pathfinder.find_path(start, goal, cost_grid)
            if result.incomplete or not result.path:
                logger.debug("Zone %s: no complete path %s -> %s", zone.name, start, goal)
                continue
            path_type = classify_path(start, goal, key)
            base = const.PATH_TYPE_PRIORITY[path_type]
            for pos in result.path:
                if pos in blocked or not self._cell_free(zone, pos):
                    continue
                traffic = self.tracker.score(zone.name, pos)
                priority = base + int(traffic // 10)
                current = roads.get(pos)
                if current is None or priority > current.priority:
                    roads[pos] = PlannedRoad(
                        pos=pos, priority=priority, traffic_score=traffic, path_type=path_type
                    )

        for pos in self.tracker.high_traffic(zone.name):
            if pos in roads or pos in blocked or not self._cell_free(zone, pos):
                continue
            traffic = self.tracker.score(zone.name, pos)
            roads[pos] = PlannedRoad(
                pos=pos,
                priority=int(traffic // 5),
                traffic_score=traffic,
                path_type=const.PATH_INTERNAL,
            )

        out = sorted(roads.values(), key=lambda r: (-r.priority, r.pos[1], r.pos[0]))
        logger.debug("Zone %s: road network has %d candidate cell(s)", zone.name, len(out))
        return out

    @staticmethod
    def _cell_free(zone: Zone, pos: Pos) -> bool:
        """Клетка на застраиваемой части зоны без дороги, площадки и постройки."""
        if not in_build_area(*pos):
            return False
        if zone.world.sites_at(pos):
            return False
        return all(s.kind == const.KIND_RAMPART for s in zone.world.structures_at(pos))

    # --- Постановка площадок ---

    def place_road_sites(self, zone: Zone, roads: List[PlannedRoad]) -> int:
        cfg = self.settings.roads
        if not cfg.road_planning_enabled:
            return 0
        pending = sum(1 for s in zone.world.sites() if s.kind == const.KIND_ROAD)
        budget = self.settings.planning.max_construction_sites // 2 - pending
        if budget <= 0:
            return 0

        ratios = network_ratios(roads)
        eligible: List[Tuple[bool, PlannedRoad]] = []
        for r in roads:
            if r.placed:
                continue
            if any(s.kind == const.KIND_ROAD for s in zone.world.structures_at(r.pos)):
                r.placed = True
                continue
            if not self._cell_free(zone, r.pos):
                continue
            rebuild = is_rebuild_candidate(r, ratios, cfg.rebuild_network_ratio)
            if (
                r.traffic_score >= cfg.min_traffic_for_road
                or r.priority >= cfg.road_priority_floor
                or rebuild
            ):
                eligible.append((rebuild, r))

        spawns = self.spawn_positions(zone)
        eligible.sort(
            key=lambda item: (
                not item[0],
                -item[1].priority,
                nearest_distance(item[1].pos, spawns),
                item[1].pos[1],
                item[1].pos[0],
            )
        )

        placed = 0
        for _, r in eligible:
            if placed >= budget:
                break
            result = zone.executor.try_place(r.pos, const.KIND_ROAD)
            if result == const.PLACE_OK:
                r.placed = True
                r.rebuild = False
                r.correlation_id = zone.executor.site_id_at(r.pos, const.KIND_ROAD)
                placed += 1
            else:
                self._throttle.log(
                    logger, logging.WARNING, f"{zone.name}:road:{r.pos}:{result}",
                    "Zone %s: cannot place road at %s (%s)", zone.name, r.pos, result,
                )
        if placed:
            logger.info("Zone %s: placed %d road site(s)", zone.name, placed)
            self.cost_grids.invalidate(zone.name)
        return placed

    # --- Аналитика ---

    def recommend_upgrades(self, zone: Zone, roads: List[PlannedRoad]) -> List[Tuple[Pos, float]]:
        """Клетки с сильным трафиком, на которые дорога ещё не запланирована."""
        planned = {r.pos for r in roads}
        threshold = self.settings.roads.road_priority_threshold
        out: List[Tuple[Pos, float]] = []
        for pos in self.tracker.high_traffic(zone.name):
            if pos in planned or not self._cell_free(zone, pos):
                continue
            score = self.tracker.score(zone.name, pos)
            if score >= threshold:
                out.append((pos, score))
        out.sort(key=lambda item: -item[1])
        return out
