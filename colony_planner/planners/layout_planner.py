# ==============================================================================
# Файл: colony_planner/planners/layout_planner.py
# Назначение: План застройки зоны. Шаблоны по уровням + динамическое
#             размещение по оценкам, проверка плана на устаревание и
#             постановка площадок строительства в пределах бюджета.
# ==============================================================================
from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from ..core import constants as const
from ..core.grid import chebyshev
from ..core.interfaces import Zone
from ..core.settings import PlannerSettings
from ..core.types import KeyPositions, PlannedStructure, Pos, TerrainAnalysis, ZonePlan
from ..setup_logging import LogThrottle
from ..world.cache import Clock
from ..world.memory import PlannerMemory
from . import structure_catalog as catalog
from .container_planner import plan_containers
from .terrain_analyzer import TerrainAnalyzer, ZoneGrid, build_zone_grid

logger = logging.getLogger(__name__)


# =======================================================================
# ОЦЕНКА ПОЗИЦИЙ ДЛЯ ДИНАМИЧЕСКОГО РАЗМЕЩЕНИЯ
# =======================================================================

@dataclass
class ScoreContext:
    controller: Optional[Pos]
    sources: List[Pos]
    spawn: Pos


def _score_spawn(pos: Pos, ctx: ScoreContext) -> float:
    score = 100.0
    if ctx.controller is not None:
        score -= 2 * chebyshev(pos, ctx.controller)
    for src in ctx.sources:
        score += 50 - chebyshev(pos, src)
    return score


def _score_tower(pos: Pos, ctx: ScoreContext) -> float:
    return 100.0 - 3 * chebyshev(pos, const.ZONE_CENTER)


def _score_near_spawn(weight: int, base: float) -> Callable[[Pos, ScoreContext], float]:
    def score(pos: Pos, ctx: ScoreContext) -> float:
        return base - weight * chebyshev(pos, ctx.spawn)
    return score


def _score_default(pos: Pos, ctx: ScoreContext) -> float:
    if ctx.controller is None:
        return 0.0
    return 50.0 - chebyshev(pos, ctx.controller)


SCORERS: Dict[str, Callable[[Pos, ScoreContext], float]] = {
    const.KIND_SPAWN: _score_spawn,
    const.KIND_TOWER: _score_tower,
    const.KIND_STORAGE: _score_near_spawn(2, 100.0),
    const.KIND_TERMINAL: _score_near_spawn(2, 100.0),
    const.KIND_EXTENSION: _score_near_spawn(1, 50.0),
    const.KIND_LAB: _score_near_spawn(1, 30.0),
}


def score_position(kind: str, pos: Pos, ctx: ScoreContext) -> float:
    return SCORERS.get(kind, _score_default)(pos, ctx)


def spawn_anchor(key: KeyPositions, analysis: TerrainAnalysis) -> Pos:
    """Первая позиция-спавн, а если спавнов нет - центральная точка."""
    return key.spawns[0] if key.spawns else analysis.central_area


def search_anchor(kind: str, key: KeyPositions, analysis: TerrainAnalysis) -> Pos:
    anchor = const.SEARCH_ANCHOR.get(kind, const.DEFAULT_SEARCH_ANCHOR)
    if anchor == const.ANCHOR_CENTRAL:
        return analysis.central_area
    if anchor == const.ANCHOR_ZONE_CENTER:
        return const.ZONE_CENTER
    return spawn_anchor(key, analysis)


# =======================================================================
# ВСПОМОГАТЕЛЬНОЕ
# =======================================================================

def optimize_buildings(buildings: List[PlannedStructure]) -> List[PlannedStructure]:
    """Убирает дубли (позиция, вид), оставляя больший приоритет; сортирует по убыванию."""
    unique: Dict[tuple, PlannedStructure] = {}
    for b in buildings:
        key = (b.pos, b.kind)
        current = unique.get(key)
        if current is None or b.priority > current.priority:
            unique[key] = b
    return sorted(unique.values(), key=lambda b: -b.priority)


def derive_status(plan: ZonePlan) -> str:
    placed = sum(1 for b in plan.buildings if b.placed)
    unplaced = len(plan.buildings) - placed
    if unplaced == 0:
        return const.STATUS_COMPLETE
    if placed == 0:
        return const.STATUS_READY
    return const.STATUS_BUILDING


def plan_priority(tier: int, energy_capacity: int) -> int:
    return tier * 10 + int(energy_capacity) // 100


def violates_limits(plan: ZonePlan) -> bool:
    caps = catalog.limits(plan.tier)
    counts = Counter(b.kind for b in plan.buildings)
    return any(count > caps.get(kind, 0) for kind, count in counts.items())


def _same_kind_present(zone: Zone, pos: Pos, kind: str) -> bool:
    if any(s.kind == kind for s in zone.world.structures_at(pos)):
        return True
    return any(s.kind == kind for s in zone.world.sites_at(pos))


# =======================================================================
# ПЛАНИРОВЩИК
# =======================================================================

class LayoutPlanner:
    def __init__(
        self,
        memory: PlannerMemory,
        clock: Clock,
        settings: PlannerSettings,
        analyzer: TerrainAnalyzer,
    ):
        self.memory = memory
        self.clock = clock
        self.settings = settings
        self.analyzer = analyzer
        self._throttle = LogThrottle(clock)

    # --- Жизненный цикл плана ---

    def plan_room(self, zone: Zone) -> ZonePlan:
        mem = self.memory.zone(zone.name)
        plan = mem.plan
        reason = self.replan_reason(plan, zone.tier)
        if reason is not None:
            logger.info("Zone %s: planning layout (%s)", zone.name, reason)
            plan = self.create_plan(zone, previous=plan)
            mem.plan = plan
        plan.status = derive_status(plan)
        return plan

    def replan_reason(self, plan: Optional[ZonePlan], tier: int) -> Optional[str]:
        if plan is None:
            return "no plan"
        if tier > plan.tier:
            return f"tier {plan.tier} -> {tier}"
        if violates_limits(plan):
            return "structure counts exceed limits"
        return None

    def force_replan(self, zone: Zone) -> ZonePlan:
        self.memory.zone(zone.name).plan = None
        self.analyzer.clear_cache(zone.name)
        return self.plan_room(zone)

    def create_plan(self, zone: Zone, previous: Optional[ZonePlan] = None) -> ZonePlan:
        tier = zone.tier
        analysis = self.analyzer.get_analysis(zone)
        grid = build_zone_grid(zone)
        key = self.analyzer.key_positions(zone, grid.terrain)

        buildings: List[PlannedStructure] = []
        if self.settings.planning.use_templates:
            buildings.extend(self._template_placements(zone, grid, key, analysis, tier))
        if self.settings.planning.use_dynamic_placement:
            buildings.extend(self._dynamic_placements(zone, grid, key, analysis, tier, buildings))
        buildings = optimize_buildings(buildings)
        marked = self._mark_existing(zone, buildings)

        plan = ZonePlan(
            zone=zone.name,
            tier=tier,
            buildings=buildings,
            roads=list(previous.roads) if previous is not None else [],
            status=const.STATUS_PLANNING,
            last_updated=self.clock(),
            priority=plan_priority(tier, zone.controller.energy_capacity),
        )
        logger.info(
            "Zone %s: plan for tier %d with %d structure(s), %d already standing",
            zone.name, tier, len(buildings), marked,
        )
        return plan

    # --- Источники размещения ---

    def _template_placements(
        self, zone: Zone, grid: ZoneGrid, key: KeyPositions, analysis: TerrainAnalysis, tier: int
    ) -> List[PlannedStructure]:
        anchor = spawn_anchor(key, analysis)
        out: List[PlannedStructure] = []
        for t in range(const.MIN_TIER, catalog.clamp_tier(tier) + 1):
            entries = catalog.template(t)
            if not catalog.validate(entries, t):
                logger.warning("Zone %s: template for tier %d skipped", zone.name, t)
                continue
            for p in catalog.apply(entries, anchor, t):
                if self._template_cell_ok(zone, grid, p):
                    out.append(p)
        return out

    @staticmethod
    def _template_cell_ok(zone: Zone, grid: ZoneGrid, p: PlannedStructure) -> bool:
        x, y = p.pos
        if int(grid.terrain[y, x]) == const.TERRAIN_WALL or grid.key_cells[y, x]:
            return False
        for s in zone.world.structures_at(p.pos):
            if s.kind != p.kind and s.kind not in const.WALKABLE_STRUCTURE_KINDS:
                return False
        return all(site.kind == p.kind for site in zone.world.sites_at(p.pos))

    def _dynamic_placements(
        self,
        zone: Zone,
        grid: ZoneGrid,
        key: KeyPositions,
        analysis: TerrainAnalysis,
        tier: int,
        existing: List[PlannedStructure],
    ) -> List[PlannedStructure]:
        caps = catalog.limits(tier)
        built = Counter(s.kind for s in zone.world.structures() if s.owned)
        planned = Counter(b.kind for b in existing)
        claimed: Set[Pos] = {b.pos for b in existing}
        out: List[PlannedStructure] = []

        for kind in catalog.planned_kinds():
            deficit = caps.get(kind, 0) - (built[kind] + planned[kind])
            if deficit <= 0:
                continue
            if kind == const.KIND_CONTAINER:
                extra = plan_containers(
                    zone, self.analyzer, grid, key, tier, deficit, claimed, existing + out
                )
            else:
                extra = self._place_kind(zone, grid, key, analysis, kind, deficit, claimed)
            if len(extra) < deficit:
                logger.debug(
                    "Zone %s: only %d of %d %s placement(s) found",
                    zone.name, len(extra), deficit, kind,
                )
            claimed.update(p.pos for p in extra)
            out.extend(extra)
        return out

    def _place_kind(
        self,
        zone: Zone,
        grid: ZoneGrid,
        key: KeyPositions,
        analysis: TerrainAnalysis,
        kind: str,
        count: int,
        claimed: Set[Pos],
    ) -> List[PlannedStructure]:
        anchor = search_anchor(kind, key, analysis)
        radius = const.SEARCH_RADIUS.get(kind, const.DEFAULT_SEARCH_RADIUS)
        ctx = ScoreContext(
            controller=key.controller,
            sources=list(key.sources),
            spawn=spawn_anchor(key, analysis),
        )
        candidates = [
            pos
            for pos in self.analyzer.buildable_area(zone, anchor, radius, grid)
            if pos not in claimed and self.analyzer.suitable_for(zone, pos, kind, grid)
        ]
        candidates.sort(key=lambda pos: -score_position(kind, pos, ctx))

        base = catalog.base_priority(kind)
        required = catalog.min_tier(kind)
        return [
            PlannedStructure(
                kind=kind,
                pos=pos,
                priority=base - i,
                required_tier=required,
                reason=const.REASON_DYNAMIC,
            )
            for i, pos in enumerate(candidates[:count])
        ]

    @staticmethod
    def _mark_existing(zone: Zone, buildings: List[PlannedStructure]) -> int:
        """Постройки, которые уже стоят (или строятся), сразу считаются размещёнными."""
        marked = 0
        for b in buildings:
            if any(s.kind == b.kind for s in zone.world.structures_at(b.pos)):
                b.placed = True
                marked += 1
                continue
            for site in zone.world.sites_at(b.pos):
                if site.kind == b.kind:
                    b.placed = True
                    b.correlation_id = site.id or None
                    marked += 1
                    break
        return marked

    # --- Постановка площадок ---

    def place_construction_sites(self, zone: Zone, plan: ZonePlan) -> int:
        if not self.settings.planning.building_planning_enabled:
            return 0
        pending = len(zone.world.sites())
        budget = self.settings.planning.max_construction_sites - pending
        if budget <= 0:
            logger.debug("Zone %s: construction budget exhausted (%d pending)", zone.name, pending)
            return 0

        tier = zone.tier
        eligible: List[PlannedStructure] = []
        for b in plan.buildings:
            if b.placed or b.required_tier > tier:
                continue
            if _same_kind_present(zone, b.pos, b.kind):
                b.placed = True
                continue
            eligible.append(b)
        eligible.sort(key=lambda b: -b.priority)

        placed = 0
        for b in eligible:
            if placed >= budget:
                break
            result = zone.executor.try_place(b.pos, b.kind)
            if result == const.PLACE_OK:
                b.placed = True
                b.correlation_id = zone.executor.site_id_at(b.pos, b.kind)
                placed += 1
                logger.info("Zone %s: placed %s site at %s", zone.name, b.kind, b.pos)
            else:
                self._throttle.log(
                    logger, logging.WARNING, f"{zone.name}:{b.kind}:{b.pos}:{result}",
                    "Zone %s: cannot place %s at %s (%s)", zone.name, b.kind, b.pos, result,
                )

        if placed:
            plan.last_updated = self.clock()
        plan.status = derive_status(plan)
        return placed
