# ==============================================================================
# Файл: colony_planner/planners/container_planner.py
# Назначение: Размещение контейнеров рядом с источниками, контроллером
#             и минералом.
# ==============================================================================
from __future__ import annotations
import logging
from typing import List, Optional, Set, Tuple

from ..core import constants as const
from ..core.grid import NEI8, chebyshev, in_build_area
from ..core.interfaces import Zone
from ..core.types import KeyPositions, PlannedStructure, Pos
from .terrain_analyzer import TerrainAnalyzer, ZoneGrid

logger = logging.getLogger(__name__)


def container_targets(key: KeyPositions, tier: int) -> List[Tuple[Pos, int, int, str]]:
    """Цели по порядку: (позиция, приоритет, мин. уровень, причина)."""
    targets: List[Tuple[Pos, int, int, str]] = []
    container_tier = const.MIN_TIER_BY_KIND[const.KIND_CONTAINER]
    for src in key.sources:
        targets.append(
            (src, const.CONTAINER_SOURCE_PRIORITY, container_tier, const.REASON_CONTAINER_SOURCE)
        )
    if key.controller is not None:
        targets.append(
            (key.controller, const.CONTAINER_CONTROLLER_PRIORITY, container_tier,
             const.REASON_CONTAINER_CONTROLLER)
        )
    if key.mineral is not None and tier >= const.CONTAINER_MINERAL_TIER:
        targets.append(
            (key.mineral, const.CONTAINER_MINERAL_PRIORITY, const.CONTAINER_MINERAL_TIER,
             const.REASON_CONTAINER_MINERAL)
        )
    return targets


def score_container_cell(grid: ZoneGrid, pos: Pos) -> int:
    x, y = pos
    score = 100
    if grid.is_swamp(pos):
        score -= 20
    score += 5 * int(grid.walkable_3x3[y, x])
    score += max(0, 25 - chebyshev(pos, const.ZONE_CENTER))
    return score


def _has_container_near(zone: Zone, target: Pos, planned: List[PlannedStructure]) -> bool:
    for s in zone.world.structures_in_range(target, 1):
        if s.kind == const.KIND_CONTAINER:
            return True
    for site in zone.world.sites():
        if site.kind == const.KIND_CONTAINER and chebyshev(site.pos, target) <= 1:
            return True
    return any(
        p.kind == const.KIND_CONTAINER and chebyshev(p.pos, target) <= 1 for p in planned
    )


def best_container_cell(
    zone: Zone,
    analyzer: TerrainAnalyzer,
    grid: ZoneGrid,
    target: Pos,
    claimed: Set[Pos],
) -> Optional[Pos]:
    best: Optional[Pos] = None
    best_score = None
    tx, ty = target
    for dx, dy in NEI8:
        pos = (tx + dx, ty + dy)
        if not in_build_area(*pos) or pos in claimed:
            continue
        if not analyzer.suitable_for(zone, pos, const.KIND_CONTAINER, grid):
            continue
        score = score_container_cell(grid, pos)
        if best_score is None or score > best_score:
            best, best_score = pos, score
    return best


def plan_containers(
    zone: Zone,
    analyzer: TerrainAnalyzer,
    grid: ZoneGrid,
    key: KeyPositions,
    tier: int,
    max_count: int,
    claimed: Optional[Set[Pos]] = None,
    planned: Optional[List[PlannedStructure]] = None,
) -> List[PlannedStructure]:
    """
    Контейнеры: по одному у каждого источника, потом у контроллера, потом
    у минерала (с 6 уровня). Не больше max_count. Цель без подходящей
    соседней клетки пропускается.
    """
    if max_count <= 0:
        return []
    claimed = claimed if claimed is not None else set()
    planned = planned if planned is not None else []

    out: List[PlannedStructure] = []
    for target, priority, required_tier, reason in container_targets(key, tier):
        if len(out) >= max_count:
            break
        if tier < required_tier:
            continue
        if _has_container_near(zone, target, planned + out):
            continue
        cell = best_container_cell(zone, analyzer, grid, target, claimed)
        if cell is None:
            logger.debug("Zone %s: no container cell next to %s (%s)", zone.name, target, reason)
            continue
        claimed.add(cell)
        out.append(
            PlannedStructure(
                kind=const.KIND_CONTAINER,
                pos=cell,
                priority=priority,
                required_tier=required_tier,
                reason=reason,
            )
        )
    return out
