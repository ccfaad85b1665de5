# ==============================================================================
# Файл: colony_planner/planners/terrain_analyzer.py
# Назначение: Анализ местности зоны: классификация клеток, выходы, ключевые
#             позиции, центральная точка застройки и проверки пригодности клеток.
# ==============================================================================
from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..algorithms.terrain.kernels import count_walkable_neighbors
from ..core import constants as const
from ..core.errors import AnalysisError
from ..core.grid import chebyshev, in_build_area, in_bounds, ring, round_half_up
from ..core.interfaces import Zone
from ..core.settings import PlannerSettings
from ..core.types import AnalysisRecord, KeyPositions, Pos, TerrainAnalysis
from ..world.cache import Clock, is_expired
from ..world.memory import PlannerMemory

logger = logging.getLogger(__name__)

CENTRAL_SEARCH_RADIUS = 10


@dataclass
class ZoneGrid:
    """Снимок сетки зоны на один проход планировщика."""

    terrain: np.ndarray
    walkable: np.ndarray
    build_blocked: np.ndarray
    walkable_neighbors: np.ndarray
    walkable_3x3: np.ndarray
    # клетки источников, контроллера и минерала
    key_cells: np.ndarray

    def is_walkable(self, pos: Pos) -> bool:
        x, y = pos
        return in_bounds(x, y) and bool(self.walkable[y, x])

    def is_swamp(self, pos: Pos) -> bool:
        return int(self.terrain[pos[1], pos[0]]) == const.TERRAIN_SWAMP


def _structure_blocks_walk(kind: str, owned: bool) -> bool:
    if kind in const.WALKABLE_STRUCTURE_KINDS:
        return False
    if kind == const.KIND_RAMPART and owned:
        return False
    return True


def _read_terrain(zone: Zone) -> np.ndarray:
    terrain = np.asarray(zone.world.terrain())
    if terrain.shape != (const.ZONE_SIZE, const.ZONE_SIZE):
        raise AnalysisError(
            f"zone {zone.name}: terrain grid must be {const.ZONE_SIZE}x{const.ZONE_SIZE}, got {terrain.shape}"
        )
    return terrain


def _key_object_cells(zone: Zone) -> List[Pos]:
    cells = list(zone.world.sources())
    for pos in (zone.world.controller_pos(), zone.world.mineral_pos()):
        if pos is not None:
            cells.append(pos)
    return cells


def build_zone_grid(zone: Zone) -> ZoneGrid:
    terrain = _read_terrain(zone)
    walkable = terrain != const.TERRAIN_WALL
    build_blocked = np.zeros(terrain.shape, dtype=np.bool_)
    key_cells = np.zeros(terrain.shape, dtype=np.bool_)

    for s in zone.world.structures():
        x, y = s.pos
        if _structure_blocks_walk(s.kind, s.owned):
            walkable[y, x] = False
        if s.kind not in const.WALKABLE_STRUCTURE_KINDS:
            build_blocked[y, x] = True
    for site in zone.world.sites():
        x, y = site.pos
        if site.kind not in const.WALKABLE_SITE_KINDS:
            walkable[y, x] = False
        # любая площадка занимает клетку для новой постройки
        build_blocked[y, x] = True
    for pos in _key_object_cells(zone):
        if in_bounds(*pos):
            key_cells[pos[1], pos[0]] = True
    build_blocked |= key_cells

    return ZoneGrid(
        terrain=terrain,
        walkable=walkable,
        build_blocked=build_blocked,
        walkable_neighbors=count_walkable_neighbors(walkable, False),
        walkable_3x3=count_walkable_neighbors(walkable, True),
        key_cells=key_cells,
    )


class TerrainAnalyzer:
    def __init__(self, memory: PlannerMemory, clock: Clock, settings: PlannerSettings):
        self.memory = memory
        self.clock = clock
        self.settings = settings

    # --- Полный анализ ---

    def analyze(self, zone: Zone) -> TerrainAnalysis:
        started = time.perf_counter()
        grid = build_zone_grid(zone)
        terrain = grid.terrain

        walls = [(int(x), int(y)) for y, x in np.argwhere(terrain == const.TERRAIN_WALL)]
        swamps = [(int(x), int(y)) for y, x in np.argwhere(terrain == const.TERRAIN_SWAMP)]
        open_spaces = [
            (int(x), int(y))
            for y, x in np.argwhere(grid.walkable)
            if in_build_area(int(x), int(y))
        ]
        key = self.key_positions(zone, terrain)

        analysis = TerrainAnalysis(
            open_spaces=open_spaces,
            walls=walls,
            swamps=swamps,
            exits=list(key.exits),
            central_area=self.central_area(zone, grid, key),
        )
        self.memory.zone(zone.name).analysis = AnalysisRecord(
            terrain=analysis, key_positions=key, last_analyzed=self.clock()
        )
        logger.debug(
            "Zone %s analyzed in %.2f ms: %d open, %d walls, %d swamps, %d exits",
            zone.name,
            (time.perf_counter() - started) * 1000.0,
            len(open_spaces),
            len(walls),
            len(swamps),
            len(analysis.exits),
        )
        return analysis

    def get_analysis(self, zone: Zone) -> TerrainAnalysis:
        """Анализ из кэша, пока не истёк TTL, иначе полный пересчёт."""
        record = self.memory.zone(zone.name).analysis
        ttl = self.settings.cache.layout_analysis_ttl
        if record is not None and not is_expired(record.last_analyzed, self.clock(), ttl):
            return record.terrain
        return self.analyze(zone)

    def clear_cache(self, zone_name: Optional[str] = None) -> None:
        names = [zone_name] if zone_name is not None else self.memory.loaded()
        for name in names:
            self.memory.zone(name).analysis = None
            logger.debug("Analysis cache cleared for zone %s", name)

    # --- Ключевые позиции ---

    def key_positions(self, zone: Zone, terrain: Optional[np.ndarray] = None) -> KeyPositions:
        if terrain is None:
            terrain = _read_terrain(zone)
        world = zone.world
        spawns = [
            s.pos for s in world.structures() if s.kind == const.KIND_SPAWN and s.owned
        ]
        return KeyPositions(
            sources=list(world.sources()),
            controller=world.controller_pos(),
            mineral=world.mineral_pos(),
            spawns=spawns,
            exits=find_exits(terrain),
        )

    def central_area(
        self, zone: Zone, grid: Optional[ZoneGrid] = None, key: Optional[KeyPositions] = None
    ) -> Pos:
        grid = grid if grid is not None else build_zone_grid(zone)
        key = key if key is not None else self.key_positions(zone, grid.terrain)

        wx = wy = 0.0
        weight = 0
        if key.controller is not None:
            wx += key.controller[0] * 2
            wy += key.controller[1] * 2
            weight += 2
        for sx, sy in key.sources:
            wx += sx
            wy += sy
            weight += 1
        if weight == 0:
            return const.ZONE_CENTER

        center = (round_half_up(wx / weight), round_half_up(wy / weight))
        if grid.is_walkable(center):
            return center
        for radius in range(1, CENTRAL_SEARCH_RADIUS + 1):
            for pos in ring(center, radius):
                if grid.is_walkable(pos):
                    return pos
        logger.debug("Zone %s: no walkable cell near centroid %s", zone.name, center)
        return const.ZONE_CENTER

    # --- Пригодность клеток ---

    def buildable_area(
        self, zone: Zone, center: Pos, radius: int, grid: Optional[ZoneGrid] = None
    ) -> List[Pos]:
        grid = grid if grid is not None else build_zone_grid(zone)
        cx, cy = center
        out: List[Pos] = []
        for x in range(max(const.BUILD_MIN, cx - radius), min(const.BUILD_MAX, cx + radius) + 1):
            for y in range(max(const.BUILD_MIN, cy - radius), min(const.BUILD_MAX, cy + radius) + 1):
                if grid.walkable[y, x]:
                    out.append((x, y))
        return out

    def is_walkable(self, zone: Zone, pos: Pos, grid: Optional[ZoneGrid] = None) -> bool:
        grid = grid if grid is not None else build_zone_grid(zone)
        return grid.is_walkable(pos)

    def suitable_for(
        self, zone: Zone, pos: Pos, kind: str, grid: Optional[ZoneGrid] = None
    ) -> bool:
        grid = grid if grid is not None else build_zone_grid(zone)
        x, y = pos
        if not in_build_area(x, y):
            return False
        if int(grid.terrain[y, x]) == const.TERRAIN_WALL or grid.build_blocked[y, x]:
            return False
        if kind in const.CLEARANCE_KINDS:
            return int(grid.walkable_neighbors[y, x]) / 8.0 >= const.CLEARANCE_MIN_RATIO
        return True


def find_exits(terrain: np.ndarray) -> List[Pos]:
    """Клетки на краю зоны, которые не являются стеной."""
    last = const.ZONE_SIZE - 1
    border: List[Pos] = []
    for x in range(const.ZONE_SIZE):
        border.append((x, 0))
        border.append((x, last))
    for y in range(1, last):
        border.append((0, y))
        border.append((last, y))
    return [(x, y) for x, y in border if int(terrain[y, x]) != const.TERRAIN_WALL]


def nearest_distance(pos: Pos, targets: List[Pos]) -> int:
    if not targets:
        return 0
    return min(chebyshev(pos, t) for t in targets)
