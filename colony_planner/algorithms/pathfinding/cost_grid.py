# ==============================================================================
# Файл: colony_planner/algorithms/pathfinding/cost_grid.py
# Назначение: Сетка стоимости прохода по зоне для поиска пути
#             (стены/болота/постройки) и её кэш с TTL.
# ==============================================================================
from __future__ import annotations
import logging

import numpy as np

from ...core import constants as const
from ...core.interfaces import IWorldQuery, Zone
from ...world.cache import Clock, TTLCache
from ..terrain.kernels import terrain_cost

logger = logging.getLogger(__name__)


def build_cost_grid(world: IWorldQuery) -> np.ndarray:
    """
    wall=255, swamp=5, plain=1; дорога, контейнер и свой rampart = 1,
    остальные постройки = 255. Площадки строительства так же.
    """
    grid = terrain_cost(
        np.asarray(world.terrain(), dtype=np.uint8),
        const.TERRAIN_WALL,
        const.TERRAIN_SWAMP,
        const.COST_PLAIN,
        const.COST_SWAMP,
        const.COST_BLOCKED,
    )
    for s in world.structures():
        x, y = s.pos
        if s.kind in const.WALKABLE_STRUCTURE_KINDS or (s.kind == const.KIND_RAMPART and s.owned):
            grid[y, x] = const.COST_ROAD
        else:
            grid[y, x] = const.COST_BLOCKED
    for site in world.sites():
        x, y = site.pos
        if site.kind in const.WALKABLE_SITE_KINDS:
            grid[y, x] = const.COST_ROAD
        else:
            grid[y, x] = const.COST_BLOCKED
    return grid


class CostGridCache:
    def __init__(self, clock: Clock, ttl: int):
        self._cache: TTLCache[np.ndarray] = TTLCache(clock, ttl, name="cost-grid")

    def get(self, zone: Zone) -> np.ndarray:
        grid = self._cache.get(zone.name)
        if grid is None:
            grid = self._cache.put(zone.name, build_cost_grid(zone.world))
            logger.debug("Cost grid rebuilt for zone %s", zone.name)
        return grid

    def invalidate(self, zone_name=None) -> None:
        self._cache.invalidate(zone_name)
