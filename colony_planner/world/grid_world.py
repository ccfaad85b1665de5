# ==============================================================================
# Файл: colony_planner/world/grid_world.py
# Назначение: Простая зона в памяти. Реализует запросы к миру, исполнителя
#             строительства и контроллер зоны. Нужна для автономного запуска
#             планировщика и для тестов.
# ==============================================================================
from __future__ import annotations
from typing import Dict, List, Optional

import numpy as np

from ..core import constants as const
from ..core.grid import chebyshev, in_build_area
from ..core.types import Pos, Site, Structure
from ..planners import structure_catalog as catalog

DEFAULT_SITE_CAP = 100


class GridWorld:
    def __init__(
        self,
        name: str = "zone",
        tier: int = 1,
        energy_capacity: int = 300,
        terrain: Optional[np.ndarray] = None,
        site_cap: int = DEFAULT_SITE_CAP,
    ):
        self.name = name
        self.tier = tier
        self.energy_capacity = energy_capacity
        self.owned = True
        self.site_cap = site_cap
        if terrain is None:
            terrain = np.full((const.ZONE_SIZE, const.ZONE_SIZE), const.TERRAIN_PLAIN, dtype=np.uint8)
        self._terrain = np.asarray(terrain, dtype=np.uint8)
        self._structures: Dict[Pos, List[Structure]] = {}
        self._sites: Dict[Pos, Site] = {}
        self._sources: List[Pos] = []
        self._controller: Optional[Pos] = None
        self._mineral: Optional[Pos] = None
        self._next_id = 0

    # --- Наполнение ---

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def set_terrain(self, pos: Pos, terrain: int) -> None:
        self._terrain[pos[1], pos[0]] = terrain

    def add_source(self, pos: Pos) -> None:
        self._sources.append(pos)

    def set_controller(self, pos: Optional[Pos]) -> None:
        self._controller = pos

    def set_mineral(self, pos: Optional[Pos]) -> None:
        self._mineral = pos

    def add_structure(self, kind: str, pos: Pos, owned: bool = True) -> Structure:
        s = Structure(kind=kind, pos=pos, id=self._new_id(kind), owned=owned)
        self._structures.setdefault(pos, []).append(s)
        return s

    def remove_structure(self, pos: Pos, kind: Optional[str] = None) -> int:
        items = self._structures.get(pos, [])
        keep = [s for s in items if kind is not None and s.kind != kind]
        removed = len(items) - len(keep)
        if keep:
            self._structures[pos] = keep
        else:
            self._structures.pop(pos, None)
        return removed

    def remove_site(self, pos: Pos) -> bool:
        return self._sites.pop(pos, None) is not None

    def complete_sites(self) -> int:
        """Достраивает все площадки (удобно для симуляции)."""
        done = 0
        for pos, site in list(self._sites.items()):
            self.add_structure(site.kind, pos)
            del self._sites[pos]
            done += 1
        return done

    # --- IWorldQuery ---

    def terrain(self) -> np.ndarray:
        return self._terrain

    def structures(self) -> List[Structure]:
        return [s for items in self._structures.values() for s in items]

    def sites(self) -> List[Site]:
        return list(self._sites.values())

    def structures_at(self, pos: Pos) -> List[Structure]:
        return list(self._structures.get(pos, []))

    def sites_at(self, pos: Pos) -> List[Site]:
        site = self._sites.get(pos)
        return [site] if site is not None else []

    def structures_in_range(self, pos: Pos, radius: int) -> List[Structure]:
        return [s for s in self.structures() if chebyshev(s.pos, pos) <= radius]

    def sources(self) -> List[Pos]:
        return list(self._sources)

    def controller_pos(self) -> Optional[Pos]:
        return self._controller

    def mineral_pos(self) -> Optional[Pos]:
        return self._mineral

    # --- IConstructionExecutor ---

    def try_place(self, pos: Pos, kind: str) -> str:
        x, y = pos
        if not self.owned:
            return const.PLACE_UNAUTHORIZED
        if not in_build_area(x, y) or int(self._terrain[y, x]) == const.TERRAIN_WALL:
            return const.PLACE_INVALID
        if pos in self._sources or pos == self._controller or pos == self._mineral:
            return const.PLACE_INVALID
        if kind != const.KIND_ROAD:
            if self.tier < catalog.min_tier(kind):
                return const.PLACE_TIER_TOO_LOW
            existing = sum(1 for s in self.structures() if s.kind == kind)
            existing += sum(1 for s in self._sites.values() if s.kind == kind)
            if existing >= catalog.limit_of(kind, self.tier):
                return const.PLACE_TIER_TOO_LOW
        if pos in self._sites:
            return const.PLACE_OCCUPIED
        for s in self._structures.get(pos, []):
            if s.kind == kind:
                return const.PLACE_OCCUPIED
            if kind == const.KIND_ROAD and s.kind == const.KIND_RAMPART:
                continue
            if s.kind != const.KIND_ROAD:
                return const.PLACE_OCCUPIED
        if len(self._sites) >= self.site_cap:
            return const.PLACE_SITE_CAP
        self._sites[pos] = Site(kind=kind, pos=pos, id=self._new_id("site"))
        return const.PLACE_OK

    def site_id_at(self, pos: Pos, kind: str) -> Optional[str]:
        site = self._sites.get(pos)
        if site is not None and site.kind == kind:
            return site.id
        return None
