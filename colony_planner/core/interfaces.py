# ==============================================================================
# Файл: colony_planner/core/interfaces.py
# Назначение: Интерфейсы внешних сервисов, которые планировщик потребляет
#             (мир, исполнитель строительства, поиск пути, хранилище).
# ==============================================================================
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import numpy as np

from .types import PathResult, Pos, Site, Structure


class IWorldQuery(Protocol):
    """Запросы к состоянию зоны."""

    def terrain(self) -> np.ndarray: ...
    def structures(self) -> List[Structure]: ...
    def sites(self) -> List[Site]: ...
    def structures_at(self, pos: Pos) -> List[Structure]: ...
    def sites_at(self, pos: Pos) -> List[Site]: ...
    def structures_in_range(self, pos: Pos, radius: int) -> List[Structure]: ...
    def sources(self) -> List[Pos]: ...
    def controller_pos(self) -> Optional[Pos]: ...
    def mineral_pos(self) -> Optional[Pos]: ...


class IConstructionExecutor(Protocol):
    """Исполнитель: ставит площадки строительства."""

    def try_place(self, pos: Pos, kind: str) -> str: ...
    def site_id_at(self, pos: Pos, kind: str) -> Optional[str]: ...


class IZoneController(Protocol):
    name: str
    tier: int
    energy_capacity: int


class IPathfindingService(Protocol):
    def find_path(self, start: Pos, goal: Pos, cost_grid: np.ndarray) -> PathResult: ...


class IKeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]: ...
    def set(self, key: str, value: Dict[str, Any]) -> None: ...


@dataclass
class Zone:
    """Всё, что нужно планировщикам для одного прохода по зоне."""

    world: IWorldQuery
    executor: IConstructionExecutor
    controller: IZoneController

    @property
    def name(self) -> str:
        return self.controller.name

    @property
    def tier(self) -> int:
        return int(self.controller.tier)

    @classmethod
    def of(cls, world: Any) -> "Zone":
        """Зона из объекта, который сам реализует все три интерфейса."""
        return cls(world=world, executor=world, controller=world)
