# colony_planner/core/types.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import constants as const

Pos = Tuple[int, int]


@dataclass(frozen=True)
class Structure:
    """Постройка, стоящая в зоне (как её видит мир)."""

    kind: str
    pos: Pos
    id: str = ""
    owned: bool = True


@dataclass(frozen=True)
class Site:
    """Площадка строительства (ожидающая постройка)."""

    kind: str
    pos: Pos
    id: str = ""


@dataclass
class KeyPositions:
    sources: List[Pos] = field(default_factory=list)
    controller: Optional[Pos] = None
    mineral: Optional[Pos] = None
    spawns: List[Pos] = field(default_factory=list)
    exits: List[Pos] = field(default_factory=list)


@dataclass
class TerrainAnalysis:
    """Результат полного анализа местности зоны."""

    open_spaces: List[Pos] = field(default_factory=list)
    walls: List[Pos] = field(default_factory=list)
    swamps: List[Pos] = field(default_factory=list)
    exits: List[Pos] = field(default_factory=list)
    central_area: Pos = const.ZONE_CENTER


@dataclass
class AnalysisRecord:
    """Кэшируемая запись анализа: {terrain, keyPositions, lastAnalyzed}."""

    terrain: TerrainAnalysis
    key_positions: KeyPositions
    last_analyzed: int


@dataclass(frozen=True)
class TemplateEntry:
    kind: str
    offset: Pos
    priority: int


@dataclass
class PlannedStructure:
    kind: str
    pos: Pos
    priority: int
    required_tier: int
    placed: bool = False
    correlation_id: Optional[str] = None
    reason: str = ""


@dataclass
class PlannedRoad:
    pos: Pos
    priority: int
    traffic_score: float = 0.0
    placed: bool = False
    correlation_id: Optional[str] = None
    path_type: str = const.PATH_INTERNAL
    # выставляется сверкой, когда построенная дорога пропала
    rebuild: bool = False


@dataclass
class ZonePlan:
    zone: str
    tier: int
    buildings: List[PlannedStructure] = field(default_factory=list)
    roads: List[PlannedRoad] = field(default_factory=list)
    status: str = const.STATUS_PLANNING
    last_updated: int = 0
    priority: int = 0


@dataclass
class TrafficRecord:
    count: int = 0
    last_seen: int = 0
    roles: List[str] = field(default_factory=list)


@dataclass
class PathResult:
    path: List[Pos] = field(default_factory=list)
    incomplete: bool = False
    cost: float = 0.0
