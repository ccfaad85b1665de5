# ==============================================================================
# Файл: colony_planner/world/memory.py
# Назначение: Память зон: план, карта трафика и кэш анализа местности.
#             Читается из хранилища при первом обращении за тик и
#             записывается обратно в конце тика (flush).
# ==============================================================================
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.interfaces import IKeyValueStore
from ..core.types import AnalysisRecord, Pos, TrafficRecord, ZonePlan
from .serialization import (
    analysis_from_dict,
    analysis_to_dict,
    plan_from_dict,
    plan_to_dict,
    traffic_from_dict,
    traffic_to_dict,
)
from .store import MemoryStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "zones/"


@dataclass
class ZoneMemory:
    plan: Optional[ZonePlan] = None
    traffic: Dict[Pos, TrafficRecord] = field(default_factory=dict)
    analysis: Optional[AnalysisRecord] = None


def zone_memory_to_dict(mem: ZoneMemory) -> Dict:
    return {
        "plan": plan_to_dict(mem.plan) if mem.plan is not None else None,
        "traffic": traffic_to_dict(mem.traffic),
        "analysis": analysis_to_dict(mem.analysis) if mem.analysis is not None else None,
    }


def zone_memory_from_dict(data: Dict) -> ZoneMemory:
    plan = data.get("plan")
    analysis = data.get("analysis")
    return ZoneMemory(
        plan=plan_from_dict(plan) if plan else None,
        traffic=traffic_from_dict(data.get("traffic") or {}),
        analysis=analysis_from_dict(analysis) if analysis else None,
    )


class PlannerMemory:
    def __init__(self, store: Optional[IKeyValueStore] = None):
        self.store = store if store is not None else MemoryStore()
        self._zones: Dict[str, ZoneMemory] = {}

    def zone(self, name: str) -> ZoneMemory:
        mem = self._zones.get(name)
        if mem is None:
            data = self.store.get(KEY_PREFIX + name)
            mem = zone_memory_from_dict(data) if data else ZoneMemory()
            self._zones[name] = mem
        return mem

    def loaded(self) -> List[str]:
        return list(self._zones.keys())

    def reset(self, name: str) -> None:
        """Полностью забыть зону (и в хранилище тоже)."""
        self._zones[name] = ZoneMemory()
        self.store.set(KEY_PREFIX + name, zone_memory_to_dict(self._zones[name]))

    def flush(self) -> int:
        """Записать все загруженные зоны и освободить их. Возвращает число зон."""
        count = 0
        for name, mem in self._zones.items():
            self.store.set(KEY_PREFIX + name, zone_memory_to_dict(mem))
            count += 1
        self._zones.clear()
        logger.debug("Memory flushed: %d zone(s)", count)
        return count
