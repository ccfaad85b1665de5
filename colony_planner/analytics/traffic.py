# ==============================================================================
# Файл: colony_planner/analytics/traffic.py
# Назначение: Учёт трафика юнитов по клеткам зоны с затуханием по времени.
#             Используется планировщиком дорог.
# ==============================================================================
from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..algorithms.terrain.kernels import box_sum_3x3
from ..core import constants as const
from ..core.grid import chebyshev, round_half_up
from ..core.settings import PlannerSettings
from ..core.types import Pos, TrafficRecord
from ..world.cache import Clock
from ..world.memory import PlannerMemory

logger = logging.getLogger(__name__)

TOP_ROLES = 5


class TrafficTracker:
    """
    Карта трафика хранится в памяти зоны: {позиция -> TrafficRecord}.
    Все методы принимают имя зоны.
    """

    def __init__(self, memory: PlannerMemory, clock: Clock, settings: PlannerSettings):
        self.memory = memory
        self.clock = clock
        self.settings = settings

    @property
    def ttl(self) -> int:
        return self.settings.traffic.traffic_data_ttl

    def _traffic(self, zone_name: str) -> Dict[Pos, TrafficRecord]:
        return self.memory.zone(zone_name).traffic

    # --- Запись ---

    def record(self, zone_name: str, pos: Pos, role: str) -> None:
        if not self.settings.traffic.traffic_analysis_enabled:
            return
        traffic = self._traffic(zone_name)
        rec = traffic.get(pos)
        if rec is None:
            rec = TrafficRecord()
            traffic[pos] = rec
        rec.count += 1
        rec.last_seen = self.clock()
        if role and role not in rec.roles:
            rec.roles.append(role)

    def track(self, zone_name: str, units: Iterable[Tuple[Pos, str]]) -> int:
        """Записать позиции сразу нескольких юнитов: [(pos, role), ...]."""
        n = 0
        for pos, role in units:
            self.record(zone_name, pos, role)
            n += 1
        return n

    # --- Оценки ---

    def _score_of(self, rec: TrafficRecord, now: int) -> float:
        age = now - rec.last_seen
        return rec.count * max(0.0, 1.0 - age / self.ttl)

    def score(self, zone_name: str, pos: Pos) -> float:
        rec = self._traffic(zone_name).get(pos)
        if rec is None:
            return 0.0
        return self._score_of(rec, self.clock())

    def high_traffic(self, zone_name: str, min_count: Optional[int] = None) -> List[Pos]:
        if min_count is None:
            min_count = self.settings.roads.min_traffic_for_road
        self.prune(zone_name)
        return sorted(
            (pos for pos, rec in self._traffic(zone_name).items() if rec.count >= min_count),
            key=lambda p: (p[1], p[0]),
        )

    # --- Обслуживание ---

    def prune(self, zone_name: str) -> int:
        """Удаляет записи, которые не обновлялись дольше TTL."""
        traffic = self._traffic(zone_name)
        now = self.clock()
        expired = [pos for pos, rec in traffic.items() if now - rec.last_seen > self.ttl]
        for pos in expired:
            del traffic[pos]
        if expired:
            logger.debug("Zone %s: pruned %d traffic record(s)", zone_name, len(expired))
        return len(expired)

    def optimize(self, zone_name: str) -> int:
        """Удаляет редкие клетки, чтобы карта не разрасталась."""
        floor = max(1, self.settings.roads.min_traffic_for_road // 4)
        traffic = self._traffic(zone_name)
        rare = [pos for pos, rec in traffic.items() if rec.count < floor]
        for pos in rare:
            del traffic[pos]
        return len(rare)

    # --- Аналитика ---

    def statistics(self, zone_name: str) -> Dict[str, Any]:
        traffic = self._traffic(zone_name)
        total = sum(rec.count for rec in traffic.values())
        roles: Counter = Counter()
        for rec in traffic.values():
            for role in rec.roles:
                roles[role] += rec.count
        threshold = self.settings.roads.min_traffic_for_road
        return {
            "positions": len(traffic),
            "total": total,
            "average": (total / len(traffic)) if traffic else 0.0,
            "high_traffic": sum(1 for rec in traffic.values() if rec.count >= threshold),
            "top_roles": roles.most_common(TOP_ROLES),
        }

    def heatmap(self, zone_name: str) -> np.ndarray:
        """Сетка 50x50 [y, x] с текущими оценками трафика."""
        out = np.zeros((const.ZONE_SIZE, const.ZONE_SIZE), dtype=np.float64)
        now = self.clock()
        for (x, y), rec in self._traffic(zone_name).items():
            out[y, x] = self._score_of(rec, now)
        return out

    def density_map(self, zone_name: str) -> np.ndarray:
        """Сумма посещений по окрестности 3x3 каждой клетки."""
        counts = np.zeros((const.ZONE_SIZE, const.ZONE_SIZE), dtype=np.float64)
        for (x, y), rec in self._traffic(zone_name).items():
            counts[y, x] = rec.count
        return box_sum_3x3(counts)

    def traffic_between(self, zone_name: str, a: Pos, b: Pos) -> Dict[str, Any]:
        """Средний трафик и горячие точки вдоль прямой a -> b."""
        steps = max(1, chebyshev(a, b))
        line: List[Pos] = []
        for i in range(steps + 1):
            t = i / steps
            p = (round_half_up(a[0] + (b[0] - a[0]) * t), round_half_up(a[1] + (b[1] - a[1]) * t))
            if not line or line[-1] != p:
                line.append(p)
        scores = [self.score(zone_name, p) for p in line]
        threshold = self.settings.roads.min_traffic_for_road
        return {
            "average": sum(scores) / len(scores),
            "hotspots": [p for p, s in zip(line, scores) if s >= threshold],
            "positions": line,
        }
