# ==============================================================================
# Файл: colony_planner/world/cache.py
# Назначение: Часы тиков и кэш с временем жизни (TTL) для производных данных
#             зоны (анализ местности, сетка стоимости).
# ==============================================================================
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], int]


class TickClock:
    """Ручные часы: хост (или тест) сам двигает номер тика."""

    def __init__(self, tick: int = 0):
        self.tick = int(tick)

    def __call__(self) -> int:
        return self.tick

    def advance(self, ticks: int = 1) -> int:
        self.tick += int(ticks)
        return self.tick


def is_expired(stamped_at: int, now: int, ttl: int) -> bool:
    return now - stamped_at > ttl


@dataclass
class CacheEntry(Generic[T]):
    value: T
    stamped_at: int


class TTLCache(Generic[T]):
    def __init__(self, clock: Clock, ttl: int, name: str = "cache"):
        self.clock = clock
        self.ttl = int(ttl)
        self.name = name
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if is_expired(entry.stamped_at, self.clock(), self.ttl):
            logger.debug("%s: entry '%s' expired", self.name, key)
            del self._entries[key]
            return None
        return entry.value

    def put(self, key: str, value: T) -> T:
        self._entries[key] = CacheEntry(value=value, stamped_at=self.clock())
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
