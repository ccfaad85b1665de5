# ==============================================================================
# Файл: colony_planner/core/grid.py
# Назначение: Геометрия квадратной сетки зоны 50x50 (расстояния, соседи, кольца).
# ==============================================================================
from __future__ import annotations
import math
from typing import Iterator, List

from . import constants as const
from .types import Pos

NEI8: List[Pos] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < const.ZONE_SIZE and 0 <= y < const.ZONE_SIZE


def in_build_area(x: int, y: int) -> bool:
    """Клетка не на краю зоны (на краю строить нельзя)."""
    return const.BUILD_MIN <= x <= const.BUILD_MAX and const.BUILD_MIN <= y <= const.BUILD_MAX


def chebyshev(a: Pos, b: Pos) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def ring(center: Pos, radius: int) -> Iterator[Pos]:
    """Клетки ровно на расстоянии radius (Чебышёв), по x, затем по y."""
    cx, cy = center
    for x in range(cx - radius, cx + radius + 1):
        for y in range(cy - radius, cy + radius + 1):
            if max(abs(x - cx), abs(y - cy)) != radius:
                continue
            if in_bounds(x, y):
                yield x, y


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
