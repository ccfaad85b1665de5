# colony_planner/algorithms/pathfinding/helpers.py
from __future__ import annotations
from typing import Dict, List, Tuple

import numpy as np

from ...core import constants as const
from ...core.grid import NEI8, in_bounds

Coord = Tuple[int, int]

__all__ = ["Coord", "NEI8", "in_bounds", "heuristic_chebyshev", "step_cost", "reconstruct"]


def heuristic_chebyshev(a: Coord, b: Coord) -> float:
    return float(max(abs(a[0] - b[0]), abs(a[1] - b[1])))


def step_cost(cost_grid: np.ndarray, x: int, y: int) -> float:
    """Стоимость входа в клетку; inf для непроходимых."""
    c = int(cost_grid[y, x])
    if c >= const.COST_BLOCKED:
        return float("inf")
    return float(c)


def reconstruct(came_from: Dict[Coord, Coord], current: Coord) -> List[Coord]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path
