# colony_planner/algorithms/pathfinding/a_star.py
from __future__ import annotations
import heapq
import math
from typing import Dict, List, Set, Tuple

import numpy as np

from ...core.types import PathResult
from .helpers import Coord, NEI8, heuristic_chebyshev, in_bounds, reconstruct, step_cost

DEFAULT_MAX_OPS = 2000


def find_path(
        cost_grid: np.ndarray,
        start_pos: Coord,
        end_pos: Coord,
        max_ops: int = DEFAULT_MAX_OPS,
) -> PathResult:
    """
    A* по 8 соседям над сеткой стоимости зоны.
    Путь не включает стартовую клетку и включает цель. Цель всегда
    можно занять, стоимость старта не учитывается.
    Если цель недостижима или исчерпан лимит операций, возвращается путь
    к ближайшей к цели клетке и incomplete=True.
    """
    sx, sy = start_pos
    gx, gy = end_pos
    if not (in_bounds(sx, sy) and in_bounds(gx, gy)):
        return PathResult(path=[], incomplete=True)
    if start_pos == end_pos:
        return PathResult(path=[], incomplete=False)

    start: Coord = (sx, sy)
    goal: Coord = (gx, gy)
    open_heap: List[Tuple[float, int, Coord]] = []
    heapq.heappush(open_heap, (0.0, 0, start))
    came_from: Dict[Coord, Coord] = {}
    g_score: Dict[Coord, float] = {start: 0.0}
    closed: Set[Coord] = set()
    tie_breaker = 0

    best: Coord = start
    best_h = heuristic_chebyshev(start, goal)
    ops = 0

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            path = reconstruct(came_from, current)[1:]
            return PathResult(path=path, incomplete=False, cost=g_score[current])

        closed.add(current)
        ops += 1
        if ops > max_ops:
            break

        h_cur = heuristic_chebyshev(current, goal)
        if h_cur < best_h:
            best, best_h = current, h_cur

        cx, cy = current
        for dx, dy in NEI8:
            nx, ny = cx + dx, cy + dy
            if not in_bounds(nx, ny):
                continue
            nbr: Coord = (nx, ny)
            cost = 1.0 if nbr == goal else step_cost(cost_grid, nx, ny)
            if cost == math.inf:
                continue

            tentative_g = g_score[current] + cost
            if tentative_g < g_score.get(nbr, math.inf):
                came_from[nbr] = current
                g_score[nbr] = tentative_g
                tie_breaker += 1
                f_score = tentative_g + heuristic_chebyshev(nbr, goal)
                heapq.heappush(open_heap, (f_score, tie_breaker, nbr))

    path = reconstruct(came_from, best)[1:]
    return PathResult(path=path, incomplete=True, cost=g_score.get(best, 0.0))


class GridPathfinder:
    """Сервис поиска пути по умолчанию (реализует IPathfindingService)."""

    def __init__(self, max_ops: int = DEFAULT_MAX_OPS):
        self.max_ops = int(max_ops)

    def find_path(self, start: Coord, goal: Coord, cost_grid: np.ndarray) -> PathResult:
        return find_path(cost_grid, start, goal, self.max_ops)
