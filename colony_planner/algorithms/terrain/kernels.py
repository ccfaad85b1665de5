# ==============================================================================
# Файл: colony_planner/algorithms/terrain/kernels.py
# Назначение: Быстрые numba-ядра для анализа сетки зоны.
# ==============================================================================
import numpy as np
from numba import njit


@njit(cache=True)
def count_walkable_neighbors(walkable: np.ndarray, include_center: bool) -> np.ndarray:
    """
    Для каждой клетки считает проходимые клетки в окрестности 3x3.
    Клетки за пределами сетки не считаются.
    """
    h, w = walkable.shape
    out = np.zeros((h, w), dtype=np.int32)
    for y in range(h):
        for x in range(w):
            total = 0
            for dy in range(-1, 2):
                ny = y + dy
                if ny < 0 or ny >= h:
                    continue
                for dx in range(-1, 2):
                    nx = x + dx
                    if nx < 0 or nx >= w:
                        continue
                    if dx == 0 and dy == 0 and not include_center:
                        continue
                    if walkable[ny, nx]:
                        total += 1
            out[y, x] = total
    return out


@njit(cache=True)
def box_sum_3x3(values: np.ndarray) -> np.ndarray:
    """Сумма значений в окрестности 3x3 каждой клетки (для карт плотности)."""
    h, w = values.shape
    out = np.zeros((h, w), dtype=np.float64)
    for y in range(h):
        for x in range(w):
            acc = 0.0
            for dy in range(-1, 2):
                ny = y + dy
                if ny < 0 or ny >= h:
                    continue
                for dx in range(-1, 2):
                    nx = x + dx
                    if 0 <= nx < w:
                        acc += values[ny, nx]
            out[y, x] = acc
    return out


@njit(cache=True)
def terrain_cost(terrain: np.ndarray, wall_id: int, swamp_id: int,
                 plain_cost: int, swamp_cost: int, blocked_cost: int) -> np.ndarray:
    """Базовая стоимость клеток только по местности."""
    h, w = terrain.shape
    out = np.empty((h, w), dtype=np.uint8)
    for y in range(h):
        for x in range(w):
            t = terrain[y, x]
            if t == wall_id:
                out[y, x] = blocked_cost
            elif t == swamp_id:
                out[y, x] = swamp_cost
            else:
                out[y, x] = plain_cost
    return out
