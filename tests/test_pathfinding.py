# ==============================================================================
# Файл: tests/test_pathfinding.py
# Назначение: Юнит-тесты A* и сетки стоимости зоны.
# ==============================================================================
import unittest

import numpy as np

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from colony_planner.algorithms.pathfinding.a_star import GridPathfinder, find_path
from colony_planner.algorithms.pathfinding.cost_grid import CostGridCache, build_cost_grid
from colony_planner.core import constants as const
from colony_planner.world.cache import TickClock

from zone_fixtures import make_world, zone_of


def _plain():
    return np.full((const.ZONE_SIZE, const.ZONE_SIZE), const.COST_PLAIN, dtype=np.uint8)


class TestAStar(unittest.TestCase):
    """Поиск пути по сетке стоимости."""

    def test_straight_line(self):
        result = find_path(_plain(), (5, 5), (10, 5))
        self.assertFalse(result.incomplete)
        self.assertEqual(len(result.path), 5)
        self.assertEqual(result.path[-1], (10, 5))
        self.assertNotIn((5, 5), result.path)
        self.assertEqual(result.cost, 5.0)

    def test_routes_around_wall(self):
        grid = _plain()
        grid[0:9, 7] = const.COST_BLOCKED
        result = find_path(grid, (5, 5), (10, 5))
        self.assertFalse(result.incomplete)
        self.assertEqual(result.path[-1], (10, 5))
        for x, y in result.path:
            self.assertLess(int(grid[y, x]), const.COST_BLOCKED)
        self.assertIn((7, 9), result.path)

    def test_swamp_is_avoided_when_cheaper(self):
        grid = _plain()
        for y in (4, 5, 6):
            grid[y, 6] = const.COST_SWAMP
        result = find_path(grid, (5, 5), (7, 5))
        self.assertFalse(result.incomplete)
        self.assertEqual(result.cost, 4.0)
        self.assertNotIn((6, 5), result.path)

    def test_blocked_goal_is_enterable(self):
        grid = _plain()
        grid[5, 10] = const.COST_BLOCKED
        result = find_path(grid, (5, 5), (10, 5))
        self.assertFalse(result.incomplete)
        self.assertEqual(result.path[-1], (10, 5))

    def test_enclosed_start(self):
        grid = _plain()
        grid[4:7, 4:7] = const.COST_BLOCKED
        result = find_path(grid, (5, 5), (20, 20))
        self.assertTrue(result.incomplete)
        self.assertEqual(result.path, [])

    def test_unreachable_goal_returns_partial_path(self):
        grid = _plain()
        # стена поперёк всей зоны
        grid[:, 20] = const.COST_BLOCKED
        grid[30, 30] = const.COST_PLAIN
        result = find_path(grid, (10, 10), (30, 30), max_ops=5000)
        self.assertTrue(result.incomplete)
        self.assertTrue(result.path)
        self.assertEqual(result.path[-1][0], 19)

    def test_trivial_cases(self):
        same = find_path(_plain(), (5, 5), (5, 5))
        self.assertFalse(same.incomplete)
        self.assertEqual(same.path, [])

        outside = find_path(_plain(), (5, 5), (60, 5))
        self.assertTrue(outside.incomplete)

    def test_ops_limit(self):
        result = find_path(_plain(), (1, 1), (48, 48), max_ops=1)
        self.assertTrue(result.incomplete)

    def test_service_wrapper(self):
        finder = GridPathfinder(max_ops=100)
        result = finder.find_path((5, 5), (8, 8), _plain())
        self.assertEqual(result.path, [(6, 6), (7, 7), (8, 8)])


class TestCostGrid(unittest.TestCase):
    """Сетка стоимости из местности, построек и площадок."""

    def test_cost_values(self):
        world = make_world(tier=3)
        world.set_terrain((5, 5), const.TERRAIN_WALL)
        world.set_terrain((6, 5), const.TERRAIN_SWAMP)
        world.set_terrain((7, 5), const.TERRAIN_SWAMP)
        world.add_structure(const.KIND_ROAD, (7, 5))
        world.add_structure(const.KIND_RAMPART, (8, 5), owned=True)
        world.add_structure(const.KIND_RAMPART, (9, 5), owned=False)
        world.try_place((10, 5), const.KIND_CONTAINER)
        world.try_place((11, 5), const.KIND_EXTENSION)

        grid = build_cost_grid(world)

        self.assertEqual(grid.shape, (50, 50))
        self.assertEqual(int(grid[5, 5]), const.COST_BLOCKED)
        self.assertEqual(int(grid[5, 6]), const.COST_SWAMP)
        self.assertEqual(int(grid[5, 7]), const.COST_ROAD)
        self.assertEqual(int(grid[5, 8]), const.COST_ROAD)
        self.assertEqual(int(grid[5, 9]), const.COST_BLOCKED)
        self.assertEqual(int(grid[5, 10]), const.COST_ROAD)
        self.assertEqual(int(grid[5, 11]), const.COST_BLOCKED)
        self.assertEqual(int(grid[25, 25]), const.COST_BLOCKED)  # спавн
        self.assertEqual(int(grid[30, 30]), const.COST_PLAIN)

    def test_cache_ttl_and_invalidate(self):
        clock = TickClock(0)
        cache = CostGridCache(clock, ttl=10)
        world = make_world()
        zone = zone_of(world)

        first = cache.get(zone)
        self.assertIs(cache.get(zone), first)

        clock.advance(11)
        second = cache.get(zone)
        self.assertIsNot(second, first)

        cache.invalidate("W1N1")
        self.assertIsNot(cache.get(zone), second)


if __name__ == '__main__':
    unittest.main()
