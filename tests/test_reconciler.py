# ==============================================================================
# Файл: tests/test_reconciler.py
# Назначение: Юнит-тесты сверки плана с миром.
# ==============================================================================
import unittest

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from colony_planner.core import constants as const
from colony_planner.core.types import PlannedRoad, PlannedStructure, ZonePlan

from zone_fixtures import make_kernel, make_world, zone_of


class TestPlanReconciler(unittest.TestCase):
    """Пропавшие постройки и дороги возвращаются в очередь."""

    def setUp(self):
        self.kernel = make_kernel()
        self.world = make_world(tier=2)
        self.zone = zone_of(self.world)
        self.world.add_structure(const.KIND_EXTENSION, (24, 25))
        self.world.add_structure(const.KIND_ROAD, (20, 20))
        self.world.try_place((26, 25), const.KIND_EXTENSION)

        self.plan = ZonePlan(
            zone="W1N1",
            tier=2,
            buildings=[
                PlannedStructure(const.KIND_SPAWN, (25, 25), 100, 1, placed=True),
                PlannedStructure(const.KIND_EXTENSION, (24, 25), 75, 2, placed=True),
                PlannedStructure(const.KIND_EXTENSION, (26, 25), 75, 2, placed=True),
                PlannedStructure(const.KIND_EXTENSION, (25, 24), 75, 2, placed=True, correlation_id="x"),
            ],
            roads=[
                PlannedRoad((20, 20), 100, placed=True),
                PlannedRoad((21, 20), 100, placed=True, correlation_id="site-9"),
                PlannedRoad((22, 20), 100),
            ],
        )
        self.kernel.memory.zone("W1N1").plan = self.plan

    def test_missing_entries_are_reset(self):
        report = self.kernel.reconciler.reconcile(self.zone)

        self.assertTrue(report.changed)
        self.assertEqual(report.missing_structures, 1)
        self.assertEqual(report.missing_roads, 1)

        lost = self.plan.buildings[3]
        self.assertFalse(lost.placed)
        self.assertIsNone(lost.correlation_id)
        # стройплощадка тоже считается
        self.assertTrue(self.plan.buildings[2].placed)

        road = self.plan.roads[1]
        self.assertFalse(road.placed)
        self.assertTrue(road.rebuild)
        self.assertIsNone(road.correlation_id)
        self.assertFalse(self.plan.roads[2].rebuild)
        self.assertEqual(self.plan.status, const.STATUS_BUILDING)

    def test_nothing_missing(self):
        self.world.add_structure(const.KIND_EXTENSION, (25, 24))
        self.world.add_structure(const.KIND_ROAD, (21, 20))
        self.plan.last_updated = 7
        report = self.kernel.reconciler.reconcile(self.zone)
        self.assertFalse(report.changed)
        self.assertEqual(self.plan.last_updated, 7)

    def test_destroyed_structure_is_rebuilt(self):
        print("\n[TEST] Running test_destroyed_structure_is_rebuilt...")
        self.world.remove_structure((24, 25))
        self.kernel.reconciler.reconcile(self.zone)
        self.assertFalse(self.plan.buildings[1].placed)

        self.kernel.layout.place_construction_sites(self.zone, self.plan)
        self.assertTrue(self.plan.buildings[1].placed)
        self.assertEqual(
            [s.kind for s in self.world.sites_at((24, 25))], [const.KIND_EXTENSION]
        )
        print("[TEST] test_destroyed_structure_is_rebuilt: OK")

    def test_lost_road_is_rebuilt_first(self):
        self.kernel.reconciler.reconcile(self.zone)
        self.plan.roads[2].priority = 90
        placed = self.kernel.roads.place_road_sites(self.zone, self.plan.roads)
        self.assertEqual(placed, 2)
        self.assertTrue(self.plan.roads[1].placed)
        self.assertFalse(self.plan.roads[1].rebuild)

    def test_no_plan(self):
        kernel = make_kernel()
        report = kernel.reconciler.reconcile(zone_of(make_world(name="W2N2")))
        self.assertFalse(report.changed)


if __name__ == '__main__':
    unittest.main()
