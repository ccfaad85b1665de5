# ==============================================================================
# Файл: tests/test_layout_planner.py
# Назначение: Юнит-тесты плана застройки, контейнеров и бюджета площадок.
# ==============================================================================
import unittest
from collections import Counter

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from colony_planner.core import constants as const
from colony_planner.core.types import PlannedStructure, ZonePlan
from colony_planner.planners import structure_catalog as catalog
from colony_planner.planners.container_planner import plan_containers
from colony_planner.planners.layout_planner import (
    derive_status,
    optimize_buildings,
    plan_priority,
    violates_limits,
)
from colony_planner.planners.terrain_analyzer import build_zone_grid

from zone_fixtures import make_kernel, make_world, zone_of


def _triples(plan):
    return {(b.pos, b.kind, b.priority) for b in plan.buildings}


class TestContainers(unittest.TestCase):
    """Контейнеры у источников, контроллера и минерала."""

    def setUp(self):
        self.kernel = make_kernel()
        self.analyzer = self.kernel.analyzer

    def _plan(self, world, tier, max_count):
        zone = zone_of(world)
        grid = build_zone_grid(zone)
        key = self.analyzer.key_positions(zone)
        return plan_containers(zone, self.analyzer, grid, key, tier, max_count)

    def test_no_containers_when_limit_is_zero(self):
        world = make_world(tier=2)
        limit = catalog.limit_of(const.KIND_CONTAINER, 2)
        self.assertEqual(limit, 0)
        self.assertEqual(self._plan(world, 2, limit), [])

    def test_source_and_controller_containers(self):
        world = make_world(tier=3)
        containers = self._plan(world, 3, catalog.limit_of(const.KIND_CONTAINER, 3))

        self.assertEqual([c.priority for c in containers], [90, 90, 80])
        self.assertTrue(all(c.kind == const.KIND_CONTAINER for c in containers))
        self.assertEqual(containers[0].required_tier, 3)
        targets = [(10, 10), (40, 12), (30, 40)]
        for c, target in zip(containers, targets):
            self.assertEqual(max(abs(c.pos[0] - target[0]), abs(c.pos[1] - target[1])), 1)

    def test_container_prefers_plain_cells_towards_center(self):
        world = make_world(tier=3, sources=((10, 10),), controller=None)
        containers = self._plan(world, 3, 5)
        # все соседи проходимы, выигрывает клетка ближе к центру зоны
        self.assertEqual(containers[0].pos, (11, 11))

        world.set_terrain((11, 11), const.TERRAIN_SWAMP)
        containers = self._plan(world, 3, 5)
        self.assertNotEqual(containers[0].pos, (11, 11))

    def test_mineral_container_only_from_tier_six(self):
        world = make_world(tier=6, mineral=(5, 40))
        self.assertEqual(len(self._plan(world, 5, 5)), 3)
        containers = self._plan(world, 6, 5)
        self.assertEqual([c.priority for c in containers], [90, 90, 80, 60])
        self.assertEqual(containers[-1].required_tier, 6)

    def test_cap_and_unreachable_target(self):
        world = make_world(tier=3)
        self.assertEqual(len(self._plan(world, 3, 1)), 1)

        # источник, окружённый стенами, пропускается
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    world.set_terrain((10 + dx, 10 + dy), const.TERRAIN_WALL)
        containers = self._plan(world, 3, 5)
        self.assertEqual([c.priority for c in containers], [90, 80])

    def test_existing_container_is_not_duplicated(self):
        world = make_world(tier=3)
        world.add_structure(const.KIND_CONTAINER, (11, 11))
        containers = self._plan(world, 3, 4)
        self.assertEqual([c.priority for c in containers], [90, 80])


class TestLayoutPlanner(unittest.TestCase):
    """План застройки: шаблоны, динамика, перепланирование и бюджет."""

    def setUp(self):
        self.kernel = make_kernel()
        self.layout = self.kernel.layout

    def test_tier_three_plan(self):
        print("\n[TEST] Running test_tier_three_plan...")
        zone = zone_of(make_world(tier=3))
        plan = self.layout.plan_room(zone)

        kinds = Counter(b.kind for b in plan.buildings)
        self.assertEqual(kinds[const.KIND_SPAWN], 1)
        self.assertEqual(kinds[const.KIND_EXTENSION], 10)
        self.assertEqual(kinds[const.KIND_TOWER], 1)
        self.assertEqual(kinds[const.KIND_CONTAINER], 3)
        containers = sorted(
            (b.priority for b in plan.buildings if b.kind == const.KIND_CONTAINER), reverse=True
        )
        self.assertEqual(containers, [90, 90, 80])
        self.assertEqual(plan.priority, 3 * 10 + 300 // 100)
        print("[TEST] test_tier_three_plan: OK")

    def test_plan_sorted_by_priority(self):
        plan = self.layout.plan_room(zone_of(make_world(tier=5)))
        priorities = [b.priority for b in plan.buildings]
        self.assertEqual(priorities, sorted(priorities, reverse=True))

    def test_planning_is_idempotent(self):
        zone = zone_of(make_world(tier=6, mineral=(5, 40)))
        first = self.layout.create_plan(zone)
        second = self.layout.create_plan(zone)
        self.assertEqual(_triples(first), _triples(second))

    def test_no_duplicate_entries(self):
        zone = zone_of(make_world(tier=8, mineral=(5, 40), energy_capacity=12900))
        plan = self.layout.plan_room(zone)
        keys = [(b.pos, b.kind) for b in plan.buildings]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertFalse(violates_limits(plan))

    def test_limit_violation_triggers_replan(self):
        world = make_world(tier=2)
        zone = zone_of(world)
        stale = ZonePlan(
            zone="W1N1",
            tier=2,
            buildings=[
                PlannedStructure(const.KIND_EXTENSION, (5 + i, 5), 70, 2) for i in range(15)
            ],
        )
        self.kernel.memory.zone("W1N1").plan = stale
        self.assertTrue(violates_limits(stale))
        self.assertIsNotNone(self.layout.replan_reason(stale, 2))

        plan = self.layout.plan_room(zone)
        self.assertIsNot(plan, stale)
        extensions = [b for b in plan.buildings if b.kind == const.KIND_EXTENSION]
        self.assertEqual(len(extensions), 5)

    def test_tier_increase_triggers_replan(self):
        world = make_world(tier=2)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        self.assertIs(self.layout.plan_room(zone), plan)

        world.tier = 3
        upgraded = self.layout.plan_room(zone)
        self.assertIsNot(upgraded, plan)
        self.assertEqual(upgraded.tier, 3)
        self.assertIn(const.KIND_TOWER, {b.kind for b in upgraded.buildings})

    def test_force_replan(self):
        world = make_world(tier=2)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        world.set_terrain((24, 25), const.TERRAIN_WALL)

        fresh = self.layout.force_replan(zone)
        self.assertIsNot(fresh, plan)
        self.assertNotIn((24, 25), {b.pos for b in fresh.buildings})

    def test_dynamic_placement_fills_blocked_template(self):
        world = make_world(tier=2)
        for dx, dy in [(-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1)]:
            world.set_terrain((25 + dx, 25 + dy), const.TERRAIN_WALL)
        plan = self.layout.plan_room(zone_of(world))

        extensions = [b for b in plan.buildings if b.kind == const.KIND_EXTENSION]
        self.assertEqual(len(extensions), 5)
        self.assertTrue(all(b.reason == const.REASON_DYNAMIC for b in extensions))
        self.assertEqual([b.priority for b in extensions], [70, 69, 68, 67, 66])

    def test_template_skips_source_next_to_spawn(self):
        world = make_world(tier=2, sources=((26, 25), (40, 12)))
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)

        extensions = [b for b in plan.buildings if b.kind == const.KIND_EXTENSION]
        self.assertEqual(len(extensions), 5)
        self.assertNotIn((26, 25), {b.pos for b in plan.buildings})
        self.assertEqual(sum(1 for b in extensions if b.reason == const.REASON_DYNAMIC), 1)

        for _ in range(2):
            self.layout.place_construction_sites(zone, plan)
            world.complete_sites()
        self.layout.place_construction_sites(zone, plan)
        self.assertEqual(plan.status, const.STATUS_COMPLETE)
        built = [s for s in world.structures() if s.kind == const.KIND_EXTENSION]
        self.assertEqual(len(built), 5)

    def test_existing_structures_marked_placed(self):
        world = make_world(tier=2)
        world.add_structure(const.KIND_EXTENSION, (24, 25))
        plan = self.layout.plan_room(zone_of(world))

        by_key = {(b.pos, b.kind): b for b in plan.buildings}
        self.assertTrue(by_key[((25, 25), const.KIND_SPAWN)].placed)
        self.assertTrue(by_key[((24, 25), const.KIND_EXTENSION)].placed)
        self.assertEqual(plan.status, const.STATUS_BUILDING)

    def test_status_lifecycle(self):
        world = make_world(tier=1, spawn=None)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        self.assertEqual(len(plan.buildings), 1)
        self.assertEqual(plan.status, const.STATUS_READY)

        self.assertEqual(self.layout.place_construction_sites(zone, plan), 1)
        self.assertEqual(plan.status, const.STATUS_COMPLETE)
        self.assertIsNotNone(plan.buildings[0].correlation_id)

    def test_budget_respected(self):
        world = make_world(tier=3)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        unplaced = [b for b in plan.buildings if not b.placed]
        self.assertGreater(len(unplaced), 4)

        self.assertEqual(self.layout.place_construction_sites(zone, plan), 4)
        self.assertEqual(len(world.sites()), 4)
        # площадки ещё стоят - бюджет исчерпан
        self.assertEqual(self.layout.place_construction_sites(zone, plan), 0)

        world.complete_sites()
        self.assertEqual(self.layout.place_construction_sites(zone, plan), 4)

    def test_highest_priority_placed_first(self):
        world = make_world(tier=3)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        self.layout.place_construction_sites(zone, plan)
        placed_kinds = {s.kind for s in world.sites()}
        # башня (95) и контейнеры у источников (90) идут раньше расширений
        self.assertIn(const.KIND_TOWER, placed_kinds)
        self.assertIn(const.KIND_CONTAINER, placed_kinds)

    def test_failures_do_not_abort(self):
        world = make_world(tier=3)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        world.owned = False
        self.assertEqual(self.layout.place_construction_sites(zone, plan), 0)
        world.owned = True
        self.assertEqual(self.layout.place_construction_sites(zone, plan), 4)

    def test_tier_gate(self):
        world = make_world(tier=3)
        zone = zone_of(world)
        plan = self.layout.plan_room(zone)
        world.tier = 2  # уровень понизился - башня и контейнеры недоступны
        self.layout.place_construction_sites(zone, plan)
        kinds = {s.kind for s in world.sites()}
        self.assertEqual(kinds, {const.KIND_EXTENSION})


class TestLayoutHelpers(unittest.TestCase):

    def test_optimize_keeps_higher_priority(self):
        a = PlannedStructure(const.KIND_EXTENSION, (10, 10), 60, 2)
        b = PlannedStructure(const.KIND_EXTENSION, (10, 10), 75, 2)
        c = PlannedStructure(const.KIND_TOWER, (10, 10), 90, 3)
        out = optimize_buildings([a, b, c])
        self.assertEqual([(x.kind, x.priority) for x in out], [("tower", 90), ("extension", 75)])

    def test_derive_status(self):
        plan = ZonePlan(zone="z", tier=1)
        self.assertEqual(derive_status(plan), const.STATUS_COMPLETE)
        plan.buildings = [PlannedStructure(const.KIND_SPAWN, (5, 5), 100, 1)]
        self.assertEqual(derive_status(plan), const.STATUS_READY)
        plan.buildings.append(PlannedStructure(const.KIND_EXTENSION, (6, 5), 70, 2, placed=True))
        self.assertEqual(derive_status(plan), const.STATUS_BUILDING)

    def test_plan_priority(self):
        self.assertEqual(plan_priority(4, 1300), 53)


if __name__ == '__main__':
    unittest.main()
