# ==============================================================================
# Файл: tests/test_structure_catalog.py
# Назначение: Юнит-тесты шаблонов базы и таблицы лимитов.
# ==============================================================================
import unittest

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from colony_planner.core import constants as const
from colony_planner.core.types import TemplateEntry
from colony_planner.planners import structure_catalog as catalog


class TestStructureCatalog(unittest.TestCase):
    """Проверки авторских данных каталога."""

    def test_limits_are_monotonic(self):
        for t1 in range(1, 9):
            for t2 in range(t1 + 1, 9):
                low, high = catalog.limits(t1), catalog.limits(t2)
                for kind in low:
                    self.assertGreaterEqual(high[kind], low[kind], f"{kind}: tier {t1} vs {t2}")

    def test_extension_limits(self):
        values = [catalog.limits(t)[const.KIND_EXTENSION] for t in range(1, 9)]
        self.assertEqual(values, [0, 5, 10, 20, 30, 40, 50, 60])

    def test_container_limits(self):
        self.assertEqual(catalog.limit_of(const.KIND_CONTAINER, 2), 0)
        self.assertEqual(catalog.limit_of(const.KIND_CONTAINER, 3), 5)

    def test_tier_is_clamped(self):
        self.assertEqual(catalog.limits(0), catalog.limits(1))
        self.assertEqual(catalog.limits(12), catalog.limits(8))

    def test_every_template_conforms(self):
        for tier in range(1, 9):
            self.assertTrue(catalog.validate(catalog.template(tier), tier), f"tier {tier}")
        catalog.validate_catalog()

    def test_validate_rejects_overfull_template(self):
        entries = [TemplateEntry(const.KIND_EXTENSION, (i, 0), 1) for i in range(6)]
        self.assertFalse(catalog.validate(entries, 2))
        self.assertTrue(catalog.validate(entries, 3))

    def test_cumulative_buildings(self):
        self.assertEqual(len(catalog.cumulative_buildings(1)), 1)
        self.assertEqual(len(catalog.cumulative_buildings(3)), 1 + 5 + 6)
        kinds = [e.kind for e in catalog.cumulative_buildings(8)]
        self.assertEqual(kinds.count(const.KIND_EXTENSION), 60)
        self.assertEqual(kinds.count(const.KIND_SPAWN), 3)

    def test_apply_drops_out_of_bounds(self):
        placed = catalog.apply(catalog.template(2), (1, 1), 2)
        self.assertEqual({p.pos for p in placed}, {(2, 1), (1, 2)})
        for p in placed:
            self.assertEqual(p.required_tier, 2)
            self.assertEqual(p.reason, const.REASON_TEMPLATE)
            self.assertFalse(p.placed)

    def test_apply_translates_offsets(self):
        placed = catalog.apply(catalog.template(3), (25, 25), 3)
        towers = [p for p in placed if p.kind == const.KIND_TOWER]
        self.assertEqual(len(towers), 1)
        self.assertEqual(towers[0].pos, (27, 25))
        self.assertEqual(towers[0].priority, 95)

    def test_unknown_tier_has_no_template(self):
        self.assertEqual(catalog.template(0), [])
        self.assertEqual(catalog.template(9), [])


if __name__ == '__main__':
    unittest.main()
