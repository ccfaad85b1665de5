# ==============================================================================
# Файл: colony_planner/planners/reconciler.py
# Назначение: Сверка сохранённого плана с реальным миром. Пропавшие
#             постройки и дороги снова становятся неразмещёнными.
# ==============================================================================
from __future__ import annotations
import logging
from dataclasses import dataclass

from ..core import constants as const
from ..core.interfaces import Zone
from ..core.types import Pos
from ..world.cache import Clock
from ..world.memory import PlannerMemory
from .layout_planner import derive_status

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    missing_structures: int = 0
    missing_roads: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.missing_structures or self.missing_roads)


def _backed(zone: Zone, pos: Pos, kind: str) -> bool:
    """Есть постройка или площадка нужного вида на клетке."""
    if any(s.kind == kind for s in zone.world.structures_at(pos)):
        return True
    return any(s.kind == kind for s in zone.world.sites_at(pos))


class PlanReconciler:
    def __init__(self, memory: PlannerMemory, clock: Clock):
        self.memory = memory
        self.clock = clock

    def reconcile(self, zone: Zone) -> ReconcileReport:
        report = ReconcileReport()
        plan = self.memory.zone(zone.name).plan
        if plan is None:
            return report

        for b in plan.buildings:
            if b.placed and not _backed(zone, b.pos, b.kind):
                b.placed = False
                b.correlation_id = None
                report.missing_structures += 1
                logger.info("Zone %s: %s at %s is missing, queued for rebuild", zone.name, b.kind, b.pos)

        for r in plan.roads:
            if r.placed and not _backed(zone, r.pos, const.KIND_ROAD):
                r.placed = False
                r.correlation_id = None
                r.rebuild = True
                report.missing_roads += 1

        if report.changed:
            plan.last_updated = self.clock()
            plan.status = derive_status(plan)
            logger.info(
                "Zone %s: reconcile found %d structure(s) and %d road(s) missing",
                zone.name, report.missing_structures, report.missing_roads,
            )
        return report
