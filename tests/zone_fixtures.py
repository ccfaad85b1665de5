# ==============================================================================
# Файл: tests/zone_fixtures.py
# Назначение: Общие заготовки зон для юнит-тестов.
# ==============================================================================
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from colony_planner.core import constants as const
from colony_planner.core.interfaces import Zone
from colony_planner.core.settings import load_settings
from colony_planner.kernel import PlanningKernel
from colony_planner.world.cache import TickClock
from colony_planner.world.grid_world import GridWorld

SPAWN = (25, 25)
SOURCES = ((10, 10), (40, 12))
CONTROLLER = (30, 40)


def make_world(
    tier=1,
    name="W1N1",
    spawn=SPAWN,
    sources=SOURCES,
    controller=CONTROLLER,
    mineral=None,
    energy_capacity=300,
):
    """Открытая равнина 50x50 со спавном, источниками и контроллером."""
    world = GridWorld(name=name, tier=tier, energy_capacity=energy_capacity)
    if spawn is not None:
        world.add_structure(const.KIND_SPAWN, spawn)
    for src in sources:
        world.add_source(src)
    world.set_controller(controller)
    world.set_mineral(mineral)
    return world


def make_kernel(overrides=None, clock=None, pathfinder=None, store=None):
    settings = load_settings(overrides=overrides or {})
    clock = clock or TickClock(1)
    return PlanningKernel(settings=settings, store=store, clock=clock, pathfinder=pathfinder)


def zone_of(world):
    return Zone.of(world)
