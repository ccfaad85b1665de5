# ==============================================================================
# Файл: colony_planner/__init__.py
# Назначение: Планировщик застройки и дорожной сети зоны для тикового бота.
# ==============================================================================
from .core.interfaces import Zone
from .core.settings import PlannerSettings, load_settings
from .kernel import PlanningKernel, TickBudget
from .world.cache import TickClock
from .world.grid_world import GridWorld

__all__ = [
    "Zone",
    "PlannerSettings",
    "load_settings",
    "PlanningKernel",
    "TickBudget",
    "TickClock",
    "GridWorld",
]
