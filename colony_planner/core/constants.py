# ==============================================================================
# Файл: colony_planner/core/constants.py
# Назначение: Глобальные константы планировщика (размер зоны, типы местности,
#             виды построек и таблицы параметров по видам).
# ==============================================================================
from __future__ import annotations
from typing import Dict, Tuple

# =======================================================================
# СЕТКА ЗОНЫ
# =======================================================================
ZONE_SIZE = 50
# Клетки, на которых вообще можно что-то строить (край зоны - выходы)
BUILD_MIN = 1
BUILD_MAX = ZONE_SIZE - 2
ZONE_CENTER: Tuple[int, int] = (ZONE_SIZE // 2, ZONE_SIZE // 2)

MIN_TIER = 1
MAX_TIER = 8

# =======================================================================
# МЕСТНОСТЬ
# =======================================================================
TERRAIN_PLAIN = 0
TERRAIN_WALL = 1
TERRAIN_SWAMP = 2

# Стоимости клеток для сетки стоимости (cost grid)
COST_PLAIN = 1
COST_SWAMP = 5
COST_ROAD = 1
COST_BLOCKED = 255

# =======================================================================
# ВИДЫ ПОСТРОЕК
# =======================================================================
KIND_SPAWN = "spawn"
KIND_EXTENSION = "extension"
KIND_TOWER = "tower"
KIND_STORAGE = "storage"
KIND_LINK = "link"
KIND_TERMINAL = "terminal"
KIND_LAB = "lab"
KIND_FACTORY = "factory"
KIND_POWER_SPAWN = "power_spawn"
KIND_NUKER = "nuker"
KIND_OBSERVER = "observer"
KIND_CONTAINER = "container"
KIND_ROAD = "road"
KIND_RAMPART = "rampart"

# Постройки, по которым можно ходить
WALKABLE_STRUCTURE_KINDS = frozenset({KIND_ROAD, KIND_CONTAINER})
# Площадки строительства, которые не мешают проходу
WALKABLE_SITE_KINDS = frozenset({KIND_ROAD, KIND_CONTAINER, KIND_RAMPART})
# Виды, которым нужно свободное пространство вокруг
CLEARANCE_KINDS = frozenset({KIND_SPAWN, KIND_TOWER, KIND_STORAGE, KIND_TERMINAL})
CLEARANCE_MIN_RATIO = 0.6

# Минимальный уровень (tier), с которого вид вообще доступен
MIN_TIER_BY_KIND: Dict[str, int] = {
    KIND_SPAWN: 1,
    KIND_EXTENSION: 2,
    KIND_TOWER: 3,
    KIND_CONTAINER: 3,
    KIND_STORAGE: 4,
    KIND_LINK: 5,
    KIND_TERMINAL: 6,
    KIND_LAB: 6,
    KIND_FACTORY: 7,
    KIND_POWER_SPAWN: 8,
    KIND_NUKER: 8,
    KIND_OBSERVER: 8,
}

BASE_PRIORITY: Dict[str, int] = {
    KIND_SPAWN: 100,
    KIND_TOWER: 90,
    KIND_STORAGE: 80,
    KIND_EXTENSION: 70,
    KIND_TERMINAL: 60,
    KIND_LINK: 50,
    KIND_LAB: 40,
    KIND_FACTORY: 30,
    KIND_POWER_SPAWN: 20,
    KIND_NUKER: 10,
    KIND_OBSERVER: 10,
}
DEFAULT_BASE_PRIORITY = 50

# =======================================================================
# ДИНАМИЧЕСКОЕ РАЗМЕЩЕНИЕ: радиус поиска и якорь по видам
# =======================================================================
ANCHOR_CENTRAL = "central"
ANCHOR_ZONE_CENTER = "zone_center"
ANCHOR_SPAWN = "spawn"

SEARCH_RADIUS: Dict[str, int] = {
    KIND_EXTENSION: 8,
    KIND_TOWER: 15,
    KIND_SPAWN: 10,
    KIND_STORAGE: 5,
    KIND_TERMINAL: 5,
    KIND_LAB: 8,
}
DEFAULT_SEARCH_RADIUS = 10

SEARCH_ANCHOR: Dict[str, str] = {
    KIND_SPAWN: ANCHOR_CENTRAL,
    KIND_STORAGE: ANCHOR_CENTRAL,
    KIND_TERMINAL: ANCHOR_CENTRAL,
    KIND_TOWER: ANCHOR_ZONE_CENTER,
}
DEFAULT_SEARCH_ANCHOR = ANCHOR_SPAWN

# =======================================================================
# КОНТЕЙНЕРЫ
# =======================================================================
CONTAINER_SOURCE_PRIORITY = 90
CONTAINER_CONTROLLER_PRIORITY = 80
CONTAINER_MINERAL_PRIORITY = 60
CONTAINER_MINERAL_TIER = 6

# =======================================================================
# ДОРОГИ
# =======================================================================
PATH_SOURCE = "source"
PATH_CONTROLLER = "controller"
PATH_MINERAL = "mineral"
PATH_EXIT = "exit"
PATH_INTERNAL = "internal"

PATH_TYPE_PRIORITY: Dict[str, int] = {
    PATH_SOURCE: 100,
    PATH_CONTROLLER: 90,
    PATH_MINERAL: 70,
    PATH_EXIT: 60,
    PATH_INTERNAL: 50,
}

# =======================================================================
# СТАТУСЫ ПЛАНА И РЕЗУЛЬТАТЫ РАЗМЕЩЕНИЯ
# =======================================================================
STATUS_PLANNING = "planning"
STATUS_READY = "ready"
STATUS_BUILDING = "building"
STATUS_COMPLETE = "complete"

PLACE_OK = "ok"
PLACE_TIER_TOO_LOW = "tier-too-low"
PLACE_OCCUPIED = "occupied"
PLACE_SITE_CAP = "site-cap-reached"
PLACE_INVALID = "invalid"
PLACE_UNAUTHORIZED = "unauthorized"

REASON_TEMPLATE = "template"
REASON_DYNAMIC = "dynamic"
REASON_CONTAINER_SOURCE = "container:source"
REASON_CONTAINER_CONTROLLER = "container:controller"
REASON_CONTAINER_MINERAL = "container:mineral"
