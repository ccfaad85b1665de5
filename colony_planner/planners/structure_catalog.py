# ==============================================================================
# Файл: colony_planner/planners/structure_catalog.py
# Назначение: Шаблоны базы по уровням (tier 1..8) и таблица лимитов построек.
#             Шаблон - это список (вид, смещение от якоря, приоритет).
# ==============================================================================
from __future__ import annotations
import logging
from collections import Counter
from typing import Dict, List

from ..core import constants as const
from ..core.errors import CatalogError
from ..core.grid import in_build_area
from ..core.types import PlannedStructure, Pos, TemplateEntry

logger = logging.getLogger(__name__)

# --- Лимиты: значение на каждый уровень 1..8 ---
# Порядок ключей задаёт порядок динамического размещения.
_LIMITS_BY_TIER: Dict[str, List[int]] = {
    const.KIND_CONTAINER: [0, 0, 5, 5, 5, 5, 5, 5],
    const.KIND_SPAWN: [1, 1, 1, 1, 1, 1, 2, 3],
    const.KIND_EXTENSION: [0, 5, 10, 20, 30, 40, 50, 60],
    const.KIND_TOWER: [0, 0, 1, 1, 2, 2, 3, 6],
    const.KIND_STORAGE: [0, 0, 0, 1, 1, 1, 1, 1],
    const.KIND_LINK: [0, 0, 0, 0, 2, 3, 4, 6],
    const.KIND_TERMINAL: [0, 0, 0, 0, 0, 1, 1, 1],
    const.KIND_LAB: [0, 0, 0, 0, 0, 3, 6, 10],
    const.KIND_FACTORY: [0, 0, 0, 0, 0, 0, 1, 1],
    const.KIND_POWER_SPAWN: [0, 0, 0, 0, 0, 0, 0, 1],
    const.KIND_NUKER: [0, 0, 0, 0, 0, 0, 0, 1],
    const.KIND_OBSERVER: [0, 0, 0, 0, 0, 0, 0, 1],
}


def _t(kind: str, entries) -> List[TemplateEntry]:
    return [TemplateEntry(kind=kind, offset=(dx, dy), priority=p) for dx, dy, p in entries]


# --- Шаблоны. Смещения не пересекаются между уровнями. ---
_TEMPLATES: Dict[int, List[TemplateEntry]] = {
    1: _t(const.KIND_SPAWN, [(0, 0, 100)]),
    2: _t(const.KIND_EXTENSION, [
        (-1, 0, 75), (1, 0, 75), (0, -1, 75), (0, 1, 75), (-1, -1, 74),
    ]),
    3: _t(const.KIND_TOWER, [(2, 0, 95)])
    + _t(const.KIND_EXTENSION, [
        (1, -1, 74), (-1, 1, 74), (1, 1, 74), (-2, 0, 73), (0, -2, 73),
    ]),
    4: _t(const.KIND_STORAGE, [(0, 2, 85)])
    + _t(const.KIND_EXTENSION, [
        (-2, -1, 73), (-2, 1, 73), (2, -1, 73), (2, 1, 73),
        (-1, -2, 72), (1, -2, 72), (-1, 2, 72), (1, 2, 72),
        (-3, 0, 71), (-3, -3, 70),
    ]),
    5: _t(const.KIND_TOWER, [(-2, -4, 94)])
    + _t(const.KIND_LINK, [(0, 3, 55)])
    + _t(const.KIND_EXTENSION, [
        (3, 0, 71), (-3, -1, 71), (-3, 1, 71), (3, -1, 71), (3, 1, 71),
        (-2, -2, 70), (2, -2, 70), (-2, 2, 70), (2, 2, 70), (0, -3, 70),
    ]),
    6: _t(const.KIND_TERMINAL, [(-1, 3, 65)])
    + _t(const.KIND_LAB, [(4, 0, 45), (4, -1, 45), (4, 1, 45)])
    + _t(const.KIND_EXTENSION, [
        (-4, 0, 69), (-3, -2, 69), (-3, 2, 69), (3, -2, 69), (3, 2, 69),
        (-1, -3, 68), (1, -3, 68), (-4, -1, 68), (-4, 1, 68), (1, 3, 68),
    ]),
    7: _t(const.KIND_FACTORY, [(5, 0, 35)])
    + _t(const.KIND_LAB, [(4, 2, 44), (5, -1, 44), (5, 1, 44)])
    + _t(const.KIND_EXTENSION, [
        (-5, 0, 67), (-4, -3, 66), (-4, 3, 66), (4, -3, 66), (4, 3, 66),
        (-2, -3, 66), (2, -3, 66), (-2, 3, 66), (2, 3, 66), (-5, -1, 65),
    ]),
    8: _t(const.KIND_TOWER, [(0, -4, 93)])
    + _t(const.KIND_SPAWN, [(-5, -2, 99), (5, -2, 99)])
    + _t(const.KIND_POWER_SPAWN, [(0, 4, 25)])
    + _t(const.KIND_NUKER, [(-5, 2, 15)])
    + _t(const.KIND_OBSERVER, [(5, 2, 15)])
    + _t(const.KIND_LINK, [(-3, 3, 54), (3, -4, 54)])
    + _t(const.KIND_LAB, [(3, -3, 43), (3, 3, 43), (-4, -2, 43), (-4, 2, 43)])
    + _t(const.KIND_EXTENSION, [
        (-5, 1, 64), (5, 3, 64), (-3, -4, 64), (2, 4, 64),
        (-1, -4, 63), (1, -4, 63), (-1, 4, 63), (1, 4, 63), (-6, 0, 63), (6, 0, 63),
    ]),
}


def clamp_tier(tier: int) -> int:
    return max(const.MIN_TIER, min(const.MAX_TIER, int(tier)))


def limits(tier: int) -> Dict[str, int]:
    """Потолок количества построек каждого вида на уровне tier."""
    idx = clamp_tier(tier) - 1
    return {kind: values[idx] for kind, values in _LIMITS_BY_TIER.items()}


def limit_of(kind: str, tier: int) -> int:
    values = _LIMITS_BY_TIER.get(kind)
    if values is None:
        return 0
    return values[clamp_tier(tier) - 1]


def planned_kinds() -> List[str]:
    return list(_LIMITS_BY_TIER.keys())


def min_tier(kind: str) -> int:
    return const.MIN_TIER_BY_KIND.get(kind, const.MIN_TIER)


def base_priority(kind: str) -> int:
    return const.BASE_PRIORITY.get(kind, const.DEFAULT_BASE_PRIORITY)


def template(tier: int) -> List[TemplateEntry]:
    if tier < const.MIN_TIER or tier > const.MAX_TIER:
        return []
    return list(_TEMPLATES.get(tier, []))


def cumulative_buildings(tier: int) -> List[TemplateEntry]:
    out: List[TemplateEntry] = []
    for t in range(const.MIN_TIER, clamp_tier(tier) + 1):
        out.extend(template(t))
    return out


def apply(entries: List[TemplateEntry], anchor: Pos, tier: int) -> List[PlannedStructure]:
    """Переводит смещения в абсолютные позиции, отбрасывая всё вне [1,48]."""
    ax, ay = anchor
    out: List[PlannedStructure] = []
    for e in entries:
        x, y = ax + e.offset[0], ay + e.offset[1]
        if not in_build_area(x, y):
            continue
        out.append(
            PlannedStructure(
                kind=e.kind,
                pos=(x, y),
                priority=e.priority,
                required_tier=tier,
                reason=const.REASON_TEMPLATE,
            )
        )
    return out


def validate(entries: List[TemplateEntry], tier: int) -> bool:
    """Количество каждого вида в шаблоне не превышает limits(tier)."""
    caps = limits(tier)
    counts = Counter(e.kind for e in entries)
    for kind, count in counts.items():
        if count > caps.get(kind, 0):
            logger.warning(
                "Template tier %d: %d x %s exceeds limit %d", tier, count, kind, caps.get(kind, 0)
            )
            return False
    return True


def validate_catalog() -> None:
    """Самопроверка авторских данных: лимиты монотонны, шаблоны в пределах лимитов."""
    for kind, values in _LIMITS_BY_TIER.items():
        if len(values) != const.MAX_TIER:
            raise CatalogError(f"limit row for {kind} must have {const.MAX_TIER} values")
        for a, b in zip(values, values[1:]):
            if b < a:
                raise CatalogError(f"limits for {kind} are not monotonic: {values}")

    seen: Dict[Pos, int] = {}
    for tier in range(const.MIN_TIER, const.MAX_TIER + 1):
        if not validate(template(tier), tier):
            raise CatalogError(f"template for tier {tier} exceeds its limits")
        if not validate(cumulative_buildings(tier), tier):
            raise CatalogError(f"cumulative templates up to tier {tier} exceed limits")
        for e in template(tier):
            if e.offset in seen:
                raise CatalogError(
                    f"offset {e.offset} of tier {tier} already used by tier {seen[e.offset]}"
                )
            seen[e.offset] = tier
