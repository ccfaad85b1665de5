# ==============================================================================
# Файл: colony_planner/world/serialization.py
# Назначение: Перевод планов, трафика и анализа местности в простые словари
#             (формат хранения) и обратно. Только на границе хранилища.
# ==============================================================================
from __future__ import annotations
from typing import Any, Dict, List, Optional

from ..core import constants as const
from ..core.errors import PersistenceError
from ..core.types import (
    AnalysisRecord,
    KeyPositions,
    PlannedRoad,
    PlannedStructure,
    Pos,
    TerrainAnalysis,
    TrafficRecord,
    ZonePlan,
)


def pos_key(pos: Pos) -> str:
    return f"{pos[0]},{pos[1]}"


def parse_pos_key(key: str) -> Pos:
    try:
        x_str, y_str = key.split(",")
        return int(x_str), int(y_str)
    except (AttributeError, ValueError) as e:
        raise PersistenceError(f"bad position key: {key!r}") from e


def _keys(positions: List[Pos]) -> List[str]:
    return [pos_key(p) for p in positions]


def _positions(keys: List[str]) -> List[Pos]:
    return [parse_pos_key(k) for k in keys]


def _opt_key(pos: Optional[Pos]) -> Optional[str]:
    return pos_key(pos) if pos is not None else None


def _opt_pos(key: Optional[str]) -> Optional[Pos]:
    return parse_pos_key(key) if key else None


# --- План ---

def plan_to_dict(plan: ZonePlan) -> Dict[str, Any]:
    return {
        "zone": plan.zone,
        "tier": plan.tier,
        "buildings": [
            {
                "kind": b.kind,
                "pos": pos_key(b.pos),
                "priority": b.priority,
                "requiredTier": b.required_tier,
                "placed": b.placed,
                "correlationId": b.correlation_id,
                "reason": b.reason,
            }
            for b in plan.buildings
        ],
        "roads": [
            {
                "pos": pos_key(r.pos),
                "priority": r.priority,
                "trafficScore": r.traffic_score,
                "placed": r.placed,
                "correlationId": r.correlation_id,
                "pathType": r.path_type,
                "rebuild": r.rebuild,
            }
            for r in plan.roads
        ],
        "status": plan.status,
        "lastUpdated": plan.last_updated,
        "priority": plan.priority,
    }


def plan_from_dict(data: Dict[str, Any]) -> ZonePlan:
    try:
        buildings = [
            PlannedStructure(
                kind=b["kind"],
                pos=parse_pos_key(b["pos"]),
                priority=int(b["priority"]),
                required_tier=int(b.get("requiredTier", 1)),
                placed=bool(b.get("placed", False)),
                correlation_id=b.get("correlationId"),
                reason=b.get("reason", ""),
            )
            for b in data.get("buildings", [])
        ]
        roads = [
            PlannedRoad(
                pos=parse_pos_key(r["pos"]),
                priority=int(r["priority"]),
                traffic_score=float(r.get("trafficScore", 0.0)),
                placed=bool(r.get("placed", False)),
                correlation_id=r.get("correlationId"),
                path_type=r.get("pathType", const.PATH_INTERNAL),
                rebuild=bool(r.get("rebuild", False)),
            )
            for r in data.get("roads", [])
        ]
        return ZonePlan(
            zone=data.get("zone", ""),
            tier=int(data["tier"]),
            buildings=buildings,
            roads=roads,
            status=data.get("status", const.STATUS_PLANNING),
            last_updated=int(data.get("lastUpdated", 0)),
            priority=int(data.get("priority", 0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"malformed plan blob: {e}") from e


# --- Трафик ---

def traffic_to_dict(traffic: Dict[Pos, TrafficRecord]) -> Dict[str, Any]:
    return {
        pos_key(pos): {"count": rec.count, "lastSeen": rec.last_seen, "roles": list(rec.roles)}
        for pos, rec in traffic.items()
    }


def traffic_from_dict(data: Dict[str, Any]) -> Dict[Pos, TrafficRecord]:
    out: Dict[Pos, TrafficRecord] = {}
    for key, rec in data.items():
        try:
            out[parse_pos_key(key)] = TrafficRecord(
                count=int(rec["count"]),
                last_seen=int(rec["lastSeen"]),
                roles=list(rec.get("roles", [])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"malformed traffic record at {key}: {e}") from e
    return out


# --- Анализ местности ---

def analysis_to_dict(record: AnalysisRecord) -> Dict[str, Any]:
    t = record.terrain
    k = record.key_positions
    return {
        "terrain": {
            "openSpaces": _keys(t.open_spaces),
            "walls": _keys(t.walls),
            "swamps": _keys(t.swamps),
            "exits": _keys(t.exits),
            "centralArea": pos_key(t.central_area),
        },
        "keyPositions": {
            "sources": _keys(k.sources),
            "controller": _opt_key(k.controller),
            "mineral": _opt_key(k.mineral),
            "spawns": _keys(k.spawns),
            "exits": _keys(k.exits),
        },
        "lastAnalyzed": record.last_analyzed,
    }


def analysis_from_dict(data: Dict[str, Any]) -> AnalysisRecord:
    try:
        t = data["terrain"]
        k = data["keyPositions"]
        terrain = TerrainAnalysis(
            open_spaces=_positions(t.get("openSpaces", [])),
            walls=_positions(t.get("walls", [])),
            swamps=_positions(t.get("swamps", [])),
            exits=_positions(t.get("exits", [])),
            central_area=parse_pos_key(t.get("centralArea", pos_key(const.ZONE_CENTER))),
        )
        key_positions = KeyPositions(
            sources=_positions(k.get("sources", [])),
            controller=_opt_pos(k.get("controller")),
            mineral=_opt_pos(k.get("mineral")),
            spawns=_positions(k.get("spawns", [])),
            exits=_positions(k.get("exits", [])),
        )
        return AnalysisRecord(
            terrain=terrain,
            key_positions=key_positions,
            last_analyzed=int(data["lastAnalyzed"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"malformed analysis blob: {e}") from e
