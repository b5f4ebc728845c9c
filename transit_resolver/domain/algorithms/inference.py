"""Heuristics for vehicles whose live feed record lacks operator or mode.

Everything here is a pure function over the rule tables in
``transit_resolver.domain.rules``. Results are best effort; authoritative
static data (routes.txt ``route_type``) always wins when it is available.
"""

from __future__ import annotations

import re
from typing import Iterable

from transit_resolver.domain.models.realtime import TransitMode
from transit_resolver.domain.rules.operators import (
    DEFAULT_OPERATOR,
    ID_PREFIX_RULES,
    REGION_RULES,
    IdPrefixRule,
    RegionRule,
)

_RAW_ID_RE = re.compile(r"^\d{8,}$")

# Regional route ids: 4-digit authority, 3-4 digit block, then more digits.
_FIXED_WIDTH_ROUTE_ID_RE = re.compile(r"^(\d{4})(\d{3,4})(0{0,3})(\d+)")

_MODE_MARKERS: tuple[tuple[str, TransitMode], ...] = (
    ("001000", TransitMode.TRAM),
    ("002000", TransitMode.TRAIN),
    ("003000", TransitMode.TRAIN),
    ("004000", TransitMode.FERRY),
)

# Half-open ranges over the 4-character segment at offset 8.
_MODE_SEGMENT_RANGES: tuple[tuple[int, int, TransitMode], ...] = (
    (1000, 2000, TransitMode.TRAM),
    (2000, 3000, TransitMode.TRAIN),
    (3000, 4000, TransitMode.TRAIN),
    (4000, 5000, TransitMode.FERRY),
)

_MODE_BY_ROUTE_TYPE: dict[int, TransitMode] = {
    0: TransitMode.TRAM,
    1: TransitMode.METRO,
    2: TransitMode.TRAIN,
    109: TransitMode.TRAIN,
    3: TransitMode.BUS,
    700: TransitMode.BUS,
    4: TransitMode.FERRY,
    1000: TransitMode.FERRY,
}


def is_raw_identifier(value: str | None) -> bool:
    """True for long all-digit machine ids such as '9011001000400000'.

    Short alphanumeric labels ('4', '55X', 'E20') are display-safe.
    """

    if not value:
        return False
    return bool(_RAW_ID_RE.match(value))


def operator_from_identifier(
    identifier: str | None, rules: Iterable[IdPrefixRule] = ID_PREFIX_RULES
) -> str | None:
    value = (identifier or "").strip()
    if not value:
        return None
    for rule in rules:
        if value.startswith(rule.prefix):
            return rule.operator_key
    return None


def operator_from_identifiers(
    trip_id: str | None = None,
    route_id: str | None = None,
    vehicle_id: str | None = None,
) -> str | None:
    """Try trip id, then route id, then vehicle id."""

    for identifier in (trip_id, route_id, vehicle_id):
        operator = operator_from_identifier(identifier)
        if operator is not None:
            return operator
    return None


def operators_covering(
    lat: float, lon: float, rules: Iterable[RegionRule] = REGION_RULES
) -> tuple[str, ...]:
    """All operators whose region contains the point, in table order."""

    seen: list[str] = []
    for rule in rules:
        if rule.bbox.contains(lat, lon) and rule.operator_key not in seen:
            seen.append(rule.operator_key)
    return tuple(seen)


def operator_from_position(
    lat: float,
    lon: float,
    rules: Iterable[RegionRule] = REGION_RULES,
    default: str = DEFAULT_OPERATOR,
) -> str:
    for rule in rules:
        if rule.bbox.contains(lat, lon):
            return rule.operator_key
    return default


def infer_operator(
    *,
    trip_id: str | None = None,
    route_id: str | None = None,
    vehicle_id: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
    default: str = DEFAULT_OPERATOR,
) -> str:
    """Identifier prefixes first; geography only when no prefix matched."""

    operator = operator_from_identifiers(trip_id, route_id, vehicle_id)
    if operator is not None:
        return operator
    if lat is None or lon is None:
        return default
    return operator_from_position(lat, lon, default=default)


def _leading_int(text: str) -> int | None:
    match = re.match(r"\d+", text)
    return int(match.group()) if match else None


def mode_from_route_id(route_id: str | None) -> TransitMode:
    if not route_id or not _FIXED_WIDTH_ROUTE_ID_RE.match(route_id):
        return TransitMode.BUS

    for marker, mode in _MODE_MARKERS:
        if marker in route_id:
            return mode

    segment = _leading_int(route_id[8:12])
    if segment is not None:
        for low, high, mode in _MODE_SEGMENT_RANGES:
            if low <= segment < high:
                return mode

    return TransitMode.BUS


def mode_for_route_type(route_type: int | None) -> TransitMode | None:
    if route_type is None:
        return None
    return _MODE_BY_ROUTE_TYPE.get(route_type)


def resolve_mode(route_id: str | None, route_type: int | None = None) -> TransitMode:
    """Authoritative ``route_type`` when known, else the route id heuristic."""

    return mode_for_route_type(route_type) or mode_from_route_id(route_id)
