"""Row-level parsing of the static GTFS tables inside a zip archive.

Each ``parse_*`` function turns rows of one table into typed records. Rows
missing a required value, or carrying a non-numeric number, are skipped.
"""

from __future__ import annotations

import csv
import io
import zipfile
import zlib
from typing import Iterator, Mapping

from transit_resolver.domain.exceptions import ArchiveCorrupt
from transit_resolver.domain.models.gtfs import (
    RouteRecord,
    ShapePoint,
    StopRecord,
    StopTimeRecord,
    TripRecord,
)
from transit_resolver.domain.rules.route_colors import (
    RouteStyleInput,
    normalize_hex,
    resolve_route_colors,
)

Row = Mapping[str, str]

TRIPS = "trips.txt"
ROUTES = "routes.txt"
STOPS = "stops.txt"
STOP_TIMES = "stop_times.txt"
SHAPES = "shapes.txt"

# Unsupported compression methods raise NotImplementedError and encrypted
# members RuntimeError.
_UNREADABLE_MEMBER = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    UnicodeDecodeError,
    csv.Error,
    NotImplementedError,
    RuntimeError,
    EOFError,
    OSError,
)


def open_archive(content: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(content))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as exc:
        raise ArchiveCorrupt(f"Not a zip archive ({len(content)} bytes)") from exc


def iter_rows(archive: zipfile.ZipFile, name: str) -> Iterator[dict[str, str]]:
    """Yield header-keyed rows with trimmed keys and values.

    A table missing from the archive yields nothing.
    """

    if name not in archive.namelist():
        return
    try:
        with archive.open(name) as raw:
            text = io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")
            for row in csv.DictReader(text):
                yield {
                    (k or "").strip(): v.strip()
                    for k, v in row.items()
                    if isinstance(v, str)
                }
    except _UNREADABLE_MEMBER as exc:
        raise ArchiveCorrupt(f"Unreadable {name}: {exc}") from exc


def _value(row: Row, column: str) -> str:
    return (row.get(column) or "").strip()


def _optional(row: Row, column: str) -> str | None:
    return _value(row, column) or None


def _int(row: Row, column: str, default: int | None = None) -> int | None:
    raw = _value(row, column)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def parse_route(row: Row, operator_key: str) -> RouteRecord | None:
    route_id = _value(row, "route_id")
    if not route_id:
        return None

    short_name = _value(row, "route_short_name")
    route_type = _int(row, "route_type")
    if route_type is None:
        route_type = 3
    colors = resolve_route_colors(
        operator_key,
        RouteStyleInput(
            short_name=short_name,
            route_type=route_type,
            color=normalize_hex(row.get("route_color")),
            text_color=normalize_hex(row.get("route_text_color")),
        ),
    )
    return RouteRecord(
        route_id=route_id,
        short_name=short_name,
        long_name=_value(row, "route_long_name"),
        color=colors.color,
        text_color=colors.text_color,
        route_type=route_type,
    )


def parse_trip(row: Row) -> TripRecord | None:
    trip_id = _value(row, "trip_id")
    if not trip_id:
        return None
    return TripRecord(
        trip_id=trip_id,
        route_id=_optional(row, "route_id"),
        shape_id=_optional(row, "shape_id"),
        headsign=_value(row, "trip_headsign"),
        direction_id=_int(row, "direction_id", 0) or 0,
    )


def parse_stop(row: Row) -> StopRecord | None:
    stop_id = _value(row, "stop_id")
    name = _value(row, "stop_name")
    if not stop_id or not name:
        return None
    try:
        lat = float(row["stop_lat"])
        lon = float(row["stop_lon"])
    except (KeyError, TypeError, ValueError):
        return None
    return StopRecord(
        stop_id=stop_id,
        name=name,
        lat=lat,
        lon=lon,
        platform_code=_optional(row, "platform_code"),
    )


def parse_stop_time(row: Row) -> StopTimeRecord | None:
    trip_id = _value(row, "trip_id")
    if not trip_id:
        return None
    sequence = _int(row, "stop_sequence")
    if sequence is None:
        return None
    return StopTimeRecord(
        trip_id=trip_id,
        stop_id=_value(row, "stop_id"),
        sequence=sequence,
        arrival_time=_value(row, "arrival_time"),
    )


def parse_shape_point(row: Row) -> ShapePoint | None:
    shape_id = _value(row, "shape_id")
    if not shape_id:
        return None
    sequence = _int(row, "shape_pt_sequence")
    if sequence is None:
        return None
    try:
        lat = float(row["shape_pt_lat"])
        lon = float(row["shape_pt_lon"])
    except (KeyError, TypeError, ValueError):
        return None
    return ShapePoint(shape_id=shape_id, lat=lat, lon=lon, sequence=sequence)
