"""Builds the per-operator lookup tables from a static GTFS archive."""

from __future__ import annotations

import logging
import zipfile
from operator import attrgetter
from typing import Callable, Iterable, TypeVar

from transit_resolver.app.services import gtfs_tables
from transit_resolver.domain.models.gtfs import (
    Coordinate,
    GtfsDataset,
    ShapePoint,
    StopTimeRecord,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


def index_by(records: Iterable[V | None], key: Callable[[V], K]) -> dict[K, V]:
    """Map records by key; later duplicates replace earlier ones."""

    out: dict[K, V] = {}
    for record in records:
        if record is not None:
            out[key(record)] = record
    return out


def group_stop_times(
    records: Iterable[StopTimeRecord | None],
) -> dict[str, tuple[StopTimeRecord, ...]]:
    """Group by trip, then sort each group by ``sequence`` once."""

    grouped: dict[str, list[StopTimeRecord]] = {}
    for record in records:
        if record is None:
            continue
        grouped.setdefault(record.trip_id, []).append(record)

    return {
        trip_id: tuple(sorted(entries, key=attrgetter("sequence")))
        for trip_id, entries in grouped.items()
    }


def group_shapes(
    points: Iterable[ShapePoint | None],
) -> dict[str, tuple[Coordinate, ...]]:
    grouped: dict[str, list[ShapePoint]] = {}
    for point in points:
        if point is None:
            continue
        grouped.setdefault(point.shape_id, []).append(point)

    out: dict[str, tuple[Coordinate, ...]] = {}
    for shape_id, pts in grouped.items():
        pts.sort(key=attrgetter("sequence"))
        out[shape_id] = tuple((p.lat, p.lon) for p in pts)
    return out


def build_dataset(archive: zipfile.ZipFile, operator_key: str) -> GtfsDataset:
    """Parse everything except shapes.txt into a fresh dataset."""

    rows = gtfs_tables.iter_rows

    trips = index_by(
        (gtfs_tables.parse_trip(r) for r in rows(archive, gtfs_tables.TRIPS)),
        attrgetter("trip_id"),
    )
    routes = index_by(
        (
            gtfs_tables.parse_route(r, operator_key)
            for r in rows(archive, gtfs_tables.ROUTES)
        ),
        attrgetter("route_id"),
    )
    stops = index_by(
        (gtfs_tables.parse_stop(r) for r in rows(archive, gtfs_tables.STOPS)),
        attrgetter("stop_id"),
    )
    stop_times = group_stop_times(
        gtfs_tables.parse_stop_time(r) for r in rows(archive, gtfs_tables.STOP_TIMES)
    )

    logger.info(
        "Parsed %s: %d trips, %d routes, %d stops, stop_times for %d trips",
        operator_key,
        len(trips),
        len(routes),
        len(stops),
        len(stop_times),
    )

    return GtfsDataset(
        operator_key=operator_key,
        trips_by_id=trips,
        routes_by_id=routes,
        stops_by_id=stops,
        stop_times_by_trip=stop_times,
    )


def build_shapes(
    archive: zipfile.ZipFile, operator_key: str
) -> dict[str, tuple[Coordinate, ...]]:
    shapes = group_shapes(
        gtfs_tables.parse_shape_point(r)
        for r in gtfs_tables.iter_rows(archive, gtfs_tables.SHAPES)
    )
    logger.info("Parsed %s: %d shapes", operator_key, len(shapes))
    return shapes
