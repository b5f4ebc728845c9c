from __future__ import annotations

from dataclasses import dataclass, field

Coordinate = tuple[float, float]  # (lat, lon)


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """One row of routes.txt after per-operator color rules were applied."""

    route_id: str
    short_name: str = ""
    long_name: str = ""
    color: str = "#0ea5e9"  # '#rrggbb'
    text_color: str = "#ffffff"  # '#rrggbb'
    route_type: int = 3  # GTFS route_type: 0 tram, 1 metro, 2 rail, 3 bus, 4 ferry


@dataclass(frozen=True, slots=True)
class TripRecord:
    trip_id: str
    route_id: str | None = None
    shape_id: str | None = None
    headsign: str = ""
    direction_id: int = 0


@dataclass(frozen=True, slots=True)
class StopRecord:
    stop_id: str
    name: str
    lat: float
    lon: float
    platform_code: str | None = None


@dataclass(frozen=True, slots=True)
class StopTimeRecord:
    """A scheduled visit of a trip to a stop.

    ``arrival_time`` is kept raw (GTFS 'HH:MM:SS', hours may exceed 24).
    """

    trip_id: str
    stop_id: str
    sequence: int
    arrival_time: str = ""


@dataclass(frozen=True, slots=True)
class ShapePoint:
    shape_id: str
    lat: float
    lon: float
    sequence: int


@dataclass(frozen=True, slots=True)
class ShapePolyline:
    shape_id: str
    coordinates: tuple[Coordinate, ...]


@dataclass(slots=True)
class GtfsDataset:
    """Per-operator lookup tables built from one static GTFS archive.

    Routes, trips, stops and stop times are complete as soon as the dataset is
    published. ``shapes_by_id`` starts empty and is filled once shapes.txt has
    been parsed; ``shapes_loaded`` flips to True at that point. Entries are
    never removed.
    """

    operator_key: str
    trips_by_id: dict[str, TripRecord] = field(default_factory=dict)
    routes_by_id: dict[str, RouteRecord] = field(default_factory=dict)
    stops_by_id: dict[str, StopRecord] = field(default_factory=dict)
    stop_times_by_trip: dict[str, tuple[StopTimeRecord, ...]] = field(
        default_factory=dict
    )
    shapes_by_id: dict[str, tuple[Coordinate, ...]] = field(default_factory=dict)
    shapes_loaded: bool = False


@dataclass(frozen=True, slots=True)
class DatasetStats:
    trips: int
    routes: int
    stops: int
    shapes: int
    shapes_loaded: bool
