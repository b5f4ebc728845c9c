from __future__ import annotations

from dataclasses import dataclass

from .gtfs import RouteRecord, ShapePolyline


@dataclass(frozen=True, slots=True)
class JourneyStop:
    stop_id: str
    name: str
    lat: float
    lon: float
    sequence: int
    arrival_time: str = ""
    platform_code: str | None = None


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Everything the engine could work out about one vehicle.

    Any field may be None when the corresponding lookup missed; ``notes`` says
    which lookups missed and why.
    """

    route: RouteRecord | None = None
    shape: ShapePolyline | None = None
    trip_headsign: str | None = None
    direction_id: int | None = None
    destination: str | None = None
    line: str | None = None
    next_stop_name: str | None = None
    next_stop_platform: str | None = None
    journey_stops: tuple[JourneyStop, ...] = ()
    notes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LineInfo:
    """Display metadata for a trip/route pair, read from cached tables only."""

    line: str | None
    long_name: str | None
    headsign: str | None
    color: str
    text_color: str
    route_type: int
