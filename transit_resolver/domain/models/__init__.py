from .geo import BoundingBox, GeoPoint
from .gtfs import (
    Coordinate,
    DatasetStats,
    GtfsDataset,
    RouteRecord,
    ShapePoint,
    ShapePolyline,
    StopRecord,
    StopTimeRecord,
    TripRecord,
)
from .realtime import EnrichedVehicle, RealtimeVehicle, TransitMode
from .resolution import JourneyStop, LineInfo, ResolutionResult

__all__ = [
    "BoundingBox",
    "Coordinate",
    "DatasetStats",
    "EnrichedVehicle",
    "GeoPoint",
    "GtfsDataset",
    "JourneyStop",
    "LineInfo",
    "RealtimeVehicle",
    "ResolutionResult",
    "RouteRecord",
    "ShapePoint",
    "ShapePolyline",
    "StopRecord",
    "StopTimeRecord",
    "TransitMode",
    "TripRecord",
]
