from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from transit_resolver.domain.models import (
    DatasetStats,
    EnrichedVehicle,
    JourneyStop,
    LineInfo,
    RealtimeVehicle,
    ResolutionResult,
    RouteRecord,
    StopRecord,
)


class RouteSchema(BaseModel):
    route_id: str
    short_name: str
    long_name: str
    color: str
    text_color: str
    route_type: int

    @classmethod
    def from_domain(cls, r: RouteRecord) -> "RouteSchema":
        return cls(
            route_id=r.route_id,
            short_name=r.short_name,
            long_name=r.long_name,
            color=r.color,
            text_color=r.text_color,
            route_type=r.route_type,
        )


class ShapeSchema(BaseModel):
    shape_id: str
    coordinates: list[tuple[float, float]]


class JourneyStopSchema(BaseModel):
    stop_id: str
    name: str
    lat: float
    lon: float
    sequence: int
    arrival_time: str = ""
    platform_code: str | None = None

    @classmethod
    def from_domain(cls, s: JourneyStop) -> "JourneyStopSchema":
        return cls(
            stop_id=s.stop_id,
            name=s.name,
            lat=s.lat,
            lon=s.lon,
            sequence=s.sequence,
            arrival_time=s.arrival_time,
            platform_code=s.platform_code,
        )


class ResolveRequestSchema(BaseModel):
    operator: str = Field(..., min_length=1)
    trip_id: str | None = None
    route_id: str | None = None
    stop_id: str | None = None
    realtime_headsign: str | None = None
    stop_sequence: int | None = None
    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lon: float | None = Field(default=None, ge=-180.0, le=180.0)


class ResolutionSchema(BaseModel):
    route: RouteSchema | None = None
    shape: ShapeSchema | None = None
    trip_headsign: str | None = None
    direction_id: int | None = None
    destination: str | None = None
    line: str | None = None
    next_stop_name: str | None = None
    next_stop_platform: str | None = None
    journey_stops: list[JourneyStopSchema] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, r: ResolutionResult) -> "ResolutionSchema":
        return cls(
            route=RouteSchema.from_domain(r.route) if r.route else None,
            shape=(
                ShapeSchema(
                    shape_id=r.shape.shape_id, coordinates=list(r.shape.coordinates)
                )
                if r.shape
                else None
            ),
            trip_headsign=r.trip_headsign,
            direction_id=r.direction_id,
            destination=r.destination,
            line=r.line,
            next_stop_name=r.next_stop_name,
            next_stop_platform=r.next_stop_platform,
            journey_stops=[JourneyStopSchema.from_domain(s) for s in r.journey_stops],
            notes=list(r.notes),
        )


class LineInfoSchema(BaseModel):
    line: str | None = None
    long_name: str | None = None
    headsign: str | None = None
    color: str
    text_color: str
    route_type: int

    @classmethod
    def from_domain(cls, info: LineInfo) -> "LineInfoSchema":
        return cls(
            line=info.line,
            long_name=info.long_name,
            headsign=info.headsign,
            color=info.color,
            text_color=info.text_color,
            route_type=info.route_type,
        )


class StopSchema(BaseModel):
    stop_id: str
    name: str
    lat: float
    lon: float
    platform_code: str | None = None

    @classmethod
    def from_domain(cls, s: StopRecord) -> "StopSchema":
        return cls(
            stop_id=s.stop_id,
            name=s.name,
            lat=s.lat,
            lon=s.lon,
            platform_code=s.platform_code,
        )


class DatasetStatsSchema(BaseModel):
    trips: int
    routes: int
    stops: int
    shapes: int
    shapes_loaded: bool

    @classmethod
    def from_domain(cls, s: DatasetStats) -> "DatasetStatsSchema":
        return cls(
            trips=s.trips,
            routes=s.routes,
            stops=s.stops,
            shapes=s.shapes,
            shapes_loaded=s.shapes_loaded,
        )


class OperatorStatusSchema(BaseModel):
    operator: str
    state: str
    stats: DatasetStatsSchema | None = None


class VehicleSchema(BaseModel):
    vehicle_id: str | None = None
    trip_id: str | None = None
    route_id: str | None = None
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    label: str | None = None
    operator: str | None = None
    bearing: float | None = None
    speed_mps: float | None = None
    timestamp: datetime | None = None
    stop_id: str | None = None
    stop_sequence: int | None = None

    def to_domain(self) -> RealtimeVehicle:
        return RealtimeVehicle(
            vehicle_id=self.vehicle_id,
            trip_id=self.trip_id,
            route_id=self.route_id,
            lat=self.lat,
            lon=self.lon,
            label=self.label,
            operator=self.operator,
            bearing=self.bearing,
            speed_mps=self.speed_mps,
            timestamp=self.timestamp,
            stop_id=self.stop_id,
            stop_sequence=self.stop_sequence,
        )


class EnrichedVehicleSchema(BaseModel):
    vehicle_id: str | None = None
    trip_id: str | None = None
    operator: str
    line: str
    mode: str
    color: str | None = None
    text_color: str | None = None
    destination: str | None = None
    next_stop_name: str | None = None
    resolved: bool
    lat: float
    lon: float
    bearing: float | None = None

    @classmethod
    def from_domain(cls, e: EnrichedVehicle) -> "EnrichedVehicleSchema":
        return cls(
            vehicle_id=e.vehicle.vehicle_id,
            trip_id=e.vehicle.trip_id,
            operator=e.operator_key,
            line=e.line,
            mode=e.mode.value,
            color=e.color,
            text_color=e.text_color,
            destination=e.destination,
            next_stop_name=e.next_stop_name,
            resolved=e.resolved,
            lat=e.vehicle.lat,
            lon=e.vehicle.lon,
            bearing=e.vehicle.bearing,
        )


class EnrichRequestSchema(BaseModel):
    vehicles: list[VehicleSchema]
    preload: bool = False
