from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TransitMode(str, Enum):
    BUS = "bus"
    TRAM = "tram"
    METRO = "metro"
    TRAIN = "train"
    FERRY = "ferry"


@dataclass(frozen=True, slots=True)
class RealtimeVehicle:
    """A decoded GTFS-Realtime vehicle position."""

    vehicle_id: str | None
    trip_id: str | None
    route_id: str | None
    lat: float
    lon: float
    label: str | None = None
    operator: str | None = None
    bearing: float | None = None
    speed_mps: float | None = None
    timestamp: datetime | None = None
    stop_id: str | None = None
    stop_sequence: int | None = None


@dataclass(frozen=True, slots=True)
class EnrichedVehicle:
    vehicle: RealtimeVehicle
    operator_key: str
    line: str
    mode: TransitMode
    color: str | None = None
    text_color: str | None = None
    destination: str | None = None
    next_stop_name: str | None = None
    resolved: bool = False
