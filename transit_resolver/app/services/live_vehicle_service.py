from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Iterable

from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)
from transit_resolver.domain.algorithms.inference import (
    infer_operator,
    is_raw_identifier,
    operators_covering,
    resolve_mode,
)
from transit_resolver.domain.models.geo import GeoPoint
from transit_resolver.domain.models.realtime import EnrichedVehicle, RealtimeVehicle
from transit_resolver.domain.rules.operators import DEFAULT_OPERATOR, STATIC_OPERATORS

logger = logging.getLogger(__name__)

UNKNOWN_LINE = "?"


@dataclass(slots=True)
class LiveVehicleService:
    """Decorates decoded live vehicle positions with static GTFS facts.

    Env vars:
      - TRANSIT_RESOLVER_DEFAULT_OPERATOR: operator used when neither ids nor
        position identify one (default 'sl')

    ``enrich`` never waits for data: vehicles whose operator is not loaded yet
    come back with heuristic line/mode only. Call ``preload_for`` or
    ``preload_region`` to start loads in the background.
    """

    resolution: VehicleResolutionService
    default_operator: str | None = None

    def __post_init__(self) -> None:
        if self.default_operator is None:
            self.default_operator = (
                os.getenv("TRANSIT_RESOLVER_DEFAULT_OPERATOR") or DEFAULT_OPERATOR
            )

    def effective_operator(self, vehicle: RealtimeVehicle) -> str:
        hint = (vehicle.operator or "").strip().lower()
        if hint in STATIC_OPERATORS:
            return hint
        return infer_operator(
            trip_id=vehicle.trip_id,
            route_id=vehicle.route_id,
            vehicle_id=vehicle.vehicle_id,
            lat=vehicle.lat,
            lon=vehicle.lon,
            default=self.default_operator or DEFAULT_OPERATOR,
        )

    def enrich(
        self, vehicles: Iterable[RealtimeVehicle]
    ) -> tuple[EnrichedVehicle, ...]:
        return tuple(self._enrich_one(v) for v in vehicles)

    def _enrich_one(self, vehicle: RealtimeVehicle) -> EnrichedVehicle:
        operator_key = self.effective_operator(vehicle)
        result = self.resolution.resolve_sync(
            operator_key=operator_key,
            trip_id=vehicle.trip_id,
            route_id=vehicle.route_id,
            stop_id=vehicle.stop_id,
            stop_sequence=vehicle.stop_sequence,
            vehicle_lat=vehicle.lat,
            vehicle_lon=vehicle.lon,
        )
        route = result.route if result is not None else None

        return EnrichedVehicle(
            vehicle=vehicle,
            operator_key=operator_key,
            line=display_line(
                result.line if result is not None else None,
                vehicle.label,
                vehicle.route_id,
            ),
            mode=resolve_mode(
                vehicle.route_id, route.route_type if route is not None else None
            ),
            color=route.color if route is not None else None,
            text_color=route.text_color if route is not None else None,
            destination=result.destination if result is not None else None,
            next_stop_name=result.next_stop_name if result is not None else None,
            resolved=route is not None,
        )

    async def preload_for(self, vehicles: Iterable[RealtimeVehicle]) -> None:
        operators = {self.effective_operator(v) for v in vehicles}
        await self._preload_all(operators)

    async def preload_region(self, point: GeoPoint) -> tuple[str, ...]:
        """Preload every operator whose region covers ``point``."""

        operators = tuple(
            op
            for op in operators_covering(point.lat, point.lon)
            if op in STATIC_OPERATORS
        )
        await self._preload_all(operators)
        return operators

    async def _preload_all(self, operators: Iterable[str]) -> None:
        wanted = set(operators)
        without_static = sorted(wanted - STATIC_OPERATORS)
        if without_static:
            logger.warning("No static GTFS for %s", ", ".join(without_static))

        pending = [
            op
            for op in wanted
            if op in STATIC_OPERATORS and not self.resolution.store.is_loaded(op)
        ]
        if not pending:
            return
        logger.info("Preloading static GTFS for %s", ", ".join(sorted(pending)))
        await asyncio.gather(*(self.resolution.store.preload(op) for op in pending))


def display_line(
    resolved_line: str | None, label: str | None, route_id: str | None
) -> str:
    """Pick a rider-facing line label, never a raw machine id."""

    for candidate in (resolved_line, label, route_id):
        value = (candidate or "").strip()
        if value and not is_raw_identifier(value):
            return value
    return UNKNOWN_LINE
