from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from transit_resolver.adapters.api.dependencies import (
    get_live_vehicle_service,
    get_resolution_service,
)
from transit_resolver.adapters.api.schemas.geo import GeoPointSchema
from transit_resolver.adapters.api.schemas.resolution import (
    DatasetStatsSchema,
    EnrichedVehicleSchema,
    EnrichRequestSchema,
    OperatorStatusSchema,
    ResolutionSchema,
    ResolveRequestSchema,
)
from transit_resolver.app.services.live_vehicle_service import LiveVehicleService
from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)
from transit_resolver.domain.models.geo import GeoPoint

router = APIRouter(tags=["vehicles"])


@router.post("/resolve", response_model=ResolutionSchema)
async def resolve_vehicle(
    payload: ResolveRequestSchema,
    wait: bool = Query(default=True),
    service: VehicleResolutionService = Depends(get_resolution_service),
) -> ResolutionSchema:
    params = dict(
        operator_key=payload.operator,
        trip_id=payload.trip_id,
        route_id=payload.route_id,
        stop_id=payload.stop_id,
        realtime_headsign=payload.realtime_headsign,
        stop_sequence=payload.stop_sequence,
        vehicle_lat=payload.lat,
        vehicle_lon=payload.lon,
    )

    if wait:
        return ResolutionSchema.from_domain(await service.resolve(**params))

    result = service.resolve_sync(**params)
    if result is None:
        raise HTTPException(
            status_code=409,
            detail=f"GTFS dataset for operator '{payload.operator}' is not loaded",
        )
    return ResolutionSchema.from_domain(result)


@router.post("/vehicles/enrich", response_model=list[EnrichedVehicleSchema])
async def enrich_vehicles(
    payload: EnrichRequestSchema,
    service: LiveVehicleService = Depends(get_live_vehicle_service),
) -> list[EnrichedVehicleSchema]:
    vehicles = [v.to_domain() for v in payload.vehicles]
    if payload.preload:
        await service.preload_for(vehicles)
    return [EnrichedVehicleSchema.from_domain(e) for e in service.enrich(vehicles)]


@router.post("/vehicles/preload-region", response_model=list[OperatorStatusSchema])
async def preload_region(
    payload: GeoPointSchema,
    service: LiveVehicleService = Depends(get_live_vehicle_service),
) -> list[OperatorStatusSchema]:
    """Preload every operator whose service area covers the point."""

    operators = await service.preload_region(GeoPoint(lat=payload.lat, lon=payload.lon))
    store = service.resolution.store
    out: list[OperatorStatusSchema] = []
    for operator in operators:
        stats = store.stats(operator)
        out.append(
            OperatorStatusSchema(
                operator=operator,
                state=store.state(operator).value,
                stats=DatasetStatsSchema.from_domain(stats) if stats else None,
            )
        )
    return out
