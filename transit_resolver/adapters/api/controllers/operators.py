from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from transit_resolver.adapters.api.dependencies import get_resolution_service
from transit_resolver.adapters.api.schemas.resolution import (
    DatasetStatsSchema,
    LineInfoSchema,
    OperatorStatusSchema,
    StopSchema,
)
from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)
from transit_resolver.domain.models.geo import BoundingBox

router = APIRouter(prefix="/operators", tags=["operators"])


def _status(service: VehicleResolutionService, operator: str) -> OperatorStatusSchema:
    stats = service.store.stats(operator)
    return OperatorStatusSchema(
        operator=operator,
        state=service.store.state(operator).value,
        stats=DatasetStatsSchema.from_domain(stats) if stats else None,
    )


@router.post("/{operator}/preload", response_model=OperatorStatusSchema)
async def preload_operator(
    operator: str,
    service: VehicleResolutionService = Depends(get_resolution_service),
) -> OperatorStatusSchema:
    await service.store.preload(operator)
    return _status(service, operator)


@router.get("/{operator}", response_model=OperatorStatusSchema)
def get_operator(
    operator: str,
    service: VehicleResolutionService = Depends(get_resolution_service),
) -> OperatorStatusSchema:
    return _status(service, operator)


@router.get("/{operator}/stops", response_model=list[StopSchema])
def list_stops(
    operator: str,
    min_lat: float | None = Query(default=None),
    min_lon: float | None = Query(default=None),
    max_lat: float | None = Query(default=None),
    max_lon: float | None = Query(default=None),
    service: VehicleResolutionService = Depends(get_resolution_service),
) -> list[StopSchema]:
    bounds = (min_lat, min_lon, max_lat, max_lon)
    bbox = None
    if all(v is not None for v in bounds):
        try:
            bbox = BoundingBox(
                min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    elif any(v is not None for v in bounds):
        raise HTTPException(
            status_code=422,
            detail="Bounding box needs all of min_lat, min_lon, max_lat, max_lon",
        )

    return [StopSchema.from_domain(s) for s in service.list_stops(operator, bbox)]


@router.get("/{operator}/lines", response_model=LineInfoSchema)
def get_line_info(
    operator: str,
    trip_id: str | None = Query(default=None),
    route_id: str | None = Query(default=None),
    service: VehicleResolutionService = Depends(get_resolution_service),
) -> LineInfoSchema:
    info = service.line_info(operator, trip_id=trip_id, route_id=route_id)
    if info is None:
        raise HTTPException(status_code=404, detail="Line not found")
    return LineInfoSchema.from_domain(info)
