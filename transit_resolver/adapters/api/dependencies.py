from __future__ import annotations

import os
from functools import lru_cache

from transit_resolver.adapters.archives import (
    HttpGtfsArchiveSource,
    LocalGtfsArchiveSource,
)
from transit_resolver.app.ports.output import IGtfsArchiveSource
from transit_resolver.app.services.dataset_store import GtfsDatasetStore
from transit_resolver.app.services.live_vehicle_service import LiveVehicleService
from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)


def get_archive_source() -> IGtfsArchiveSource:
    if os.getenv("GTFS_ARCHIVE_DIR"):
        return LocalGtfsArchiveSource()
    return HttpGtfsArchiveSource()


# Datasets live for the whole process, so the store and the services holding
# it are built once.
@lru_cache(maxsize=1)
def get_resolution_service() -> VehicleResolutionService:
    store = GtfsDatasetStore(archive_source=get_archive_source())
    return VehicleResolutionService(store=store)


@lru_cache(maxsize=1)
def get_live_vehicle_service() -> LiveVehicleService:
    return LiveVehicleService(resolution=get_resolution_service())
