from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from transit_resolver.app.ports.output import IGtfsArchiveSource
from transit_resolver.app.services.dataset_index import build_dataset, build_shapes
from transit_resolver.app.services.gtfs_tables import open_archive
from transit_resolver.app.services.singleflight import KeyedSingleFlight
from transit_resolver.domain.exceptions import DatasetError
from transit_resolver.domain.models.gtfs import DatasetStats, GtfsDataset

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(slots=True)
class GtfsDatasetStore:
    """Owns every operator's loaded static GTFS dataset for the process lifetime.

    - ``preload`` fetches and parses at most once per operator at a time;
      concurrent callers share the in-flight load.
    - A dataset is published as soon as routes/trips/stops/stop_times are
      parsed, then shapes are merged into it. ``preload`` returns after shapes.
    - Once published, a dataset is never replaced or removed. A failed fetch
      leaves the operator unloaded; the next ``preload`` tries again.
    """

    archive_source: IGtfsArchiveSource
    _datasets: dict[str, GtfsDataset] = field(
        default_factory=dict, init=False, repr=False
    )
    _loads: KeyedSingleFlight[None] = field(
        default_factory=KeyedSingleFlight, init=False, repr=False
    )

    def get(self, operator_key: str) -> GtfsDataset | None:
        return self._datasets.get(operator_key)

    def is_loaded(self, operator_key: str) -> bool:
        return operator_key in self._datasets

    def state(self, operator_key: str) -> LoadState:
        if self._loads.in_flight(operator_key):
            return LoadState.LOADING
        if operator_key in self._datasets:
            return LoadState.LOADED
        return LoadState.NOT_LOADED

    def loaded_operators(self) -> tuple[str, ...]:
        return tuple(sorted(self._datasets))

    def stats(self, operator_key: str) -> DatasetStats | None:
        dataset = self._datasets.get(operator_key)
        if dataset is None:
            return None
        return DatasetStats(
            trips=len(dataset.trips_by_id),
            routes=len(dataset.routes_by_id),
            stops=len(dataset.stops_by_id),
            shapes=len(dataset.shapes_by_id),
            shapes_loaded=dataset.shapes_loaded,
        )

    async def preload(self, operator_key: str) -> None:
        if operator_key in self._datasets and not self._loads.in_flight(operator_key):
            return
        await self._loads.do(operator_key, lambda: self._load(operator_key))

    async def _load(self, operator_key: str) -> None:
        if operator_key in self._datasets:
            return
        try:
            await self._load_stages(operator_key)
        except Exception:
            logger.exception("Static GTFS load failed for operator %r", operator_key)

    async def _load_stages(self, operator_key: str) -> None:
        logger.info("Fetching static GTFS for operator %r", operator_key)
        try:
            content = await self.archive_source.fetch_archive(operator_key)
            logger.info(
                "Downloaded %.1f MB for operator %r",
                len(content) / 1024 / 1024,
                operator_key,
            )
            archive = open_archive(content)
        except DatasetError:
            logger.exception("Static GTFS unavailable for operator %r", operator_key)
            return

        with archive:
            try:
                dataset = await asyncio.to_thread(build_dataset, archive, operator_key)
            except DatasetError:
                logger.exception("Static GTFS unreadable for operator %r", operator_key)
                return
            self._datasets[operator_key] = dataset

            try:
                shapes = await asyncio.to_thread(build_shapes, archive, operator_key)
            except DatasetError:
                logger.exception("shapes.txt unreadable for operator %r", operator_key)
                return
            dataset.shapes_by_id.update(shapes)
            dataset.shapes_loaded = True
