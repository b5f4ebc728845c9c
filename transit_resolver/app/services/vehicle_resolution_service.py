from __future__ import annotations

from dataclasses import dataclass, field

from transit_resolver.app.services.dataset_store import GtfsDatasetStore
from transit_resolver.app.services.shape_cache import ShapeCache
from transit_resolver.domain.algorithms.geo_utils import nearest
from transit_resolver.domain.models.geo import BoundingBox
from transit_resolver.domain.models.gtfs import (
    GtfsDataset,
    RouteRecord,
    ShapePolyline,
    StopRecord,
)
from transit_resolver.domain.models.resolution import (
    JourneyStop,
    LineInfo,
    ResolutionResult,
)

MIN_SHAPE_POINTS = 2


@dataclass(slots=True)
class VehicleResolutionService:
    """Turns live trip/route/stop identifiers into display-ready facts.

    Lookups degrade instead of failing: every miss leaves its field as None
    and adds a note to ``ResolutionResult.notes``. The only hard failure is a
    dataset that is not loaded, which ``resolve_sync`` reports as None.
    """

    store: GtfsDatasetStore
    shape_cache: ShapeCache = field(default_factory=ShapeCache)

    async def resolve(
        self,
        *,
        operator_key: str,
        trip_id: str | None = None,
        route_id: str | None = None,
        stop_id: str | None = None,
        realtime_headsign: str | None = None,
        stop_sequence: int | None = None,
        vehicle_lat: float | None = None,
        vehicle_lon: float | None = None,
    ) -> ResolutionResult:
        """Load the operator's dataset if needed, then resolve."""

        await self.store.preload(operator_key)
        dataset = self.store.get(operator_key)
        if dataset is None:
            return ResolutionResult(
                notes=(f'GTFS tables not loaded for operator "{operator_key}"',)
            )
        return self._resolve(
            dataset,
            trip_id=trip_id,
            route_id=route_id,
            stop_id=stop_id,
            realtime_headsign=realtime_headsign,
            stop_sequence=stop_sequence,
            vehicle_lat=vehicle_lat,
            vehicle_lon=vehicle_lon,
        )

    def resolve_sync(
        self,
        *,
        operator_key: str,
        trip_id: str | None = None,
        route_id: str | None = None,
        stop_id: str | None = None,
        realtime_headsign: str | None = None,
        stop_sequence: int | None = None,
        vehicle_lat: float | None = None,
        vehicle_lon: float | None = None,
    ) -> ResolutionResult | None:
        """Resolve against already-loaded data; None if the operator is not loaded.

        Never triggers or waits for a load.
        """

        dataset = self.store.get(operator_key)
        if dataset is None:
            return None
        return self._resolve(
            dataset,
            trip_id=trip_id,
            route_id=route_id,
            stop_id=stop_id,
            realtime_headsign=realtime_headsign,
            stop_sequence=stop_sequence,
            vehicle_lat=vehicle_lat,
            vehicle_lon=vehicle_lon,
        )

    def line_info(
        self,
        operator_key: str,
        *,
        trip_id: str | None = None,
        route_id: str | None = None,
    ) -> LineInfo | None:
        dataset = self.store.get(operator_key)
        if dataset is None:
            return None

        final_route_id = route_id
        headsign = ""
        trip = dataset.trips_by_id.get(trip_id) if trip_id else None
        if trip is not None:
            final_route_id = trip.route_id
            headsign = trip.headsign

        route = dataset.routes_by_id.get(final_route_id) if final_route_id else None
        if route is None:
            return None

        return LineInfo(
            line=route.short_name or None,
            long_name=route.long_name or None,
            headsign=headsign or route.long_name or None,
            color=route.color,
            text_color=route.text_color,
            route_type=route.route_type,
        )

    def list_stops(
        self, operator_key: str, bbox: BoundingBox | None = None
    ) -> tuple[StopRecord, ...]:
        dataset = self.store.get(operator_key)
        if dataset is None:
            return ()
        stops = dataset.stops_by_id.values()
        if bbox is None:
            return tuple(stops)
        return tuple(s for s in stops if bbox.contains(s.lat, s.lon))

    def route_map(self, operator_key: str) -> dict[str, str] | None:
        dataset = self.store.get(operator_key)
        if dataset is None:
            return None
        return {rid: r.short_name for rid, r in dataset.routes_by_id.items()}

    def _resolve(
        self,
        dataset: GtfsDataset,
        *,
        trip_id: str | None,
        route_id: str | None,
        stop_id: str | None,
        realtime_headsign: str | None,
        stop_sequence: int | None,
        vehicle_lat: float | None,
        vehicle_lon: float | None,
    ) -> ResolutionResult:
        notes: list[str] = []

        # 1) Trip -> route, falling back to the route id from the feed.
        final_route_id: str | None = None
        shape_id: str | None = None
        headsign: str | None = None
        direction_id: int | None = None

        if trip_id:
            trip = dataset.trips_by_id.get(trip_id)
            if trip is not None:
                final_route_id = trip.route_id
                shape_id = trip.shape_id
                headsign = trip.headsign or None
                direction_id = trip.direction_id
            else:
                notes.append(f'trip_id "{trip_id}" not found in trips.txt')

        if not final_route_id and route_id:
            final_route_id = route_id

        route: RouteRecord | None = None
        line: str | None = None
        if final_route_id:
            route = dataset.routes_by_id.get(final_route_id)
            if route is not None:
                line = route.short_name or None
            else:
                notes.append(f'route_id "{final_route_id}" not found in routes.txt')
        else:
            notes.append("No route_id resolved")

        # 2) Ordered journey stops; stop_times rows without a known stop are dropped.
        journey_stops = _journey_stops(dataset, trip_id)
        terminal_name = journey_stops[-1].name if journey_stops else None

        # 3) Destination: realtime > static headsign > terminal stop > route names.
        destination = _first_non_empty(
            realtime_headsign,
            headsign,
            terminal_name,
            route.long_name if route else None,
            route.short_name if route else None,
        )

        # 4) Shape.
        shape: ShapePolyline | None = None
        if shape_id:
            shape = self._shape(dataset, shape_id)
            if shape is None:
                notes.append(
                    f'shape_id "{shape_id}" not found or has < {MIN_SHAPE_POINTS} points'
                )
        elif trip_id and trip_id in dataset.trips_by_id:
            notes.append("No shape_id for this trip")

        # 5) Next stop: explicit stop id > stop sequence > nearest journey stop.
        next_stop = _next_stop(
            dataset,
            journey_stops,
            stop_id=stop_id,
            stop_sequence=stop_sequence,
            vehicle_lat=vehicle_lat,
            vehicle_lon=vehicle_lon,
        )
        if next_stop is None:
            if stop_id:
                notes.append(f'stop_id "{stop_id}" not found in stops.txt')
            elif stop_sequence is not None or (
                vehicle_lat is not None and vehicle_lon is not None
            ):
                notes.append("Next stop not found from stop_sequence or position")

        return ResolutionResult(
            route=route,
            shape=shape,
            trip_headsign=headsign,
            direction_id=direction_id,
            destination=destination,
            line=line,
            next_stop_name=next_stop[0] if next_stop else None,
            next_stop_platform=next_stop[1] if next_stop else None,
            journey_stops=journey_stops,
            notes=tuple(notes),
        )

    def _shape(self, dataset: GtfsDataset, shape_id: str) -> ShapePolyline | None:
        cached = self.shape_cache.get(dataset.operator_key, shape_id)
        if cached is not None:
            return cached

        coords = dataset.shapes_by_id.get(shape_id)
        if not coords or len(coords) < MIN_SHAPE_POINTS:
            return None

        shape = ShapePolyline(shape_id=shape_id, coordinates=coords)
        self.shape_cache.put(dataset.operator_key, shape)
        return shape


def _first_non_empty(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _journey_stops(
    dataset: GtfsDataset, trip_id: str | None
) -> tuple[JourneyStop, ...]:
    if not trip_id:
        return ()

    out: list[JourneyStop] = []
    for st in dataset.stop_times_by_trip.get(trip_id, ()):
        stop = dataset.stops_by_id.get(st.stop_id)
        if stop is None:
            continue
        out.append(
            JourneyStop(
                stop_id=st.stop_id,
                name=stop.name,
                lat=stop.lat,
                lon=stop.lon,
                sequence=st.sequence,
                arrival_time=st.arrival_time,
                platform_code=stop.platform_code,
            )
        )
    return tuple(out)


def _next_stop(
    dataset: GtfsDataset,
    journey_stops: tuple[JourneyStop, ...],
    *,
    stop_id: str | None,
    stop_sequence: int | None,
    vehicle_lat: float | None,
    vehicle_lon: float | None,
) -> tuple[str, str | None] | None:
    """Return (name, platform_code) of the vehicle's next stop, if any."""

    if stop_id:
        stop = dataset.stops_by_id.get(stop_id)
        if stop is not None:
            return stop.name, stop.platform_code

    if stop_sequence is not None:
        for js in journey_stops:
            if js.sequence >= stop_sequence:
                return js.name, js.platform_code

    if vehicle_lat is not None and vehicle_lon is not None:
        closest = nearest(
            journey_stops,
            (vehicle_lat, vehicle_lon),
            position=lambda js: (js.lat, js.lon),
        )
        if closest is not None:
            return closest.name, closest.platform_code

    return None
