from __future__ import annotations

import asyncio
import io
import zipfile
from typing import Callable

import pytest

from transit_resolver.app.ports.output import IGtfsArchiveSource
from transit_resolver.app.services.dataset_store import GtfsDatasetStore
from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)
from transit_resolver.domain.exceptions import ArchiveUnavailable

OPERATOR = "vasttrafik"

ROUTES_TXT = """route_id,agency_id,route_short_name,route_long_name,route_type,route_color,route_text_color
R1,A1,42,Downtown Express,3,0EA5E9,FFFFFF
R2,A1,7,Harbour Line,0,,
"""

TRIPS_TXT = """route_id,service_id,trip_id,trip_headsign,direction_id,shape_id
R1,S,T1,Downtown,0,S1
R2,S,T2,,1,S2
R1,S,T3,,0,
"""

STOPS_TXT = """stop_id,stop_name,stop_lat,stop_lon,platform_code
A,Alpha,57.700,11.970,A
B,Beta,57.705,11.975,
C,Gamma,57.710,11.980,C
"""

# Deliberately out of order; T2 references an unknown stop.
STOP_TIMES_TXT = """trip_id,arrival_time,departure_time,stop_id,stop_sequence
T2,08:10:00,08:10:00,C,3
T2,08:00:00,08:00:00,A,1
T2,08:05:00,08:05:00,ZZ,2
T2,08:07:00,08:07:00,B,2
"""

SHAPES_TXT = """shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence
S1,57.71,11.98,2
S1,57.70,11.97,1
S2,57.70,11.97,1
"""

FULL_FEED: dict[str, str] = {
    "routes.txt": ROUTES_TXT,
    "trips.txt": TRIPS_TXT,
    "stops.txt": STOPS_TXT,
    "stop_times.txt": STOP_TIMES_TXT,
    "shapes.txt": SHAPES_TXT,
}


def build_zip(files: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, text in files.items():
            zf.writestr(name, text)
    return buf.getvalue()


def with_compression_method(content: bytes, method: int) -> bytes:
    """Rewrite every member's compression method in local and central headers."""

    data = bytearray(content)
    for signature, offset in ((b"PK\x03\x04", 8), (b"PK\x01\x02", 10)):
        start = data.find(signature)
        while start != -1:
            data[start + offset : start + offset + 2] = method.to_bytes(2, "little")
            start = data.find(signature, start + 4)
    return bytes(data)


@pytest.fixture
def unsupported_compression_zip(make_zip) -> bytes:
    return with_compression_method(make_zip({"routes.txt": ROUTES_TXT}), 99)


@pytest.fixture
def make_zip() -> Callable[[dict[str, str]], bytes]:
    return build_zip


@pytest.fixture
def feed_zip() -> bytes:
    return build_zip(FULL_FEED)


@pytest.fixture
def feed_archive(feed_zip: bytes):
    with zipfile.ZipFile(io.BytesIO(feed_zip)) as zf:
        yield zf


class FakeArchiveSource(IGtfsArchiveSource):
    """In-memory archives per operator; records every fetch."""

    def __init__(
        self, archives: dict[str, bytes | Exception], delay: float = 0.0
    ) -> None:
        self.archives = dict(archives)
        self.delay = delay
        self.calls: list[str] = []

    async def fetch_archive(self, operator_key: str) -> bytes:
        self.calls.append(operator_key)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.archives.get(operator_key)
        if value is None:
            raise ArchiveUnavailable(f"no archive for {operator_key!r}")
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def fake_source(feed_zip: bytes) -> FakeArchiveSource:
    return FakeArchiveSource({OPERATOR: feed_zip})


@pytest.fixture
def store(fake_source: FakeArchiveSource) -> GtfsDatasetStore:
    return GtfsDatasetStore(archive_source=fake_source)


@pytest.fixture
def loaded_store(store: GtfsDatasetStore) -> GtfsDatasetStore:
    asyncio.run(store.preload(OPERATOR))
    return store


@pytest.fixture
def resolver(loaded_store: GtfsDatasetStore) -> VehicleResolutionService:
    return VehicleResolutionService(store=loaded_store)


@pytest.fixture
def source_factory() -> type[FakeArchiveSource]:
    return FakeArchiveSource
