from __future__ import annotations

from transit_resolver.app.services.dataset_index import (
    build_dataset,
    build_shapes,
    group_shapes,
    group_stop_times,
)
from transit_resolver.app.services.gtfs_tables import open_archive
from transit_resolver.domain.models.gtfs import ShapePoint, StopTimeRecord


def test_group_stop_times_sorts_each_trip_by_sequence() -> None:
    records = [
        StopTimeRecord(trip_id="T1", stop_id="C", sequence=30),
        StopTimeRecord(trip_id="T2", stop_id="X", sequence=1),
        StopTimeRecord(trip_id="T1", stop_id="A", sequence=10),
        None,
        StopTimeRecord(trip_id="T1", stop_id="B", sequence=20),
    ]

    grouped = group_stop_times(records)

    assert [st.stop_id for st in grouped["T1"]] == ["A", "B", "C"]
    assert [st.stop_id for st in grouped["T2"]] == ["X"]


def test_group_shapes_orders_points_and_drops_sequence() -> None:
    points = [
        ShapePoint(shape_id="S1", lat=2.0, lon=2.0, sequence=2),
        ShapePoint(shape_id="S1", lat=1.0, lon=1.0, sequence=1),
        ShapePoint(shape_id="S1", lat=3.0, lon=3.0, sequence=10),
    ]

    assert group_shapes(points) == {"S1": ((1.0, 1.0), (2.0, 2.0), (3.0, 3.0))}


def test_build_dataset_indexes_core_tables_without_shapes(feed_archive) -> None:
    dataset = build_dataset(feed_archive, "vasttrafik")

    assert set(dataset.trips_by_id) == {"T1", "T2", "T3"}
    assert set(dataset.routes_by_id) == {"R1", "R2"}
    assert set(dataset.stops_by_id) == {"A", "B", "C"}
    assert [st.sequence for st in dataset.stop_times_by_trip["T2"]] == [1, 2, 2, 3]
    assert dataset.shapes_by_id == {}
    assert dataset.shapes_loaded is False


def test_build_shapes(feed_archive) -> None:
    shapes = build_shapes(feed_archive, "vasttrafik")

    assert shapes["S1"] == ((57.70, 11.97), (57.71, 11.98))
    assert shapes["S2"] == ((57.70, 11.97),)


def test_build_dataset_tolerates_missing_tables(make_zip) -> None:
    content = make_zip({"routes.txt": "route_id,route_short_name\nR1,1\n"})
    with open_archive(content) as archive:
        dataset = build_dataset(archive, "x")

    assert set(dataset.routes_by_id) == {"R1"}
    assert dataset.trips_by_id == {}
    assert dataset.stop_times_by_trip == {}
