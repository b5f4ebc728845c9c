from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from transit_resolver.domain.models.gtfs import Coordinate

T = TypeVar("T")


def squared_degree_distance(a: Coordinate, b: Coordinate) -> float:
    """Squared planar distance in degrees.

    Not geodesic. Only meaningful for ranking nearby candidates at city scale.
    """

    dlat = a[0] - b[0]
    dlon = a[1] - b[1]
    return dlat * dlat + dlon * dlon


def nearest(
    items: Iterable[T], origin: Coordinate, *, position: Callable[[T], Coordinate]
) -> T | None:
    """Return the item closest to ``origin``; ties keep the earliest item."""

    best: T | None = None
    best_d = float("inf")
    for item in items:
        d = squared_degree_distance(position(item), origin)
        if d < best_d:
            best_d = d
            best = item
    return best
