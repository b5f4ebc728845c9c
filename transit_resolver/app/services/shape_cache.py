from __future__ import annotations

import threading

from transit_resolver.domain.models.gtfs import ShapePolyline


class ShapeCache:
    """Resolved polylines keyed by (operator, shape_id).

    Safe to share between threads. Concurrent writers for the same key store
    equal values, so last writer wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._shapes: dict[tuple[str, str], ShapePolyline] = {}

    def get(self, operator_key: str, shape_id: str) -> ShapePolyline | None:
        with self._lock:
            return self._shapes.get((operator_key, shape_id))

    def put(self, operator_key: str, shape: ShapePolyline) -> None:
        with self._lock:
            self._shapes[(operator_key, shape.shape_id)] = shape

    def __len__(self) -> int:
        with self._lock:
            return len(self._shapes)
