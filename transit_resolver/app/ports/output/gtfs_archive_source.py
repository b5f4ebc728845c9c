from __future__ import annotations

from abc import ABC, abstractmethod


class IGtfsArchiveSource(ABC):
    """Port for fetching an operator's static GTFS zip archive."""

    @abstractmethod
    async def fetch_archive(self, operator_key: str) -> bytes:
        """Return the raw zip bytes.

        Raises ArchiveUnavailable when the archive cannot be obtained.
        """
