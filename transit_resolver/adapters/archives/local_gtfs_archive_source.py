from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path

from transit_resolver.app.ports.output import IGtfsArchiveSource
from transit_resolver.domain.exceptions import ArchiveUnavailable


@dataclass(slots=True)
class LocalGtfsArchiveSource(IGtfsArchiveSource):
    """Reads static GTFS archives from a directory, one '<operator>.zip' each.

    Env vars:
      - GTFS_ARCHIVE_DIR: directory containing the zip files (default data/gtfs)
    """

    base_path: str | Path | None = None

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_ARCHIVE_DIR") or "data/gtfs"
        return Path(value)

    def path_for(self, operator_key: str) -> Path:
        return self._base() / f"{operator_key}.zip"

    async def fetch_archive(self, operator_key: str) -> bytes:
        path = self.path_for(operator_key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ArchiveUnavailable(f"Cannot read {path}: {exc}") from exc
