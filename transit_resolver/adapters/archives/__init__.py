from .http_gtfs_archive_source import HttpGtfsArchiveSource
from .local_gtfs_archive_source import LocalGtfsArchiveSource

__all__ = [
    "HttpGtfsArchiveSource",
    "LocalGtfsArchiveSource",
]
