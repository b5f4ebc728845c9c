from .gtfs_archive_source import IGtfsArchiveSource

__all__ = [
    "IGtfsArchiveSource",
]
