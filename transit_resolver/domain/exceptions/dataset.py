class DatasetError(Exception):
    """Base exception for static GTFS dataset loading failures."""


class ArchiveUnavailable(DatasetError):
    """Raised when the archive for an operator cannot be fetched."""


class ArchiveCorrupt(DatasetError):
    """Raised when fetched bytes are not a readable zip archive."""
