from .dataset import ArchiveCorrupt, ArchiveUnavailable, DatasetError

__all__ = [
    "ArchiveCorrupt",
    "ArchiveUnavailable",
    "DatasetError",
]
