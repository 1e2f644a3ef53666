"""
Archive subsystem: persistent snapshots of configuration files with
retention-gated deletion.
"""

from paramguard.archive.errors import (
    ArchiveError, ArchiveIOError, ArchiveNotFoundError, RetentionActiveError, StorageError
)
from paramguard.archive.schemas import ArchiveRecord, ArchiveStatistics, RetentionInfo
from paramguard.archive.service import ArchiveService
from paramguard.archive.store import ArchiveStore

__all__ = [
    "ArchiveError",
    "ArchiveIOError",
    "ArchiveNotFoundError",
    "ArchiveRecord",
    "ArchiveService",
    "ArchiveStatistics",
    "ArchiveStore",
    "RetentionActiveError",
    "RetentionInfo",
    "StorageError",
]
