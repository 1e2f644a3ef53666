"""
Error types raised by the archive subsystem.

Every failure surfaces as a subclass of ``ArchiveError`` carrying enough
context (archive id, path) for a front end to build its own message.
"""


class ArchiveError(Exception):
    """Base class for archive failures."""


class ArchiveNotFoundError(ArchiveError):
    def __init__(self, archive_id: int):
        super().__init__(f"Archive not found: {archive_id}")
        self.archive_id = archive_id


class RetentionActiveError(ArchiveError):
    def __init__(self, archive_id: int):
        super().__init__(f"Retention period not expired for archive {archive_id}")
        self.archive_id = archive_id


class StorageError(ArchiveError):
    """Underlying persistence failure (I/O, constraint violation, corruption)."""


class ArchiveIOError(ArchiveError):
    """File read or write failure while storing or restoring an archive."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
