"""
High-level archive operations.

``ArchiveService`` is the single entry point front ends call. It performs the
file-system side of archiving (reading the source file, writing restored
files) and delegates persistence to ``ArchiveStore``.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from paramguard.archive import retention
from paramguard.archive.errors import ArchiveIOError, RetentionActiveError
from paramguard.archive.schemas import ArchiveRecord, ArchiveStatistics, RetentionInfo
from paramguard.archive.store import ArchiveStore
from paramguard.core.utils import compute_content_hash, detect_format

logger = logging.getLogger(__name__)

DEFAULT_REASON = "No reason provided"


def _file_metadata(path: Path, content: bytes) -> str:
    """Size plus source creation/modification times (unix seconds) as JSON."""
    stat = path.stat()
    # st_birthtime is only available on some platforms
    created = getattr(stat, "st_birthtime", stat.st_ctime)
    return json.dumps({
        "size": len(content),
        "created": int(created),
        "modified": int(stat.st_mtime),
    })


class ArchiveService:
    """Archive facade for CLI and TUI callers."""

    def __init__(self, db_path=None, store: Optional[ArchiveStore] = None, clock=None):
        self.db = store if store is not None else ArchiveStore(db_path, clock=clock)

    def close(self) -> None:
        self.db.close()

    def store(
        self,
        name: str,
        path,
        retention_days: int,
        reason: Optional[str] = None,
    ) -> int:
        """
        Archive the file at ``path`` under ``name``.

        Returns:
            The id of the new archive record

        Raises:
            ArchiveIOError: If the file cannot be read
            StorageError: If the record cannot be persisted
        """
        source = Path(path)
        try:
            content = source.read_bytes()
            metadata = _file_metadata(source, content)
        except OSError as e:
            logger.error(f"Cannot read {source}: {e}")
            raise ArchiveIOError(f"Cannot read {source}: {e}", path=source) from e

        return self.db.create(
            name=name,
            path=source,
            content=content,
            format=detect_format(source),
            retention_days=retention_days,
            reason=reason or DEFAULT_REASON,
            metadata=metadata,
        )

    def restore(self, archive_id: int, output_path=None) -> Path:
        """
        Write an archived payload back to disk and return where it went.

        An existing directory as ``output_path`` receives the file under its
        archived name; any other ``output_path`` is used literally; without one
        the original path is used. Existing files are overwritten. An archived
        name that would land outside the directory raises ArchiveIOError.
        """
        record, content = self.db.get_content(archive_id)

        if output_path is not None:
            target = Path(output_path)
            if target.is_dir():
                directory = target
                target = directory / record.name
                try:
                    target.resolve().relative_to(directory.resolve())
                except ValueError:
                    raise ArchiveIOError(
                        f"Archive name '{record.name}' leaves {directory}", path=target
                    ) from None
        else:
            target = Path(record.original_path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(f"Cannot restore archive {archive_id} to {target}: {e}")
            raise ArchiveIOError(f"Cannot write {target}: {e}", path=target) from e

        logger.info(f"Restored archive {archive_id} to {target}")
        return target

    def list(self) -> List[ArchiveRecord]:
        return self.db.list()

    def search(self, query: str) -> List[ArchiveRecord]:
        return self.db.search(query)

    def expired(self) -> List[ArchiveRecord]:
        return self.db.list_expired()

    def cleanup(self) -> int:
        return self.db.cleanup_expired()

    def can_delete(self, archive_id: int) -> bool:
        return self.db.can_delete(archive_id)

    def delete(self, archive_id: int) -> None:
        if not self.can_delete(archive_id):
            raise RetentionActiveError(archive_id)
        self.db.delete(archive_id)

    def get_info(self, archive_id: int) -> ArchiveRecord:
        return self.db.get(archive_id)

    def get_retention_info(self, archive_id: int) -> RetentionInfo:
        record = self.db.get(archive_id)
        return retention.retention_info(
            record.archive_timestamp, record.retention_seconds, self.db.now()
        )

    def update_retention(self, archive_id: int, new_retention_days: int) -> None:
        self.db.update_retention(archive_id, new_retention_days)

    def get_statistics(self) -> ArchiveStatistics:
        return self.db.get_statistics()

    def verify(self, archive_id: int) -> bool:
        """True when the stored payload still matches its recorded content hash."""
        record, content = self.db.get_content(archive_id)
        return compute_content_hash(content) == record.content_hash
