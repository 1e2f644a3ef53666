"""
Persistent store for archived configuration files.

This module owns the archive tables: inserting snapshots, reading them back,
retention-gated deletion, bulk cleanup of expired snapshots, search and
aggregate statistics. Callers receive detached ``ArchiveRecord`` models,
never live ORM objects.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from paramguard.archive import retention
from paramguard.archive.errors import (
    ArchiveNotFoundError, RetentionActiveError, StorageError
)
from paramguard.archive.schemas import (
    MAX_RETENTION_DAYS, SECONDS_PER_DAY, ArchiveRecord, ArchiveStatistics, ensure_utc
)
from paramguard.core.utils import compute_content_hash
from paramguard.database.engine import create_store_engine
from paramguard.database.models import ArchivedFile, ArchivedFileContent
from paramguard.database.session import get_session, make_session_factory

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_storage_time(value: datetime) -> datetime:
    """Naive UTC, the representation kept in the archive_timestamp column."""
    return ensure_utc(value).replace(tzinfo=None)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _retention_seconds(days: int, field: str) -> int:
    if days < 0:
        raise ValueError(f"{field} must be >= 0")
    if days > MAX_RETENTION_DAYS:
        raise ValueError(f"{field} must be <= {MAX_RETENTION_DAYS}")
    return int(days) * SECONDS_PER_DAY


def _metadata_size(meta_info: Optional[str]) -> int:
    """Byte size recorded in the metadata document, 0 when absent or unreadable."""
    if not meta_info:
        return 0
    try:
        size = json.loads(meta_info).get("size", 0)
        return int(size) if size is not None else 0
    except (ValueError, TypeError, AttributeError):
        return 0


class ArchiveStore:
    """
    CRUD and query surface over archived file records.

    The schema is created on construction if the store file is new.
    ``clock`` supplies "now" for archive timestamps and every expiry check.
    """

    def __init__(self, db_path=None, clock: Optional[Clock] = None):
        self.db_path = db_path
        self.clock = clock or utc_now
        try:
            self.engine = create_store_engine(db_path)
        except SQLAlchemyError as e:
            logger.error(f"Unable to open archive store {db_path}: {e}")
            raise StorageError(f"Unable to open archive store: {e}") from e
        self.SessionLocal = make_session_factory(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def now(self) -> datetime:
        return ensure_utc(self.clock())

    def _get_row(self, session, archive_id: int) -> ArchivedFile:
        row = session.get(ArchivedFile, archive_id)
        if row is None:
            raise ArchiveNotFoundError(archive_id)
        return row

    def create(
        self,
        name: str,
        path,
        content: bytes,
        format: str,
        retention_days: int,
        reason: Optional[str] = None,
        metadata: Optional[str] = None,
    ) -> int:
        """
        Insert a new snapshot and return its id.

        Args:
            name: Display name of the archived file
            path: Source path at the time of archiving
            content: Raw file bytes
            format: Format tag derived from the file extension
            retention_days: Days the snapshot must be kept before deletion
            reason: Free-text justification
            metadata: Serialized JSON document of derived facts

        Raises:
            ValueError: If retention_days is negative or too large
            StorageError: On any persistence failure, including a
                (name, archive_timestamp) clash
        """
        retention_seconds = _retention_seconds(retention_days, "retention_days")

        new_archive = ArchivedFile(
            name=name,
            original_path=str(path),
            format=format,
            content_hash=compute_content_hash(content),
            archive_timestamp=_to_storage_time(self.now()),
            retention_seconds=retention_seconds,
            reason=reason,
            meta_info=metadata,
        )
        new_archive.payload = ArchivedFileContent(content=content)

        with get_session(self.SessionLocal) as session:
            try:
                session.add(new_archive)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to archive '{name}': {e}")
                raise StorageError(f"Failed to archive '{name}': {e}") from e
            archive_id = new_archive.id

        logger.info(f"Archived '{name}' as {archive_id}")
        return archive_id

    def get(self, archive_id: int) -> ArchiveRecord:
        with get_session(self.SessionLocal) as session:
            try:
                row = self._get_row(session, archive_id)
                return ArchiveRecord.model_validate(row)
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to read archive {archive_id}: {e}") from e

    def get_content(self, archive_id: int) -> Tuple[ArchiveRecord, bytes]:
        """Return a record together with its archived payload."""
        with get_session(self.SessionLocal) as session:
            try:
                row = self._get_row(session, archive_id)
                if row.payload is None:
                    raise StorageError(f"Archive {archive_id} has no stored content")
                return ArchiveRecord.model_validate(row), bytes(row.payload.content)
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to read archive {archive_id}: {e}") from e

    def _query_records(self, *criteria) -> List[ArchiveRecord]:
        with get_session(self.SessionLocal) as session:
            try:
                query = session.query(ArchivedFile)
                if criteria:
                    query = query.filter(*criteria)
                rows = query.order_by(
                    ArchivedFile.archive_timestamp.desc(), ArchivedFile.id.desc()
                ).all()
                return [ArchiveRecord.model_validate(row) for row in rows]
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to query archives: {e}") from e

    def list(self) -> List[ArchiveRecord]:
        """All records, most recent first."""
        return self._query_records()

    def search(self, query: str) -> List[ArchiveRecord]:
        """Case-insensitive substring match on name, original path and reason."""
        pattern = f"%{_escape_like(query.casefold())}%"
        return self._query_records(
            or_(*(
                func.casefold(column).like(pattern, escape="\\")
                for column in (ArchivedFile.name, ArchivedFile.original_path, ArchivedFile.reason)
            ))
        )

    def list_expired(self) -> List[ArchiveRecord]:
        """Delete-eligible records, most recent first."""
        now = self.now()
        return [
            record for record in self.list()
            if retention.is_delete_eligible(record.archive_timestamp, record.retention_seconds, now)
        ]

    def can_delete(self, archive_id: int) -> bool:
        record = self.get(archive_id)
        return retention.is_delete_eligible(
            record.archive_timestamp, record.retention_seconds, self.now()
        )

    def delete(self, archive_id: int) -> None:
        """
        Permanently remove a record and its payload.

        Raises:
            ArchiveNotFoundError: If no record has this id
            RetentionActiveError: If the retention period has not elapsed
        """
        with get_session(self.SessionLocal) as session:
            try:
                row = self._get_row(session, archive_id)
                timestamp = ensure_utc(row.archive_timestamp)
                if not retention.is_delete_eligible(timestamp, row.retention_seconds, self.now()):
                    raise RetentionActiveError(archive_id)
                session.delete(row)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to delete archive {archive_id}: {e}")
                raise StorageError(f"Failed to delete archive {archive_id}: {e}") from e
        logger.info(f"Deleted archive {archive_id}")

    def cleanup_expired(self) -> int:
        """Remove every delete-eligible record in one pass; returns the count removed."""
        now = self.now()
        with get_session(self.SessionLocal) as session:
            try:
                rows = session.query(
                    ArchivedFile.id, ArchivedFile.archive_timestamp, ArchivedFile.retention_seconds
                ).all()
                expired_ids = [
                    row.id for row in rows
                    if retention.is_delete_eligible(ensure_utc(row.archive_timestamp), row.retention_seconds, now)
                ]
                if expired_ids:
                    session.query(ArchivedFileContent).filter(
                        ArchivedFileContent.archive_id.in_(expired_ids)
                    ).delete(synchronize_session=False)
                    session.query(ArchivedFile).filter(
                        ArchivedFile.id.in_(expired_ids)
                    ).delete(synchronize_session=False)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Cleanup of expired archives failed: {e}")
                raise StorageError(f"Cleanup of expired archives failed: {e}") from e

        logger.info(f"Cleaned up {len(expired_ids)} expired archives")
        return len(expired_ids)

    def update_retention(self, archive_id: int, new_retention_days: int) -> None:
        retention_seconds = _retention_seconds(new_retention_days, "new_retention_days")
        with get_session(self.SessionLocal) as session:
            try:
                row = self._get_row(session, archive_id)
                row.retention_seconds = retention_seconds
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageError(f"Failed to update retention for {archive_id}: {e}") from e
        logger.info(f"Retention for archive {archive_id} set to {new_retention_days} days")

    def get_statistics(self) -> ArchiveStatistics:
        now = self.now()
        with get_session(self.SessionLocal) as session:
            try:
                rows = session.query(
                    ArchivedFile.archive_timestamp,
                    ArchivedFile.retention_seconds,
                    ArchivedFile.meta_info.label("meta_info"),
                ).all()
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to compute archive statistics: {e}") from e

        total = len(rows)
        expired = sum(
            1 for row in rows
            if retention.is_delete_eligible(ensure_utc(row.archive_timestamp), row.retention_seconds, now)
        )
        total_size = sum(_metadata_size(row.meta_info) for row in rows)
        avg_days = (
            sum(row.retention_seconds for row in rows) / total / SECONDS_PER_DAY
            if total else 0.0
        )
        return ArchiveStatistics(
            total_archives=total,
            total_size=total_size,
            expired_count=expired,
            active_count=total - expired,
            avg_retention_days=avg_days,
        )
