"""
Pydantic read models for the archive subsystem.

``ArchiveRecord`` is the detached view of a stored snapshot handed to callers;
``RetentionInfo`` and ``ArchiveStatistics`` are derived on demand and never
persisted.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, field_validator

SECONDS_PER_DAY = 86400
# Longest retention a timedelta can express; also keeps seconds within SQLite INTEGER
MAX_RETENTION_DAYS = timedelta.max.days


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from the store."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ArchiveRecord(BaseModel):
    """Schema for reading archived files (payload excluded)."""
    id: int
    name: str
    original_path: str
    format: str
    content_hash: str
    archive_timestamp: datetime
    retention_seconds: int
    reason: Optional[str] = None
    meta_info: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("archive_timestamp")
    @classmethod
    def _timestamp_is_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def retention_days(self) -> float:
        return self.retention_seconds / SECONDS_PER_DAY

    @property
    def expires_at(self) -> datetime:
        try:
            return self.archive_timestamp + timedelta(seconds=self.retention_seconds)
        except OverflowError:
            return datetime.max.replace(tzinfo=timezone.utc)


class RetentionInfo(BaseModel):
    archive_timestamp: datetime
    retention_period: timedelta
    time_remaining: Optional[timedelta] = None  # None once expired
    can_delete: bool


class ArchiveStatistics(BaseModel):
    total_archives: int = 0
    total_size: int = 0
    expired_count: int = 0
    active_count: int = 0
    avg_retention_days: float = 0.0
