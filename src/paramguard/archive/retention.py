"""
Retention math over (archive timestamp, retention seconds, now).

Pure functions with no side effects. A record becomes delete-eligible the
instant ``now`` reaches ``archive_timestamp + retention``; the same boundary
is used for single deletes, bulk cleanup and statistics.

Comparisons are made on elapsed seconds rather than on the expiry instant,
which may lie beyond the last representable ``datetime``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from paramguard.archive.schemas import RetentionInfo

LATEST_INSTANT = datetime.max.replace(tzinfo=timezone.utc)


def expiry_instant(archive_timestamp: datetime, retention_seconds: int) -> datetime:
    """Instant the retention ends, capped at the last representable datetime."""
    try:
        return archive_timestamp + timedelta(seconds=retention_seconds)
    except OverflowError:
        return LATEST_INSTANT


def _elapsed_seconds(archive_timestamp: datetime, now: datetime) -> float:
    # A clock behind the archive timestamp counts as no time elapsed
    return max((now - archive_timestamp).total_seconds(), 0.0)


def is_delete_eligible(archive_timestamp: datetime, retention_seconds: int, now: datetime) -> bool:
    return _elapsed_seconds(archive_timestamp, now) >= retention_seconds


def time_remaining(archive_timestamp: datetime, retention_seconds: int, now: datetime) -> Optional[timedelta]:
    """Time left before expiry, or None when the record is already expired."""
    elapsed = _elapsed_seconds(archive_timestamp, now)
    if elapsed >= retention_seconds:
        return None
    return timedelta(seconds=retention_seconds) - timedelta(seconds=elapsed)


def retention_info(archive_timestamp: datetime, retention_seconds: int, now: datetime) -> RetentionInfo:
    remaining = time_remaining(archive_timestamp, retention_seconds, now)
    return RetentionInfo(
        archive_timestamp=archive_timestamp,
        retention_period=timedelta(seconds=retention_seconds),
        time_remaining=remaining,
        can_delete=remaining is None,
    )
