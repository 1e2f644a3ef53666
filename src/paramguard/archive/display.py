"""
Presentation-ready views of archive records.

``project(record, ui_mode)`` maps a stored record to a ``DisplayRecord`` for a
given front end. Everything here is a pure function: no shared formatter
instance, no errors. Missing or malformed metadata simply leaves the optional
fields empty.
"""

import json
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from pydantic import BaseModel

from paramguard.archive import retention
from paramguard.archive.schemas import ArchiveRecord, ensure_utc

KB = 1024
MB = KB * 1024
GB = MB * 1024

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ELLIPSIS = "..."


class TruncateLengths(NamedTuple):
    name: int
    path: int


class UiMode(str, Enum):
    """Front ends a record can be projected for."""
    CLI_TERSE = "cli"
    CLI_DETAILED = "cli-detailed"
    TUI = "tui"
    GUI = "gui"

    @property
    def truncate_lengths(self) -> Optional[TruncateLengths]:
        # Terse CLI and GUI leave truncation to the caller
        return _TRUNCATE_LENGTHS.get(self)


_TRUNCATE_LENGTHS = {
    UiMode.CLI_DETAILED: TruncateLengths(name=30, path=40),
    UiMode.TUI: TruncateLengths(name=20, path=30),
}


class DisplayRecord(BaseModel):
    id: int
    name: str
    path: str
    format: str
    age: str
    status: str
    reason: Optional[str] = None
    size: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None
    retention_remaining: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


def format_size(size: int) -> str:
    """Human readable byte count, binary units, two decimals from 1 KB upward."""
    if size >= GB:
        return f"{size / GB:.2f} GB"
    if size >= MB:
        return f"{size / MB:.2f} MB"
    if size >= KB:
        return f"{size / KB:.2f} KB"
    return f"{size} B"


def format_duration(duration: timedelta) -> str:
    """Coarsest whole unit: days, then hours, then minutes."""
    seconds = max(int(duration.total_seconds()), 0)
    days, remainder = divmod(seconds, 86400)
    if days >= 1:
        return f"{days} days"
    hours = remainder // 3600
    if hours >= 1:
        return f"{hours} hours"
    return f"{seconds // 60} minutes"


def format_age(date: datetime, now: Optional[datetime] = None) -> str:
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    return format_duration(now - ensure_utc(date))


def format_timestamp(value) -> str:
    """Render a UTC instant (datetime or unix seconds) as 'YYYY-MM-DD HH:MM:SS'."""
    if isinstance(value, datetime):
        moment = ensure_utc(value)
    else:
        moment = datetime.fromtimestamp(int(value), tz=timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def truncate(text: str, max_len: Optional[int]) -> str:
    if max_len is None or len(text) <= max_len:
        return text
    keep = max(max_len - len(ELLIPSIS), 0)
    return text[:keep] + ELLIPSIS


def parse_metadata(meta_info: Optional[str]) -> Optional[Dict[str, Any]]:
    if not meta_info:
        return None
    try:
        parsed = json.loads(meta_info)
    except (ValueError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _optional_int(metadata: Optional[Dict[str, Any]], key: str) -> Optional[int]:
    if not metadata:
        return None
    value = metadata.get(key)
    if isinstance(value, bool):
        return None
    try:
        return int(value) if value is not None else None
    except (ValueError, TypeError):
        return None


def _optional_timestamp(value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    try:
        return format_timestamp(value)
    except (OverflowError, OSError, ValueError):
        return None


def status_line(record: ArchiveRecord, now: datetime) -> str:
    remaining = retention.time_remaining(record.archive_timestamp, record.retention_seconds, now)
    if remaining is None:
        return "Expired"
    return f"{format_duration(remaining)} remaining"


def project(record: ArchiveRecord, ui_mode: UiMode, now: Optional[datetime] = None) -> DisplayRecord:
    """
    Build the view of ``record`` for ``ui_mode``.

    Args:
        record: The stored archive record
        ui_mode: Target surface; decides how name and path are truncated
        now: Reference instant for age and retention (defaults to current UTC)
    """
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    lengths = ui_mode.truncate_lengths
    metadata = parse_metadata(record.meta_info)
    size = _optional_int(metadata, "size")
    remaining = retention.time_remaining(record.archive_timestamp, record.retention_seconds, now)

    return DisplayRecord(
        id=record.id,
        name=truncate(record.name, lengths.name if lengths else None),
        path=truncate(record.original_path, lengths.path if lengths else None),
        format=record.format,
        age=format_age(record.archive_timestamp, now),
        status=status_line(record, now),
        reason=record.reason or None,
        size=format_size(size) if size is not None else None,
        created=_optional_timestamp(_optional_int(metadata, "created")),
        modified=_optional_timestamp(_optional_int(metadata, "modified")),
        retention_remaining=format_duration(remaining) if remaining is not None else None,
        metadata=metadata,
    )
