"""Tests for the retention arithmetic."""

from datetime import datetime, timedelta, timezone

from paramguard.archive import retention

ARCHIVED = datetime(2024, 1, 1, tzinfo=timezone.utc)
ONE_DAY = 86400


def test_expiry_instant():
    assert retention.expiry_instant(ARCHIVED, ONE_DAY) == ARCHIVED + timedelta(days=1)


def test_not_eligible_before_expiry():
    now = ARCHIVED + timedelta(hours=23)
    assert not retention.is_delete_eligible(ARCHIVED, ONE_DAY, now)
    assert retention.time_remaining(ARCHIVED, ONE_DAY, now) == timedelta(hours=1)


def test_eligible_exactly_at_expiry():
    now = ARCHIVED + timedelta(days=1)
    assert retention.is_delete_eligible(ARCHIVED, ONE_DAY, now)
    assert retention.time_remaining(ARCHIVED, ONE_DAY, now) is None


def test_zero_retention_is_immediately_eligible():
    assert retention.is_delete_eligible(ARCHIVED, 0, ARCHIVED)


def test_retention_info():
    info = retention.retention_info(ARCHIVED, 30 * ONE_DAY, ARCHIVED + timedelta(days=10))
    assert info.archive_timestamp == ARCHIVED
    assert info.retention_period == timedelta(days=30)
    assert info.time_remaining == timedelta(days=20)
    assert info.can_delete is False

    expired = retention.retention_info(ARCHIVED, 30 * ONE_DAY, ARCHIVED + timedelta(days=31))
    assert expired.time_remaining is None
    assert expired.can_delete is True


def test_expiry_beyond_datetime_range():
    huge = 3_000_000 * ONE_DAY
    now = ARCHIVED + timedelta(days=1)
    assert retention.expiry_instant(ARCHIVED, huge) == retention.LATEST_INSTANT
    assert not retention.is_delete_eligible(ARCHIVED, huge, now)
    assert retention.time_remaining(ARCHIVED, huge, now) == timedelta(days=2_999_999)


def test_clock_behind_archive_counts_as_nothing_elapsed():
    before = ARCHIVED - timedelta(hours=1)
    assert not retention.is_delete_eligible(ARCHIVED, ONE_DAY, before)
    assert retention.time_remaining(ARCHIVED, ONE_DAY, before) == timedelta(days=1)
