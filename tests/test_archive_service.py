"""
Tests for ArchiveService: file I/O around the store and the end-to-end
archive lifecycle.
"""

import json
from datetime import timedelta

import pytest

from paramguard.archive.errors import (
    ArchiveIOError, ArchiveNotFoundError, RetentionActiveError
)
from paramguard.archive.service import DEFAULT_REASON
from paramguard.core.utils import compute_content_hash
from paramguard.database.models import ArchivedFileContent
from paramguard.database.session import get_session


def test_store_reads_file_and_records_metadata(service, make_file):
    source = make_file("settings.json", b'{"a":1}')
    archive_id = service.store("settings.json", source, retention_days=1)

    record = service.get_info(archive_id)
    assert record.name == "settings.json"
    assert record.original_path == str(source)
    assert record.format == "json"
    assert record.reason == DEFAULT_REASON
    assert record.content_hash == compute_content_hash(b'{"a":1}')

    metadata = json.loads(record.meta_info)
    assert metadata["size"] == 7
    assert isinstance(metadata["created"], int)
    assert isinstance(metadata["modified"], int)


def test_store_keeps_explicit_reason(service, make_file):
    archive_id = service.store("app.yaml", make_file("app.yaml", b"a: 1"), 5, reason="before upgrade")
    assert service.get_info(archive_id).reason == "before upgrade"


def test_store_missing_file_raises_io_error(service, tmp_path):
    missing = tmp_path / "nope.toml"
    with pytest.raises(ArchiveIOError) as excinfo:
        service.store("nope.toml", missing, 1)
    assert excinfo.value.path == missing
    assert service.list() == []


def test_restore_round_trip_to_original_path(service, make_file):
    content = b"[section]\nkey = value\n"
    source = make_file("app.ini", content)
    archive_id = service.store("app.ini", source, 1)
    source.unlink()

    restored = service.restore(archive_id)

    assert restored == source
    assert restored.read_bytes() == content
    assert compute_content_hash(restored.read_bytes()) == service.get_info(archive_id).content_hash


def test_restore_into_existing_directory_uses_archive_name(service, make_file, tmp_path):
    archive_id = service.store("renamed.env", make_file("orig.env", b"A=1"), 1)
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    restored = service.restore(archive_id, out_dir)

    assert restored == out_dir / "renamed.env"
    assert restored.read_bytes() == b"A=1"


def test_restore_to_literal_path_creates_parents(service, make_file, tmp_path):
    archive_id = service.store("a.cfg", make_file("a.cfg", b"x"), 1)
    target = tmp_path / "deep" / "nested" / "copy.cfg"

    restored = service.restore(archive_id, target)

    assert restored == target
    assert target.read_bytes() == b"x"


def test_restore_overwrites_existing_file(service, make_file, tmp_path):
    archive_id = service.store("a.cfg", make_file("a.cfg", b"archived"), 1)
    target = tmp_path / "existing.cfg"
    target.write_bytes(b"current")

    service.restore(archive_id, target)

    assert target.read_bytes() == b"archived"


def test_restore_missing_archive(service):
    with pytest.raises(ArchiveNotFoundError):
        service.restore(123)


def test_restore_into_directory_rejects_escaping_name(service, make_file, tmp_path):
    archive_id = service.store("../escape.cfg", make_file("escape.cfg", b"x"), 1)
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    with pytest.raises(ArchiveIOError):
        service.restore(archive_id, out_dir)
    assert not (tmp_path / "escape.cfg").exists()


def test_restore_write_failure_raises_io_error(service, make_file, tmp_path):
    archive_id = service.store("a.cfg", make_file("a.cfg", b"x"), 1)
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")

    with pytest.raises(ArchiveIOError):
        service.restore(archive_id, blocker / "child.cfg")


def test_delete_gating(service, make_file, clock):
    archive_id = service.store("a.cfg", make_file("a.cfg"), 30)

    with pytest.raises(RetentionActiveError):
        service.delete(archive_id)
    assert service.get_info(archive_id).id == archive_id

    clock.advance(days=30)
    service.delete(archive_id)
    assert service.list() == []


def test_retention_info_and_update(service, make_file, clock):
    archive_id = service.store("a.cfg", make_file("a.cfg"), 10)
    clock.advance(days=4)

    info = service.get_retention_info(archive_id)
    assert info.retention_period == timedelta(days=10)
    assert info.time_remaining == timedelta(days=6)
    assert info.can_delete is False

    service.update_retention(archive_id, 3)
    info = service.get_retention_info(archive_id)
    assert info.time_remaining is None
    assert info.can_delete is True


def test_retention_info_missing(service):
    with pytest.raises(ArchiveNotFoundError):
        service.get_retention_info(1)


def test_search_and_statistics(service, make_file, clock):
    ids = []
    for name in ("db-config", "app-config", "notes"):
        ids.append(service.store(name, make_file(name), 30))
        clock.advance(seconds=10)

    assert [r.id for r in service.search("config")] == [ids[1], ids[0]]

    stats = service.get_statistics()
    assert stats.total_archives == 3
    assert stats.active_count + stats.expired_count == stats.total_archives
    assert stats.total_size == 3 * len(b'{"a":1}')
    assert stats.avg_retention_days == pytest.approx(30.0)


def test_verify_detects_tampering(service, make_file):
    archive_id = service.store("a.cfg", make_file("a.cfg", b"original"), 1)
    assert service.verify(archive_id) is True

    with get_session(service.db.SessionLocal) as session:
        payload = session.get(ArchivedFileContent, archive_id)
        payload.content = b"tampered"
        session.commit()

    assert service.verify(archive_id) is False


def test_settings_json_lifecycle(service, make_file, clock):
    source = make_file("settings.json", b'{"a":1}')
    archive_id = service.store("settings.json", source, 1)
    assert archive_id == 1

    assert service.can_delete(1) is False
    remaining = service.get_retention_info(1).time_remaining
    assert remaining is not None
    assert timedelta(hours=23) < remaining <= timedelta(days=1)

    clock.advance(days=2)
    assert service.can_delete(1) is True
    assert [r.id for r in service.expired()] == [1]
    assert service.cleanup() == 1
    assert service.cleanup() == 0
    assert service.list() == []
