"""Shared fixtures for the archive tests."""

from datetime import datetime, timedelta, timezone

import pytest

from paramguard.archive.service import ArchiveService
from paramguard.archive.store import ArchiveStore


class FakeClock:
    """Controllable replacement for the store's UTC clock."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "paramguard.db"


@pytest.fixture
def store(db_path, clock):
    archive_store = ArchiveStore(db_path, clock=clock)
    yield archive_store
    archive_store.close()


@pytest.fixture
def service(store):
    return ArchiveService(store=store)


@pytest.fixture
def make_file(tmp_path):
    def _make_file(name, content=b'{"a":1}'):
        path = tmp_path / "src" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make_file
