# File: paramguard/database/engine.py

from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from paramguard.core.config import build_database_url, settings
from paramguard.database.models import Base


def _casefold(value):
    return value.casefold() if value is not None else None


def _configure_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # SQLite's lower() only folds ASCII
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def create_store_engine(db_path=None):
    """
    Create an engine for the archive store file and make sure the schema exists.

    Defaults to the configured ``db_path``. ``":memory:"`` yields a single
    shared in-memory connection. Every connection gets foreign keys enabled
    and a Unicode-aware ``casefold()`` SQL function.
    """
    url = build_database_url(db_path if db_path is not None else settings.db_path)
    engine_kwargs = {"echo": False, "future": True}
    if url == "sqlite://":
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **engine_kwargs)
    event.listen(engine, "connect", _configure_connection)
    Base.metadata.create_all(engine)
    return engine
