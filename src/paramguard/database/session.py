# paramguard/src/paramguard/database/session.py

import contextlib

from sqlalchemy.orm import sessionmaker


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@contextlib.contextmanager
def get_session(session_factory):
    """
    Use as:
        with get_session(factory) as session:
            ...
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
