from __future__ import annotations

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)


def init_engine(database_url: str):
    connect_args = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, pool_pre_ping=True, future=True, connect_args=connect_args)
    SessionLocal.configure(bind=engine)
    return engine


def _ensure_initialized() -> None:
    if SessionLocal.kw.get("bind") is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() before use.")


@contextmanager
def get_session():
    """Yield a session that commits on success and rolls back on any error."""
    _ensure_initialized()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as exc:
        logger.debug("Rolling back session: {error}", error=str(exc))
        session.rollback()
        raise
    finally:
        session.close()
