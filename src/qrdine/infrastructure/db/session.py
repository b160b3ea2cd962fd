from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _connect_args(database_url: str, connect_timeout: int) -> dict[str, object]:
    backend = make_url(database_url).get_backend_name()
    if backend == "postgresql":
        return {"connect_timeout": connect_timeout}
    if backend == "sqlite":
        # claims and releases run from worker threads; sqlite waits on the file lock
        return {"check_same_thread": False, "timeout": connect_timeout}
    return {}


def build_engine(database_url: str, connect_timeout: int = 1) -> Engine:
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=_connect_args(database_url, connect_timeout),
    )


@lru_cache(maxsize=8)
def _shared_engine(database_url: str, connect_timeout: int) -> Engine:
    return build_engine(database_url, connect_timeout)


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    """Process-wide engine for ``DATABASE_URL``; the app lifespan owns its disposal."""
    return _shared_engine(_database_url(), max(1, int(timeout_seconds)))


def ping_database(engine: Engine) -> bool:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return False
    return True
