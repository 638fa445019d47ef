# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, the FastAPI
dependency that provides a DB session per request, and the store
availability tracker used for degraded mode.
"""

import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from core.config import settings
from core.logger import logger


def _engine_kwargs(url: str) -> dict:
    # pool_pre_ping keeps idle connections alive across server-side timeouts
    kwargs = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every checkout is a new empty DB
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Store availability
# ---------------------------------------------------------------------------


class StoreStatus:
    """
    Tracks whether the database answered the last time we asked.

    Set at startup by :meth:`ping`, flipped down by request handlers that
    hit a connection error, and re-pinged lazily by :meth:`check`.
    """

    RETRY_AFTER_SECONDS = 30.0

    def __init__(self):
        self.available = True
        self._last_ping = 0.0

    def ping(self) -> bool:
        self._last_ping = time.monotonic()
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            if self.available:
                logger.warning("Database unreachable: %s", exc.__class__.__name__)
            self.available = False
            return False
        if not self.available:
            logger.info("Database reachable again")
        self.available = True
        return True

    def mark_down(self) -> None:
        if self.available:
            logger.error("Database connection lost – running in degraded mode")
        self.available = False
        self._last_ping = time.monotonic()

    def check(self) -> bool:
        if not self.available and time.monotonic() - self._last_ping >= self.RETRY_AFTER_SECONDS:
            self.ping()
        return self.available


store_status = StoreStatus()
