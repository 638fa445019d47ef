# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Server-side session store.

The client only ever holds a signed opaque id in one cookie.  Everything
else – who is logged in, their role, where to go after login – lives in the
``sessions`` table and is handed to request handlers as an explicit
:class:`SessionContext` value.

Expiry is wall-clock driven and enforced lazily on read.  Rows nobody reads
again are swept whenever a new session is opened.
A live session's expiry is pushed forward at most once per touch window so
that ordinary page views do not each cost a write.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from core.clock import as_utc, utcnow
from core.config import settings
from core.logger import logger
from core.security import decode_session_cookie, encode_session_cookie, new_session_id
from database import get_db, store_status
from models.session import SessionRecord


def _max_age() -> timedelta:
    return timedelta(days=settings.session_max_age_days)


def _touch_after() -> timedelta:
    return timedelta(hours=settings.session_touch_after_hours)


# ---------------------------------------------------------------------------
# Per-request value
# ---------------------------------------------------------------------------


@dataclass
class SessionContext:
    session_id: Optional[str] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    is_authenticated: bool = False
    return_to: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionContext":
        return cls(
            session_id=record.id,
            user_id=record.user_id,
            username=record.username,
            email=record.email,
            role=record.role,
            is_authenticated=bool(record.is_authenticated),
            return_to=record.return_to,
        )


# ---------------------------------------------------------------------------
# Store operations
# ---------------------------------------------------------------------------


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    """Delete every expired row; the caller commits."""
    now = now or utcnow()
    return (
        db.query(SessionRecord)
        .filter(SessionRecord.expires_at <= now)
        .delete(synchronize_session=False)
    )


def create_session(db: Session, user) -> str:
    """Persist an authenticated session for *user* and return its id."""
    now = utcnow()
    purge_expired(db, now)
    sid = new_session_id()
    db.add(SessionRecord(
        id=sid,
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_authenticated=True,
        expires_at=now + _max_age(),
        touched_at=now,
    ))
    db.commit()
    return sid


def create_anonymous_session(db: Session, return_to: Optional[str] = None) -> str:
    now = utcnow()
    purge_expired(db, now)
    sid = new_session_id()
    db.add(SessionRecord(
        id=sid,
        is_authenticated=False,
        return_to=return_to,
        expires_at=now + _max_age(),
        touched_at=now,
    ))
    db.commit()
    return sid


def load_session(db: Session, session_id: str, now: Optional[datetime] = None) -> Optional[SessionRecord]:
    """
    Fetch a live session.  An expired row is deleted on the spot and reported
    exactly like an id that never existed.
    """
    record = db.get(SessionRecord, session_id)
    if record is None:
        return None
    now = now or utcnow()
    if as_utc(record.expires_at) <= now:
        db.delete(record)
        db.commit()
        return None
    return record


def touch_session(db: Session, record: SessionRecord, now: Optional[datetime] = None) -> bool:
    """Extend expiry if the last refresh is older than the touch window."""
    now = now or utcnow()
    if now - as_utc(record.touched_at) <= _touch_after():
        return False
    record.touched_at = now
    record.expires_at = now + _max_age()
    db.commit()
    return True


def destroy_session(db: Session, session_id: Optional[str]) -> None:
    if not session_id:
        return
    record = db.get(SessionRecord, session_id)
    if record is not None:
        db.delete(record)
        db.commit()


def safe_return_to(path: Optional[str]) -> Optional[str]:
    """Only same-site absolute paths are honoured as post-login targets."""
    if not path or not path.startswith("/") or path.startswith("//") or "\\" in path:
        return None
    return path


def remember_return_to(db: Session, ctx: SessionContext, path: str) -> Optional[str]:
    """
    Store *path* as the post-login target.

    Returns the id of a newly opened anonymous session when the caller had
    none (its cookie must be sent), otherwise None.
    """
    path = safe_return_to(path)
    if ctx.session_id:
        record = db.get(SessionRecord, ctx.session_id)
        if record is not None:
            record.return_to = path
            db.commit()
            ctx.return_to = path
            return None
    sid = create_anonymous_session(db, return_to=path)
    ctx.session_id = sid
    ctx.return_to = path
    return sid


def pop_return_to(db: Session, ctx: SessionContext) -> Optional[str]:
    """
    Read and clear the post-login target.  The anonymous session that carried
    it is discarded; the login creates a fresh id.
    """
    if not ctx.session_id:
        return None
    record = db.get(SessionRecord, ctx.session_id)
    if record is None:
        return None
    target = safe_return_to(record.return_to)
    if record.is_authenticated:
        record.return_to = None
    else:
        db.delete(record)
    db.commit()
    ctx.return_to = None
    return target


# ---------------------------------------------------------------------------
# Cookie
# ---------------------------------------------------------------------------


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=encode_session_cookie(session_id),
        max_age=int(_max_age().total_seconds()),
        httponly=True,
        secure=settings.production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.production,
        samesite="lax",
    )


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


def get_session_context(request: Request, db: Session = Depends(get_db)) -> SessionContext:
    """
    Resolve the cookie into a :class:`SessionContext`.

    Missing cookie, bad signature, unknown id, expired row and an unreachable
    store all come back as the same anonymous context.
    """
    sid = decode_session_cookie(request.cookies.get(settings.session_cookie_name))
    if sid is None or not store_status.check():
        return SessionContext.anonymous()

    try:
        record = load_session(db, sid)
        if record is None:
            return SessionContext.anonymous()
        touch_session(db, record)
    except OperationalError:
        db.rollback()
        store_status.mark_down()
        return SessionContext.anonymous()

    ctx = SessionContext.from_record(record)
    if ctx.is_authenticated and ctx.user_id is None:
        logger.warning("Session %s… flagged authenticated without a user", sid[:8])
        ctx.is_authenticated = False
    return ctx
