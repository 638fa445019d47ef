from datetime import timedelta

import jwt
import pytest

from core.clock import as_utc, utcnow
from core.security import decode_session_cookie, encode_session_cookie
from core.sessions import (
    SessionContext,
    create_anonymous_session,
    create_session,
    destroy_session,
    load_session,
    pop_return_to,
    remember_return_to,
    safe_return_to,
    touch_session,
)
from models.session import SessionRecord


def test_create_session_persists_user_attributes(db, admin_user):
    sid = create_session(db, admin_user)
    assert len(sid) >= 40

    record = load_session(db, sid)
    ctx = SessionContext.from_record(record)
    assert ctx.is_authenticated
    assert ctx.user_id == admin_user.id
    assert ctx.username == "admin1"
    assert ctx.role == "admin"
    assert as_utc(record.expires_at) - as_utc(record.touched_at) == timedelta(days=7)


def test_session_ids_are_unique(db, admin_user):
    assert len({create_session(db, admin_user) for _ in range(5)}) == 5


def test_touch_is_lazy(db, admin_user):
    sid = create_session(db, admin_user)
    record = load_session(db, sid)
    created = as_utc(record.touched_at)
    original_expiry = as_utc(record.expires_at)

    assert touch_session(db, record, now=created + timedelta(hours=23)) is False
    assert as_utc(record.expires_at) == original_expiry

    later = created + timedelta(hours=25)
    assert touch_session(db, record, now=later) is True
    assert as_utc(record.expires_at) == later + timedelta(days=7)
    assert as_utc(record.touched_at) == later


def test_expired_session_looks_like_missing(db, admin_user):
    sid = create_session(db, admin_user)
    assert load_session(db, sid, now=utcnow() + timedelta(days=8)) is None
    assert db.get(SessionRecord, sid) is None
    assert load_session(db, "never-issued") is None


def test_destroy_session(db, admin_user):
    sid = create_session(db, admin_user)
    destroy_session(db, sid)
    assert load_session(db, sid) is None
    destroy_session(db, sid)  # second call is a no-op


def test_return_to_opens_anonymous_session_then_is_consumed_once(db):
    ctx = SessionContext.anonymous()
    new_sid = remember_return_to(db, ctx, "/admin/inquiries?status=new")
    assert new_sid is not None
    assert ctx.session_id == new_sid

    assert pop_return_to(db, ctx) == "/admin/inquiries?status=new"
    assert pop_return_to(db, ctx) is None
    assert db.get(SessionRecord, new_sid) is None


def test_return_to_reuses_existing_session(db):
    sid = create_anonymous_session(db)
    ctx = SessionContext(session_id=sid)
    assert remember_return_to(db, ctx, "/admin") is None
    assert load_session(db, sid).return_to == "/admin"


@pytest.mark.parametrize("path, expected", [
    ("/admin", "/admin"),
    ("//evil.example.com/x", None),
    ("https://evil.example.com", None),
    ("/\\evil", None),
    (None, None),
])
def test_safe_return_to(path, expected):
    assert safe_return_to(path) == expected


def test_cookie_signature_round_trip_and_tamper():
    value = encode_session_cookie("abc123")
    assert decode_session_cookie(value) == "abc123"
    forged = jwt.encode({"sid": "abc123"}, "some-other-secret", algorithm="HS256")
    assert decode_session_cookie(forged) is None
    assert decode_session_cookie("abc123") is None
    assert decode_session_cookie(None) is None


def test_opening_a_session_sweeps_expired_rows(db, admin_user):
    stale = [create_anonymous_session(db, return_to="/admin") for _ in range(3)]
    live = create_session(db, admin_user)
    for sid in stale:
        db.get(SessionRecord, sid).expires_at = utcnow() - timedelta(minutes=1)
    db.commit()

    fresh = create_anonymous_session(db)

    db.expunge_all()
    assert all(db.get(SessionRecord, sid) is None for sid in stale)
    assert db.get(SessionRecord, live) is not None
    assert db.get(SessionRecord, fresh) is not None
    assert db.query(SessionRecord).count() == 2
