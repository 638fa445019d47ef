# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives live here.  No other
module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. Session id generation                    (secrets)
3. Session cookie signing / verification    (PyJWT / HS256)
4. Client IP extraction for request logs
"""

import secrets
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Request

from core.config import settings

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# The rounds setting is the cost parameter.  Hashing happens once per
# password change; logins only ever verify.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plaintext password.  The salt is embedded in the result."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # malformed hash in the row – treat as a mismatch
        return False


_DUMMY_HASH: Optional[str] = None


def burn_password_check(plain: str) -> None:
    """
    Run one full verification against a throwaway hash.

    Called when a login names no known user, so that path costs the same
    as a wrong password.
    """
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password(secrets.token_urlsafe(16))
    _pbkdf2.verify(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# 2.  Session ids
# ---------------------------------------------------------------------------


def new_session_id() -> str:
    """256 bits from the OS CSPRNG, URL-safe, 43 chars."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# 3.  Session cookie – signed wrapper around the opaque id
# ---------------------------------------------------------------------------
# The signature only proves the id was issued by us; expiry and every
# session attribute live server-side.


def encode_session_cookie(session_id: str) -> str:
    return _jwt.encode({"sid": session_id}, settings.secret_key, algorithm="HS256")


def decode_session_cookie(value: Optional[str]) -> Optional[str]:
    """Return the session id, or None for a missing, forged or malformed cookie."""
    if not value:
        return None
    try:
        payload = _jwt.decode(value, settings.secret_key, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) and sid else None


# ---------------------------------------------------------------------------
# 4.  IP Address extraction
# ---------------------------------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
