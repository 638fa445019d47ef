# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Access control.

Two layers:

* ``check_*`` – pure decisions over a :class:`SessionContext`.  No I/O, no
  framework types; the tests drive these directly.
* ``require_*`` – FastAPI dependency guards built on the checks.  Role guards
  depend on :func:`require_auth`, so an anonymous visitor is sent to the
  login page before any role is looked at, and a known-but-under-privileged
  user gets 403, never a redirect.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AccessDeniedError, RedirectRequired, StoreUnavailableError
from core.sessions import SessionContext, get_session_context, remember_return_to
from database import get_db, store_status

LOGIN_PATH = "/admin/login"
ADMIN_HOME = "/admin"

_ADMIN_ROLES = {"admin", "super_admin"}


class Decision(enum.Enum):
    ADMIT = "admit"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class GuardResult:
    decision: Decision
    location: Optional[str] = None

    @property
    def admitted(self) -> bool:
        return self.decision is Decision.ADMIT


ADMIT = GuardResult(Decision.ADMIT)


def _logged_in(ctx: SessionContext) -> bool:
    return bool(ctx.is_authenticated and ctx.user_id)


def check_auth(ctx: SessionContext) -> GuardResult:
    if _logged_in(ctx):
        return ADMIT
    return GuardResult(Decision.REDIRECT, LOGIN_PATH)


def check_guest(ctx: SessionContext) -> GuardResult:
    if _logged_in(ctx):
        return GuardResult(Decision.REDIRECT, ADMIN_HOME)
    return ADMIT


def check_admin(ctx: SessionContext) -> GuardResult:
    if _logged_in(ctx) and ctx.role in _ADMIN_ROLES:
        return ADMIT
    return GuardResult(Decision.DENY)


def check_super_admin(ctx: SessionContext) -> GuardResult:
    if _logged_in(ctx) and ctx.role == "super_admin":
        return ADMIT
    return GuardResult(Decision.DENY)


# ---------------------------------------------------------------------------
# FastAPI dependency guards
# ---------------------------------------------------------------------------


def require_store() -> None:
    """Fail closed on admin routes while the database is unreachable."""
    if not store_status.check() and not settings.admin_reachable_when_degraded:
        raise StoreUnavailableError()


def _requested_path(request: Request) -> str:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


def require_auth(
    request: Request,
    _store: None = Depends(require_store),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
) -> SessionContext:
    """
    Admit a logged-in session.  Otherwise remember the requested path on the
    session and send the visitor to the login page.
    """
    result = check_auth(ctx)
    if result.admitted:
        return ctx
    new_sid = None
    if request.method == "GET":
        new_sid = remember_return_to(db, ctx, _requested_path(request))
    raise RedirectRequired(result.location, session_id=new_sid)


def require_guest(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    result = check_guest(ctx)
    if not result.admitted:
        raise RedirectRequired(result.location)
    return ctx


def require_admin(ctx: SessionContext = Depends(require_auth)) -> SessionContext:
    if not check_admin(ctx).admitted:
        raise AccessDeniedError("Access denied. Admin privileges required.")
    return ctx


def require_super_admin(ctx: SessionContext = Depends(require_auth)) -> SessionContext:
    if not check_super_admin(ctx).admitted:
        raise AccessDeniedError("Access denied. Super admin privileges required.")
    return ctx
