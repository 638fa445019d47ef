# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, logout, admin registration, password change.

Security notes
--------------
* Login answers with the *same* page and message whether the identifier
  doesn't exist or the password is wrong.  This prevents user-enumeration.
* A successful login always gets a brand-new session id; the anonymous
  session that carried ``return_to`` is thrown away.
* ``return_to`` is consumed once: read, cleared, then used as the redirect.
"""

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from auth.credentials import authenticate, change_password, create_user
from auth.schemas import ChangePasswordRequest
from core.errors import AuthError, DuplicateError, ValidationError
from core.guards import ADMIN_HOME, LOGIN_PATH, require_auth, require_guest, require_super_admin
from core.logger import logger
from core.pages import render
from core.security import get_client_ip
from core.sessions import (
    SessionContext,
    clear_session_cookie,
    create_session,
    destroy_session,
    get_session_context,
    pop_return_to,
    set_session_cookie,
)
from database import get_db
from models.user import ROLES, User

router = APIRouter(prefix="/admin", tags=["auth"])


# ---------------------------------------------------------------------------
# GET/POST /admin/login
# ---------------------------------------------------------------------------


@router.get("/login")
def login_page(request: Request, _guest: SessionContext = Depends(require_guest)):
    success = None
    if request.query_params.get("success") == "logged_out":
        success = "You have been logged out"
    return render(request, "login.html", {"success": success})


@router.post("/login")
def login(
    request: Request,
    identifier: str = Form(""),
    password: str = Form(""),
    ctx: SessionContext = Depends(require_guest),
    db: Session = Depends(get_db),
):
    """Authenticate, open a session and go back to where the visitor was headed."""
    if not identifier.strip() or not password:
        return render(
            request, "login.html",
            {"error": "Please provide both username/email and password"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        user = authenticate(db, identifier, password)
    except AuthError as exc:
        logger.info("Login failed | client=%s", get_client_ip(request))
        return render(request, "login.html", {"error": exc.detail}, status_code=exc.status_code)

    target = pop_return_to(db, ctx) or ADMIN_HOME
    sid = create_session(db, user)
    logger.info("Login ok: user_id=%s | client=%s", user.id, get_client_ip(request))

    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, sid)
    return response


# ---------------------------------------------------------------------------
# POST /admin/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    destroy_session(db, ctx.session_id)
    if ctx.is_authenticated:
        logger.info("Logout: user_id=%s", ctx.user_id)

    response = RedirectResponse(f"{LOGIN_PATH}?success=logged_out", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response


# ---------------------------------------------------------------------------
# GET/POST /admin/register  – super admin only
# ---------------------------------------------------------------------------


@router.get("/register")
def register_page(request: Request, _admin: SessionContext = Depends(require_super_admin)):
    return render(request, "register.html", {"roles": ROLES})


@router.post("/register")
def register(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirmPassword: str = Form(""),
    role: str = Form("admin"),
    admin: SessionContext = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """Create another admin account.  Errors re-render the form."""
    page = {"roles": ROLES}

    def _fail(message: str, code: int):
        return render(request, "register.html", {**page, "error": message}, status_code=code)

    if not username or not email or not password or not confirmPassword:
        return _fail("All fields are required", status.HTTP_400_BAD_REQUEST)
    if password != confirmPassword:
        return _fail("Passwords do not match", status.HTTP_400_BAD_REQUEST)

    try:
        user = create_user(db, username, email, password, role)
    except ValidationError as exc:
        return _fail("; ".join(e.message for e in exc.errors), exc.status_code)
    except DuplicateError as exc:
        return _fail(exc.detail, exc.status_code)

    logger.info("Admin user_id=%s registered user_id=%s", admin.user_id, user.id)
    return render(
        request, "register.html",
        {**page, "success": "Admin user created successfully"},
        status_code=status.HTTP_201_CREATED,
    )


# ---------------------------------------------------------------------------
# POST /admin/change-password
# ---------------------------------------------------------------------------


@router.post("/change-password")
def change_own_password(
    body: ChangePasswordRequest,
    ctx: SessionContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Change the logged-in user's password after checking the old one."""
    user = db.get(User, ctx.user_id)
    if user is None or not user.is_active:
        raise AuthError()
    change_password(db, user, body.old_password, body.new_password)
    return {"detail": "Password changed successfully"}
