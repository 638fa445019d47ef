import pytest

from core.guards import (
    ADMIN_HOME,
    LOGIN_PATH,
    Decision,
    check_admin,
    check_auth,
    check_guest,
    check_super_admin,
)
from core.sessions import SessionContext


def _ctx(role=None, authenticated=True, user_id=1):
    return SessionContext(
        session_id="sid", user_id=user_id, username="u", email="u@example.com",
        role=role, is_authenticated=authenticated,
    )


def test_auth_admits_logged_in_session():
    assert check_auth(_ctx("admin")).decision is Decision.ADMIT


@pytest.mark.parametrize("ctx", [
    SessionContext.anonymous(),
    _ctx("admin", authenticated=False),
    _ctx("admin", user_id=None),
])
def test_auth_redirects_to_login(ctx):
    result = check_auth(ctx)
    assert result.decision is Decision.REDIRECT
    assert result.location == LOGIN_PATH


def test_guest_admits_anonymous_and_redirects_logged_in():
    assert check_guest(SessionContext.anonymous()).admitted
    result = check_guest(_ctx("admin"))
    assert result.decision is Decision.REDIRECT
    assert result.location == ADMIN_HOME


@pytest.mark.parametrize("role", ["admin", "super_admin"])
def test_admin_accepts_both_admin_roles(role):
    assert check_admin(_ctx(role)).admitted


@pytest.mark.parametrize("ctx", [
    _ctx("guest"),
    _ctx(None),
    SessionContext.anonymous(),
])
def test_admin_denies_without_redirect(ctx):
    result = check_admin(ctx)
    assert result.decision is Decision.DENY
    assert result.location is None


def test_super_admin_is_exact():
    assert check_super_admin(_ctx("super_admin")).admitted
    assert check_super_admin(_ctx("admin")).decision is Decision.DENY
