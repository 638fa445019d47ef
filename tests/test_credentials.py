import pytest
from sqlalchemy.exc import IntegrityError

from auth.credentials import (
    authenticate,
    change_password,
    create_user,
    find_by_identifier,
    new_user,
    verify_password,
)
from core.errors import AuthError, DuplicateError, ValidationError
from conftest import PASSWORD


def test_password_is_hashed_on_create(db):
    user = create_user(db, "dewi", "Dewi@Example.com", PASSWORD)
    assert user.password_hash != PASSWORD
    assert user.password_hash.startswith("$pbkdf2-sha256$")
    assert user.email == "dewi@example.com"
    assert user.role == "admin"
    assert verify_password(user, PASSWORD)
    assert not verify_password(user, "wrong-pass")


def test_duplicate_email_differing_only_in_case(db):
    create_user(db, "anna", "A@x.com", PASSWORD)
    with pytest.raises(DuplicateError):
        create_user(db, "bella", "a@x.com", PASSWORD)


def test_duplicate_username(db):
    create_user(db, "anna", "anna@x.com", PASSWORD)
    with pytest.raises(DuplicateError):
        create_user(db, "anna", "other@x.com", PASSWORD)


def test_unique_index_backs_the_precheck(db):
    create_user(db, "anna", "anna@x.com", PASSWORD)
    db.add(new_user("anna2", "ANNA@x.com", PASSWORD))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


@pytest.mark.parametrize("username, password, role, field", [
    ("ab", PASSWORD, "admin", "username"),
    ("x" * 51, PASSWORD, "admin", "username"),
    ("valid", "12345", "admin", "password"),
    ("valid", PASSWORD, "guest", "role"),
])
def test_create_user_rules(db, username, password, role, field):
    with pytest.raises(ValidationError) as info:
        create_user(db, username, "v@x.com", password, role)
    assert field in {e.field for e in info.value.errors}


def test_find_by_identifier_matches_username_or_email(db, admin_user):
    assert find_by_identifier(db, "admin1").id == admin_user.id
    assert find_by_identifier(db, "ADMIN1@example.com").id == admin_user.id
    assert find_by_identifier(db, "nobody") is None
    assert find_by_identifier(db, "") is None


def test_inactive_users_are_invisible(db, admin_user):
    admin_user.is_active = False
    db.commit()
    assert find_by_identifier(db, "admin1") is None
    with pytest.raises(AuthError):
        authenticate(db, "admin1", PASSWORD)


def test_authenticate_stamps_last_login(db, admin_user):
    assert admin_user.last_login is None
    user = authenticate(db, "admin1@example.com", PASSWORD)
    assert user.last_login is not None


def test_authenticate_failure_is_generic(db, admin_user):
    with pytest.raises(AuthError) as wrong_password:
        authenticate(db, "admin1", "not-the-password")
    with pytest.raises(AuthError) as unknown_user:
        authenticate(db, "ghost", "not-the-password")
    assert wrong_password.value.detail == unknown_user.value.detail == "Invalid credentials"


def test_unknown_user_still_runs_a_hash_check(db, monkeypatch):
    calls = []
    monkeypatch.setattr("auth.credentials.burn_password_check", lambda pw: calls.append(pw))
    with pytest.raises(AuthError):
        authenticate(db, "ghost", "guess")
    assert calls == ["guess"]


def test_change_password(db, admin_user):
    old_hash = admin_user.password_hash
    change_password(db, admin_user, PASSWORD, "brand-new-pass")
    assert admin_user.password_hash != old_hash
    assert verify_password(admin_user, "brand-new-pass")

    with pytest.raises(ValidationError):
        change_password(db, admin_user, "wrong-old", "another-pass")
    with pytest.raises(ValidationError):
        change_password(db, admin_user, "brand-new-pass", "brand-new-pass")
