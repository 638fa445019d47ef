# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Credential store – lookup, creation and verification of admin accounts.

Security notes
--------------
* Passwords are hashed before the ``User`` row is constructed and re-hashed
  only when a new password is set.  The plaintext is never persisted.
* :func:`authenticate` raises the *same* ``AuthError`` whether the
  identifier is unknown or the password is wrong, and burns one hash
  verification on the unknown-identifier path so both cost the same.
* Uniqueness is enforced by the table's unique indexes; the pre-check only
  produces a friendlier error.  A race that slips past it still surfaces as
  ``DuplicateError`` via ``IntegrityError``.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.clock import utcnow
from core.errors import AuthError, DuplicateError, FieldError, ValidationError
from core.logger import logger
from core.security import burn_password_check, hash_password
from core.security import verify_password as _verify_hash
from models.user import ROLES, User

USERNAME_MIN, USERNAME_MAX = 3, 50
PASSWORD_MIN = 6


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_by_identifier(db: Session, identifier: str) -> Optional[User]:
    """Match *identifier* against username or (lowercased) email, active users only."""
    identifier = (identifier or "").strip()
    if not identifier:
        return None
    return (
        db.query(User)
        .filter(
            or_(User.username == identifier, User.email == identifier.lower()),
            User.is_active.is_(True),
        )
        .first()
    )


def _check_new_user(username: str, email: str, password: str, role: str) -> List[FieldError]:
    errors = []
    if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        errors.append(FieldError(
            "username", f"Username must be {USERNAME_MIN}-{USERNAME_MAX} characters long"
        ))
    if not email or "@" not in email:
        errors.append(FieldError("email", "Please enter a valid email"))
    if len(password or "") < PASSWORD_MIN:
        errors.append(FieldError(
            "password", f"Password must be at least {PASSWORD_MIN} characters long"
        ))
    if role not in ROLES:
        errors.append(FieldError("role", f"Role must be one of: {', '.join(ROLES)}"))
    return errors


def new_user(username: str, email: str, password: str, role: str = "admin") -> User:
    """Hash, then construct.  The returned row is not yet added to a session."""
    return User(
        username=username,
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )


def create_user(db: Session, username: str, email: str, password: str, role: str = "admin") -> User:
    username = (username or "").strip()
    email = normalize_email(email)
    role = role or "admin"

    errors = _check_new_user(username, email, password, role)
    if errors:
        raise ValidationError(errors)

    clash = (
        db.query(User)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if clash:
        raise DuplicateError()

    user = new_user(username, email, password, role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError() from exc
    db.refresh(user)
    logger.info("User created: id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def verify_password(user: User, candidate: str) -> bool:
    return _verify_hash(candidate or "", user.password_hash)


def authenticate(db: Session, identifier: str, password: str) -> User:
    """Return the active user owning these credentials or raise ``AuthError``."""
    user = find_by_identifier(db, identifier)
    if user is None:
        burn_password_check(password or "")
        raise AuthError()
    if not verify_password(user, password):
        raise AuthError()

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(user, old_password):
        raise ValidationError([FieldError("old_password", "Old password is incorrect")])
    if len(new_password or "") < PASSWORD_MIN:
        raise ValidationError([FieldError(
            "new_password", f"Password must be at least {PASSWORD_MIN} characters long"
        )])
    if new_password == old_password:
        raise ValidationError([FieldError(
            "new_password", "New password must differ from the old one"
        )])

    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed: user_id=%s", user.id)
