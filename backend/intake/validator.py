"""
Validation for contact and inquiry submissions.

Every rule runs; the caller gets the full list of violations rather than the
first one.  The checks touch nothing but the payload and the supplied clock.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional

from core.clock import utcnow
from core.errors import FieldError, ValidationError
from models.inquiry import BUDGETS, KINDS, PACKAGES

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")
_GUEST_COUNT_RE = re.compile(r"^\d+(-\d+)?$")
# C0 controls and DEL; a name ends up in a mail header
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

# Upper bounds follow the column widths in models/inquiry.py
NAME_MIN, NAME_MAX = 2, 100
EMAIL_MAX = 255
PHONE_MAX = 32
GUEST_COUNT_MAX = 32
MESSAGE_MIN, MESSAGE_MAX = 10, 1000

# Accepted spellings per field; the first name is the normalized key.
_ALIASES = {
    "name": ("name", "nama"),
    "email": ("email",),
    "phone": ("phone",),
    "message": ("message",),
    "wedding_date": ("wedding_date", "weddingDate"),
    "package": ("package",),
    "guest_count": ("guest_count", "guestCount"),
    "budget": ("budget",),
}


def _get(payload: Mapping[str, Any], field: str) -> str:
    for key in _ALIASES[field]:
        value = payload.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def parse_wedding_date(raw: str) -> Optional[datetime]:
    """
    ``YYYY-MM-DD`` or a full ISO-8601 timestamp.  Dates mean midnight UTC,
    naive timestamps are taken as UTC.  Returns None when unparseable.
    """
    try:
        if len(raw) == 10:
            d = date.fromisoformat(raw)
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def collect_errors(payload: Mapping[str, Any], kind: str = "contact",
                   now: Optional[datetime] = None) -> List[FieldError]:
    now = now or utcnow()
    errors = []

    name = _get(payload, "name")
    if len(name) < NAME_MIN:
        errors.append(FieldError("name", f"Name must be at least {NAME_MIN} characters"))
    elif len(name) > NAME_MAX:
        errors.append(FieldError("name", f"Name cannot exceed {NAME_MAX} characters"))
    elif _CONTROL_RE.search(name):
        errors.append(FieldError("name", "Name contains invalid characters"))

    email = _get(payload, "email")
    if not _EMAIL_RE.fullmatch(email):
        errors.append(FieldError("email", "Please enter a valid email"))
    elif len(email) > EMAIL_MAX:
        errors.append(FieldError("email", f"Email cannot exceed {EMAIL_MAX} characters"))

    phone = _get(payload, "phone")
    if not _PHONE_RE.fullmatch(phone):
        errors.append(FieldError("phone", "Please enter a valid phone number"))
    elif len(phone) > PHONE_MAX:
        errors.append(FieldError("phone", f"Phone cannot exceed {PHONE_MAX} characters"))

    message = _get(payload, "message")
    if not MESSAGE_MIN <= len(message) <= MESSAGE_MAX:
        errors.append(FieldError(
            "message", f"Message must be between {MESSAGE_MIN} and {MESSAGE_MAX} characters"
        ))

    raw_date = _get(payload, "wedding_date")
    if raw_date:
        when = parse_wedding_date(raw_date)
        if when is None:
            errors.append(FieldError("wedding_date", "Wedding date is not a valid date"))
        elif when <= now:
            errors.append(FieldError("wedding_date", "Wedding date must be in the future"))

    package = _get(payload, "package")
    if package and package not in PACKAGES:
        errors.append(FieldError(
            "package", f"Package must be one of: {', '.join(PACKAGES)}"
        ))

    guest_count = _get(payload, "guest_count")
    if guest_count and not _GUEST_COUNT_RE.match(guest_count):
        errors.append(FieldError(
            "guest_count", 'Guest count must be a number or range (e.g., "50" or "50-100")'
        ))
    elif len(guest_count) > GUEST_COUNT_MAX:
        errors.append(FieldError(
            "guest_count", f"Guest count cannot exceed {GUEST_COUNT_MAX} characters"
        ))

    budget = _get(payload, "budget")
    if kind == "inquiry" and budget and budget not in BUDGETS:
        errors.append(FieldError("budget", f"Budget must be one of: {', '.join(BUDGETS)}"))

    return errors


def validate_submission(payload: Mapping[str, Any], kind: str = "contact",
                        now: Optional[datetime] = None) -> dict:
    """
    Return the normalized fields ready for an ``Inquiry`` row, or raise
    ``ValidationError`` carrying every violation found.
    """
    if kind not in KINDS:
        raise ValueError(f"unknown submission kind: {kind!r}")

    errors = collect_errors(payload, kind, now)
    if errors:
        raise ValidationError(errors)

    raw_date = _get(payload, "wedding_date")
    fields = {
        "kind": kind,
        "name": _get(payload, "name"),
        "email": _get(payload, "email").lower(),
        "phone": _get(payload, "phone"),
        "message": _get(payload, "message"),
        "wedding_date": parse_wedding_date(raw_date) if raw_date else None,
        "package": _get(payload, "package") or None,
        "guest_count": _get(payload, "guest_count") or None,
    }
    if kind == "inquiry":
        fields["budget"] = _get(payload, "budget") or "discuss"
        fields["priority"] = "medium"
    return fields
