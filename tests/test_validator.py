from datetime import datetime, timedelta, timezone

import pytest

from core.errors import ValidationError
from intake.validator import collect_errors, parse_wedding_date, validate_submission

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _payload(**overrides):
    payload = {
        "name": "Siti Rahma",
        "email": "Siti@Example.COM",
        "phone": "+62 812-3456-7890",
        "message": "We would like to plan a wedding next year.",
    }
    payload.update(overrides)
    return payload


def _fields(errors):
    return {e.field for e in errors}


def test_valid_payload_has_no_errors_and_lowercases_email():
    assert collect_errors(_payload(), now=NOW) == []
    fields = validate_submission(_payload(), now=NOW)
    assert fields["email"] == "siti@example.com"
    assert fields["kind"] == "contact"
    assert fields["wedding_date"] is None


def test_values_are_trimmed():
    fields = validate_submission(_payload(name="  Siti  ", message="   hello there world  "), now=NOW)
    assert fields["name"] == "Siti"
    assert fields["message"] == "hello there world"


def test_missing_message_is_reported():
    payload = _payload()
    del payload["message"]
    assert "message" in _fields(collect_errors(payload, now=NOW))


def test_all_violations_are_collected():
    errors = collect_errors({"name": "J", "email": "nope", "phone": "12", "message": ""}, now=NOW)
    assert _fields(errors) == {"name", "email", "phone", "message"}


def test_validate_raises_with_every_error():
    with pytest.raises(ValidationError) as info:
        validate_submission({}, now=NOW)
    assert _fields(info.value.errors) == {"name", "email", "phone", "message"}


@pytest.mark.parametrize("message, ok", [
    ("x" * 9, False),
    ("x" * 10, True),
    ("x" * 1000, True),
    ("x" * 1001, False),
    ("   short   ", False),
])
def test_message_length_bounds(message, ok):
    assert ("message" not in _fields(collect_errors(_payload(message=message), now=NOW))) is ok


@pytest.mark.parametrize("phone, ok", [
    ("08123456789", True),
    ("+62 (812) 345-678", True),
    ("12345", False),
    ("0812abc4567", False),
])
def test_phone_pattern(phone, ok):
    assert ("phone" not in _fields(collect_errors(_payload(phone=phone), now=NOW))) is ok


def test_wedding_date_yesterday_rejected_tomorrow_accepted():
    yesterday = (NOW - timedelta(days=1)).date().isoformat()
    tomorrow = (NOW + timedelta(days=1)).date().isoformat()

    assert "wedding_date" in _fields(collect_errors(_payload(weddingDate=yesterday), now=NOW))
    assert collect_errors(_payload(weddingDate=tomorrow), now=NOW) == []


def test_wedding_date_equal_to_now_is_rejected():
    errors = collect_errors(_payload(wedding_date=NOW.isoformat()), now=NOW)
    assert "wedding_date" in _fields(errors)


def test_wedding_date_garbage_rejected():
    errors = collect_errors(_payload(wedding_date="next spring"), now=NOW)
    assert [e.message for e in errors] == ["Wedding date is not a valid date"]


def test_parse_wedding_date_forms():
    assert parse_wedding_date("2027-01-02") == datetime(2027, 1, 2, tzinfo=timezone.utc)
    assert parse_wedding_date("2027-01-02T10:00:00Z") == datetime(2027, 1, 2, 10, tzinfo=timezone.utc)
    assert parse_wedding_date("2027-01-02T10:00:00").tzinfo is not None


def test_package_must_be_known():
    assert "package" in _fields(collect_errors(_payload(package="gold"), now=NOW))
    assert collect_errors(_payload(package="luxury"), now=NOW) == []


def test_guest_count_number_or_range():
    assert collect_errors(_payload(guestCount="50-100"), now=NOW) == []
    assert "guest_count" in _fields(collect_errors(_payload(guestCount="lots"), now=NOW))


def test_inquiry_defaults_and_budget():
    fields = validate_submission(_payload(nama="Budi Santoso", name=None), kind="inquiry", now=NOW)
    assert fields["name"] == "Budi Santoso"
    assert fields["budget"] == "discuss"
    assert fields["priority"] == "medium"

    errors = collect_errors(_payload(budget="1 milyar"), kind="inquiry", now=NOW)
    assert "budget" in _fields(errors)
    # contact submissions ignore budget
    assert collect_errors(_payload(budget="1 milyar"), kind="contact", now=NOW) == []


def test_unknown_kind_is_a_programming_error():
    with pytest.raises(ValueError):
        validate_submission(_payload(), kind="newsletter", now=NOW)


@pytest.mark.parametrize("name", ["Siti\r\nBcc: x@evil.test", "Siti\nRahma", "Siti\x00"])
def test_name_with_control_characters_rejected(name):
    errors = collect_errors(_payload(name=name), now=NOW)
    assert [e.message for e in errors] == ["Name contains invalid characters"]


@pytest.mark.parametrize("phone, ok", [
    ("0" * 32, True),
    ("0" * 33, False),
])
def test_phone_fits_its_column(phone, ok):
    assert ("phone" not in _fields(collect_errors(_payload(phone=phone), now=NOW))) is ok


@pytest.mark.parametrize("guest_count, ok", [
    ("1" * 32, True),
    ("1" * 33, False),
    ("1" * 16 + "-" + "2" * 16, False),
])
def test_guest_count_fits_its_column(guest_count, ok):
    errors = collect_errors(_payload(guest_count=guest_count), now=NOW)
    assert ("guest_count" not in _fields(errors)) is ok


@pytest.mark.parametrize("local_len, ok", [
    (243, True),   # 243 + len("@example.com") == 255
    (244, False),
])
def test_email_fits_its_column(local_len, ok):
    email = "a" * local_len + "@example.com"
    assert ("email" not in _fields(collect_errors(_payload(email=email), now=NOW))) is ok
