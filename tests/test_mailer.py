import smtplib
from email.errors import HeaderParseError

from core.config import settings
from intake import mailer


FIELDS = {
    "name": "Rina <script>",
    "email": "rina@example.com",
    "phone": "08123456789",
    "wedding_date": None,
    "package": "luxury",
    "budget": "discuss",
    "message": "Hello <b>there</b>",
}


def test_message_is_escaped_and_kind_specific():
    msg = mailer.build_message(FIELDS, "inquiry")
    html = msg.get_payload()[1].get_payload(decode=True).decode()
    assert "&lt;b&gt;there&lt;/b&gt;" in html
    assert "Tidak disebutkan" in html
    assert "Budget" in html
    assert msg["Reply-To"] == "rina@example.com"

    contact_html = mailer.build_message(FIELDS, "contact").get_payload()[1].get_payload(decode=True).decode()
    assert "Budget" not in contact_html


def test_unconfigured_mail_is_skipped():
    assert mailer.send_submission_email(FIELDS, "contact") is False


def test_smtp_failure_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "email_user", "site@example.com")
    monkeypatch.setattr(settings, "email_pass", "app-password")

    def _boom(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "unavailable")

    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", _boom)
    assert mailer.send_submission_email(FIELDS, "contact") is False


def test_unbuildable_message_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "email_user", "site@example.com")
    monkeypatch.setattr(settings, "email_pass", "app-password")

    def _bad_header(fields, kind):
        raise HeaderParseError("header value contains a newline")

    def _must_not_connect(*args, **kwargs):
        raise AssertionError("SMTP should not be reached")

    monkeypatch.setattr(mailer, "build_message", _bad_header)
    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", _must_not_connect)
    assert mailer.send_submission_email(FIELDS, "contact") is False
