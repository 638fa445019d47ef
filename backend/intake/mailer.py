"""
Notification mail for new contact / inquiry submissions, sent through SMTP
over SSL with the credentials from settings.
"""

import smtplib
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape

from core.config import settings
from core.logger import logger

_SUBJECTS = {
    "contact": "Pesan Baru dari Website Royal Wedding by Ully Sjah",
    "inquiry": "Inquiry Paket Baru dari Website Royal Wedding by Ully Sjah",
}

_LABELS = [
    ("name", "Nama"),
    ("email", "Email"),
    ("phone", "Nomor Telepon"),
    ("wedding_date", "Tanggal Pernikahan"),
    ("package", "Paket"),
    ("guest_count", "Jumlah Tamu"),
    ("budget", "Budget"),
]


def _value(fields: dict, key: str) -> str:
    value = fields.get(key)
    if value is None or value == "":
        return "Tidak disebutkan"
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    return str(value)


def build_message(fields: dict, kind: str) -> MIMEMultipart:
    rows = [(label, _value(fields, key)) for key, label in _LABELS
            if key != "budget" or kind == "inquiry"]

    text_body = "\n".join(f"{label}: {value}" for label, value in rows)
    text_body += f"\n\nPesan:\n{fields.get('message', '')}\n"

    html_rows = "".join(
        f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in rows
    )
    html_body = (
        "<h2>Pesan Baru dari Website</h2>"
        f"{html_rows}"
        f"<p><strong>Pesan:</strong></p><p>{escape(fields.get('message', ''))}</p>"
        "<hr><p><small>Dikirim melalui website Royal Wedding by Ully Sjah</small></p>"
    )

    msg = MIMEMultipart("alternative")
    msg["Subject"] = _SUBJECTS[kind]
    msg["From"] = formataddr((fields.get("name", ""), settings.email_user))
    msg["To"] = settings.email_to
    msg["Reply-To"] = fields.get("email", "")
    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def send_submission_email(fields: dict, kind: str) -> bool:
    """Send the notification.  Returns False when mail is unconfigured or SMTP fails."""
    if not settings.email_user or not settings.email_pass:
        logger.warning("Mail not configured – %s notification not sent", kind)
        return False

    try:
        payload = build_message(fields, kind).as_string()
    except (MessageError, ValueError) as exc:
        logger.error("Could not build %s notification: %s", kind, exc)
        return False

    try:
        with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
            smtp.login(settings.email_user, settings.email_pass)
            smtp.sendmail(settings.email_user, [settings.email_to], payload)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Mail send failed for %s: %s", kind, exc)
        return False

    logger.info("%s notification sent to %s", kind.capitalize(), settings.email_to)
    return True
