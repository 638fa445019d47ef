# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Public endpoints – landing page and the two submission forms.

These stay up while the database is down: a submission that cannot be
stored is still mailed, and only when both fail does the visitor see an
error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import FieldError, ValidationError
from core.logger import logger
from core.pages import render
from database import get_db, store_status
from intake.mailer import send_submission_email
from intake.validator import validate_submission
from models.inquiry import Inquiry, PACKAGES

router = APIRouter(tags=["public"])

_THANKS = "Pesan berhasil dikirim! Kami akan segera menghubungi Anda."
_FAILED = "Gagal mengirim pesan. Silakan coba lagi atau hubungi kami langsung."


async def read_payload(request: Request) -> Optional[dict]:
    """
    Accept either a JSON object or a urlencoded / multipart form.  A body
    that is not valid JSON comes back as None.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _persist(db: Session, fields: dict):
    """Store the submission; returns the new id or None when the store is unavailable."""
    if not store_status.check():
        return None
    record = Inquiry(status="new", **fields)
    db.add(record)
    try:
        db.commit()
    except OperationalError:
        db.rollback()
        store_status.mark_down()
        return None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not store %s submission", fields["kind"])
        return None
    return record.id


def _submit(kind: str, payload: Optional[dict], db: Session):
    try:
        if payload is None:
            raise ValidationError([FieldError("body", "Malformed JSON body")])
        fields = validate_submission(payload, kind)
    except ValidationError as exc:
        logger.info("Rejected %s submission: %s", kind, ", ".join(e.field for e in exc.errors))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": exc.detail,
                "errors": [e.as_dict() for e in exc.errors],
            },
        )

    record_id = _persist(db, fields)
    mailed = send_submission_email(fields, kind)

    if record_id is None and not mailed:
        logger.error("%s submission lost: neither stored nor mailed", kind.capitalize())
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": _FAILED},
        )

    logger.info("%s submission accepted: id=%s mailed=%s", kind.capitalize(), record_id, mailed)
    return {"success": True, "message": _THANKS, "id": record_id}


# ---------------------------------------------------------------------------
# GET /
# ---------------------------------------------------------------------------


@router.get("/")
def index(request: Request):
    return render(request, "index.html", {"packages": PACKAGES})


# ---------------------------------------------------------------------------
# POST /contact, POST /inquiry
# ---------------------------------------------------------------------------


@router.post("/contact")
def submit_contact(payload: Optional[dict] = Depends(read_payload), db: Session = Depends(get_db)):
    return _submit("contact", payload, db)


@router.post("/inquiry")
def submit_inquiry(payload: Optional[dict] = Depends(read_payload), db: Session = Depends(get_db)):
    return _submit("inquiry", payload, db)
