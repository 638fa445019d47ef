# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Admin operations over submitted contacts and inquiries.

Each function takes the record ``kind`` explicitly; an id that belongs to the
other kind is treated as not found.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.clock import utcnow
from core.errors import InvalidStatusError, NotFoundError
from core.logger import logger
from models.inquiry import KINDS, STATUSES_BY_KIND, Inquiry

RECENT_LIMIT = 10


def get_record(db: Session, kind: str, record_id: int) -> Inquiry:
    record = (
        db.query(Inquiry)
        .filter(Inquiry.id == record_id, Inquiry.kind == kind)
        .first()
    )
    if record is None:
        raise NotFoundError(f"{kind.capitalize()} not found")
    return record


def list_records(db: Session, kind: str, status: Optional[str] = None,
                 limit: Optional[int] = None) -> List[Inquiry]:
    """Newest first, optionally filtered by status."""
    if status is not None and status not in STATUSES_BY_KIND[kind]:
        raise InvalidStatusError(status, STATUSES_BY_KIND[kind])
    q = db.query(Inquiry).filter(Inquiry.kind == kind)
    if status is not None:
        q = q.filter(Inquiry.status == status)
    q = q.order_by(Inquiry.submitted_at.desc(), Inquiry.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def update_status(db: Session, kind: str, record_id: int, new_status: str,
                  notes: Optional[str] = None, now: Optional[datetime] = None) -> Inquiry:
    """
    Move a record to *new_status*.  Moving to ``contacted`` stamps
    ``last_contacted_at``.
    """
    allowed = STATUSES_BY_KIND[kind]
    if new_status not in allowed:
        raise InvalidStatusError(new_status, allowed)

    record = get_record(db, kind, record_id)
    previous = record.status
    record.status = new_status
    if new_status == "contacted":
        record.last_contacted_at = now or utcnow()
    if notes is not None:
        record.notes = notes
    db.commit()
    db.refresh(record)

    logger.info("%s id=%s status %s -> %s", kind.capitalize(), record_id, previous, new_status)
    return record


def delete_record(db: Session, kind: str, record_id: int) -> None:
    """Hard delete.  There is no undo."""
    record = get_record(db, kind, record_id)
    db.delete(record)
    db.commit()
    logger.info("%s id=%s deleted", kind.capitalize(), record_id)


def dashboard_summary(db: Session) -> dict:
    rows = (
        db.query(Inquiry.kind, Inquiry.status, func.count(Inquiry.id))
        .group_by(Inquiry.kind, Inquiry.status)
        .all()
    )
    counts = {kind: {s: 0 for s in STATUSES_BY_KIND[kind]} for kind in KINDS}
    for kind, status, n in rows:
        if kind in counts:
            counts[kind][status] = n

    return {
        "counts": counts,
        "totals": {kind: sum(counts[kind].values()) for kind in KINDS},
        "recent_contacts": list_records(db, "contact", limit=RECENT_LIMIT),
        "recent_inquiries": list_records(db, "inquiry", limit=RECENT_LIMIT),
    }
