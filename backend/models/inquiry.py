# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Inquiry ORM model – every customer submission, tagged by ``kind``.

``contact`` rows come from the short contact form, ``inquiry`` rows from the
package inquiry form.  They share one table and one validator; only the
allowed status values and a few optional fields differ.
"""

import math
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from core.clock import as_utc, utcnow
from database import Base

KINDS = ("contact", "inquiry")

PACKAGES = ("basic", "premium", "luxury", "custom")
BUDGETS = ("under-50jt", "50jt-100jt", "100jt-200jt", "above-200jt", "discuss")
PRIORITIES = ("low", "medium", "high", "urgent")

STATUSES_BY_KIND = {
    "contact": ("new", "contacted", "in-progress", "completed", "cancelled"),
    "inquiry": ("new", "contacted", "quoted", "booked", "completed", "cancelled"),
}


class Inquiry(Base):
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(16), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    wedding_date = Column(DateTime(timezone=True), nullable=True)
    package = Column(String(16), nullable=True)
    guest_count = Column(String(32), nullable=True)   # "50" or "50-100"
    budget = Column(String(16), nullable=True)        # inquiry only
    message = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="new", index=True)
    priority = Column(String(8), nullable=True)       # inquiry only
    source = Column(String(32), nullable=False, default="website")
    notes = Column(Text, nullable=True)
    follow_up_date = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    last_contacted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def allowed_statuses(self) -> tuple:
        return STATUSES_BY_KIND[self.kind]

    @property
    def days_until_wedding(self) -> Optional[int]:
        if self.wedding_date is None:
            return None
        delta = as_utc(self.wedding_date) - utcnow()
        return math.ceil(delta.total_seconds() / 86400)

    @property
    def follow_up_due(self) -> bool:
        return self.needs_follow_up()

    def needs_follow_up(self, now: Optional[datetime] = None) -> bool:
        if self.follow_up_date is None:
            return False
        return (now or utcnow()) >= as_utc(self.follow_up_date)
