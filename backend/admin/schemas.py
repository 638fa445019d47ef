# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the admin endpoints."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


# -- Requests --------------------------------------------------------------


class UpdateStatusRequest(BaseModel):
    id: int
    status: str
    notes: Optional[str] = None


# -- Responses -------------------------------------------------------------


class RecordRow(BaseModel):
    id: int
    kind: str
    name: str
    email: str
    phone: str
    wedding_date: Optional[datetime] = None
    days_until_wedding: Optional[int] = None
    package: Optional[str] = None
    guest_count: Optional[str] = None
    budget: Optional[str] = None
    message: str
    status: str
    priority: Optional[str] = None
    source: str
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    follow_up_due: bool = False
    submitted_at: datetime
    last_contacted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RecordListResponse(BaseModel):
    records: List[RecordRow]


class RecordUpdateResponse(BaseModel):
    success: bool
    record: RecordRow


class CurrentUser(BaseModel):
    id: int
    username: str
    email: str
    role: str


class DashboardResponse(BaseModel):
    user: CurrentUser
    counts: Dict[str, Dict[str, int]]
    totals: Dict[str, int]
    recent_contacts: List[RecordRow]
    recent_inquiries: List[RecordRow]
