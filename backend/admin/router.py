# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – dashboard, inquiry / contact review, status changes,
deletion and spreadsheet export.

Every endpoint in this router is guarded by ``require_admin`` (which runs
``require_auth`` first).  An anonymous visitor is redirected to the login
page; a logged-in account without an admin role gets 403.
"""

import io
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy.orm import Session

from admin.schemas import (
    CurrentUser,
    DashboardResponse,
    RecordListResponse,
    RecordRow,
    RecordUpdateResponse,
    UpdateStatusRequest,
)
from admin.workflow import (
    dashboard_summary,
    delete_record,
    get_record,
    list_records,
    update_status,
)
from core.guards import require_admin
from core.sessions import SessionContext
from database import get_db

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# GET /admin  – dashboard
# ---------------------------------------------------------------------------


@router.get("", response_model=DashboardResponse)
def dashboard(
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Counts per status plus the ten newest contacts and inquiries."""
    user = CurrentUser(id=ctx.user_id, username=ctx.username, email=ctx.email, role=ctx.role)
    return DashboardResponse(user=user, **dashboard_summary(db))


# ---------------------------------------------------------------------------
# GET /admin/inquiries
# ---------------------------------------------------------------------------


@router.get("/inquiries", response_model=RecordListResponse)
def inquiries(
    status: Optional[str] = Query(None, description="Only inquiries in this status"),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return RecordListResponse(records=list_records(db, "inquiry", status=status))


# ---------------------------------------------------------------------------
# GET /admin/inquiries/export  – download inquiries as Excel
# ---------------------------------------------------------------------------

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="B8860B", end_color="B8860B", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_EXPORT_HEADERS = [
    "ID", "Submitted", "Name", "Email", "Phone", "Wedding Date",
    "Package", "Budget", "Status", "Priority", "Last Contacted", "Message", "Notes",
]
_EXPORT_WIDTHS = [8, 20, 24, 28, 18, 14, 12, 14, 12, 10, 20, 50, 30]


def _fmt(value, pattern="%Y-%m-%d %H:%M:%S") -> str:
    return value.strftime(pattern) if value else ""


@router.get("/inquiries/export")
def export_inquiries(
    status: Optional[str] = Query(None),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Export inquiries (optionally one status) as an .xlsx workbook."""
    rows = list_records(db, "inquiry", status=status)

    wb = Workbook()
    ws = wb.active
    ws.title = "Inquiries"

    ws.append(_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    for row in rows:
        ws.append([
            row.id,
            _fmt(row.submitted_at),
            row.name,
            row.email,
            row.phone,
            _fmt(row.wedding_date, "%Y-%m-%d"),
            row.package or "",
            row.budget or "",
            row.status,
            row.priority or "",
            _fmt(row.last_contacted_at),
            row.message,
            row.notes or "",
        ])
        row_idx = ws.max_row
        for col_idx in range(1, len(_EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _THIN_BORDER

    for col_idx, width in enumerate(_EXPORT_WIDTHS, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="inquiries.xlsx"'},
    )


# ---------------------------------------------------------------------------
# POST /admin/update-status, POST /admin/update-inquiry-status
# ---------------------------------------------------------------------------


@router.post("/update-status", response_model=RecordUpdateResponse)
def update_contact_status(
    body: UpdateStatusRequest,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    record = update_status(db, "contact", body.id, body.status, notes=body.notes)
    return RecordUpdateResponse(success=True, record=record)


@router.post("/update-inquiry-status", response_model=RecordUpdateResponse)
def update_inquiry_status(
    body: UpdateStatusRequest,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    record = update_status(db, "inquiry", body.id, body.status, notes=body.notes)
    return RecordUpdateResponse(success=True, record=record)


# ---------------------------------------------------------------------------
# GET/DELETE /admin/contact/{id}, /admin/inquiry/{id}
# ---------------------------------------------------------------------------


@router.get("/contact/{record_id}", response_model=RecordRow)
def contact_detail(
    record_id: int,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_record(db, "contact", record_id)


@router.get("/inquiry/{record_id}", response_model=RecordRow)
def inquiry_detail(
    record_id: int,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_record(db, "inquiry", record_id)


@router.delete("/contact/{record_id}")
def contact_delete(
    record_id: int,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Permanently delete a contact submission."""
    delete_record(db, "contact", record_id)
    return {"success": True, "detail": "Contact deleted"}


@router.delete("/inquiry/{record_id}")
def inquiry_delete(
    record_id: int,
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Permanently delete an inquiry."""
    delete_record(db, "inquiry", record_id)
    return {"success": True, "detail": "Inquiry deleted"}
