# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""SessionRecord ORM model – server-side session state keyed by an opaque id."""

from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base
from models.user import ROLES


class SessionRecord(Base):
    __tablename__ = "sessions"

    # secrets.token_urlsafe(32) – the only thing the client ever holds
    id = Column(String(64), primary_key=True)
    # NULL for anonymous sessions that only carry return_to
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    username = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(Enum(*ROLES, name="session_role"), nullable=True)
    is_authenticated = Column(Boolean, nullable=False, default=False)
    return_to = Column(String(2048), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    touched_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
