# backend/expertbook/models/session.py
"""
Booked consulting sessions.

A session is persisted as either scheduled or cancelled (cancelled iff
``cancelled_at`` is set). Whether a scheduled session is upcoming or
completed is never stored; it is derived from the clock on every read
(see ``services.session_status``).
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class BookedSession(Base):
    """One 30-minute slot redeemed against a purchase."""

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, index=True)
    expert_id = Column(String(26), ForeignKey("experts.id"), nullable=False)
    purchase_id = Column(String(26), ForeignKey("purchases.id"), nullable=False, index=True)

    booking_date = Column(Date, nullable=False, index=True)
    start_min = Column(Integer, nullable=False)
    end_min = Column(Integer, nullable=False)
    meeting_link = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    # Cancellation tracking (terminal)
    cancel_reason = Column(Text, nullable=True)
    cancelled_by = Column(String(26), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    purchase = relationship("Purchase", back_populates="sessions")

    __table_args__ = (
        CheckConstraint("end_min > start_min", name="ck_sessions_time_order"),
        CheckConstraint("start_min >= 0 AND end_min <= 1440", name="ck_sessions_day_bounds"),
        Index("idx_sessions_expert_date", "expert_id", "booking_date"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None

    @property
    def duration_minutes(self) -> int:
        return int(self.end_min) - int(self.start_min)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "scheduled"
        return f"<BookedSession {self.id} {self.booking_date} {self.start_min}-{self.end_min} {state}>"
