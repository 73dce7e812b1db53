# backend/expertbook/schemas/booking.py
"""
Purchase and session schemas.

Balances are stored in minutes; ``hours_remaining`` is included for
display only.
"""

import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.enums import SessionStatus
from ..core.time_utils import to_clock_string
from .base import Money, StandardizedModel, StrictRequestModel


class PurchaseCreate(StrictRequestModel):
    user_id: str = Field(..., min_length=1)
    expert_id: str = Field(..., min_length=1)
    hours: int


class PurchaseResponse(StandardizedModel):
    id: str
    user_id: str
    expert_id: str
    package_hours: int
    minutes_remaining: int
    hours_remaining: float
    amount: Money
    created_at: datetime.datetime


class SlotSelection(StrictRequestModel):
    start_min: int = Field(..., ge=0, le=1440)
    end_min: int = Field(..., ge=0, le=1440)

    @model_validator(mode="after")
    def _check_order(self) -> "SlotSelection":
        if self.end_min <= self.start_min:
            raise ValueError("end_min must be after start_min")
        return self


class BatchBookRequest(StrictRequestModel):
    """Slots picked by a client for one date against one purchase."""

    purchase_id: str
    date: datetime.date
    slots: List[SlotSelection] = Field(..., min_length=1)


class SessionResponse(StandardizedModel):
    id: str
    user_id: str
    expert_id: str
    purchase_id: str
    booking_date: datetime.date
    start_min: int
    end_min: int
    start: str
    end: str
    meeting_link: Optional[str] = None
    status: SessionStatus
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime.datetime] = None

    @classmethod
    def from_session(cls, session, status: SessionStatus) -> "SessionResponse":
        return cls(
            id=session.id,
            user_id=session.user_id,
            expert_id=session.expert_id,
            purchase_id=session.purchase_id,
            booking_date=session.booking_date,
            start_min=session.start_min,
            end_min=session.end_min,
            start=to_clock_string(session.start_min),
            end=to_clock_string(session.end_min),
            meeting_link=session.meeting_link,
            status=status,
            cancel_reason=session.cancel_reason,
            cancelled_by=session.cancelled_by,
            cancelled_at=session.cancelled_at,
        )


class BatchBookResponse(StandardizedModel):
    sessions: List[SessionResponse]
    booked_hours: float
    hours_remaining: float


class CancelRequest(StrictRequestModel):
    actor_id: str = Field(..., min_length=1)
    reason: Optional[str] = None
