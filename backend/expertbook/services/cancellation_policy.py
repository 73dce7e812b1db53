"""Cancellation window evaluation for booked sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from ..core.config import settings
from .session_status import session_start


@dataclass(frozen=True)
class CancellationDecision:
    allowed: bool
    hours_until_start: float
    required_hours: int
    reason: Optional[str] = None

    def to_payload(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "hours_until_start": round(self.hours_until_start, 2),
            "required_hours": self.required_hours,
            "reason": self.reason,
        }


class CancellationPolicy:
    """Either party may cancel until ``notice_hours`` before the session starts."""

    def __init__(self, notice_hours: Optional[int] = None):
        if notice_hours is None:
            notice_hours = settings.cancellation_notice_hours
        self.notice_hours = notice_hours

    def evaluate(self, session: Any, now: datetime) -> CancellationDecision:
        until_start = session_start(session) - now
        hours_until_start = until_start.total_seconds() / 3600

        if getattr(session, "cancelled_at", None) is not None:
            return CancellationDecision(
                allowed=False,
                hours_until_start=hours_until_start,
                required_hours=self.notice_hours,
                reason="Session is already cancelled",
            )

        if until_start < timedelta(hours=self.notice_hours):
            return CancellationDecision(
                allowed=False,
                hours_until_start=hours_until_start,
                required_hours=self.notice_hours,
                reason=f"Less than {self.notice_hours} hours before start",
            )

        return CancellationDecision(
            allowed=True,
            hours_until_start=hours_until_start,
            required_hours=self.notice_hours,
        )

    def can_cancel(self, session: Any, now: datetime) -> bool:
        return self.evaluate(session, now).allowed
