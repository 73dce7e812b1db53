# backend/expertbook/services/session_status.py
"""
Session status derivation.

Only cancellation is stored. Whether a scheduled session is upcoming or
completed is a pure function of its start instant and the wall clock, so
it is recomputed on every read and can never go stale.
"""

from datetime import datetime
from typing import Any

from ..core.enums import SessionStatus
from ..core.time_utils import slot_start


def session_start(session: Any) -> datetime:
    """Naive local datetime at which the session begins."""
    return slot_start(session.booking_date, int(session.start_min))


def derive_session_status(session: Any, now: datetime) -> SessionStatus:
    if getattr(session, "cancelled_at", None) is not None:
        return SessionStatus.CANCELLED
    if session_start(session) > now:
        return SessionStatus.UPCOMING
    return SessionStatus.COMPLETED
