# backend/expertbook/core/enums.py
"""
Core enums for the expert booking engine.

These enums are used throughout the application for type safety and
consistency, and serialize as their lowercase string values.
"""

from enum import Enum


class ExpertDomain(str, Enum):
    """Consulting domains an expert can serve."""

    CYBER = "cyber"
    TAX = "tax"
    CORE = "core"
    PROCURE = "procure"
    REG = "reg"


class SessionStatus(str, Enum):
    """
    Status of a booked session as seen by callers.

    Only CANCELLED is persisted; UPCOMING and COMPLETED are derived from
    the wall clock on every read.
    """

    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FeedbackState(str, Enum):
    """Where a purchase stands in the feedback lifecycle."""

    HAS_UPCOMING_SESSIONS = "has_upcoming_sessions"
    AWAITING_COMPLETION = "awaiting_completion"
    ELIGIBLE = "eligible_for_feedback"
    SUBMITTED = "feedback_submitted"
