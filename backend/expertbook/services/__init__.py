"""
Service layer for the expert booking engine.

Services own business rules and transaction boundaries; repositories
underneath them only read and flush.
"""

from .availability import AvailabilityService
from .base import BaseService
from .billing_service import BillingService
from .booking_service import BookingService
from .cancellation_policy import CancellationPolicy
from .cancellation_service import CancellationService
from .feedback_service import FeedbackService
from .purchase_service import PurchaseService
from .session_status import derive_session_status
from .snapshot_service import SnapshotService

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BillingService",
    "BookingService",
    "CancellationPolicy",
    "CancellationService",
    "FeedbackService",
    "PurchaseService",
    "SnapshotService",
    "derive_session_status",
]
