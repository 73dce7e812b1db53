"""SQLAlchemy models, imported here so Base.metadata sees every table."""

from .availability import AvailabilityOverride, AvailabilityWindow, AvailabilityWindowSet
from .billing import ClientPayment, Payout
from .expert import Expert
from .feedback import Feedback
from .purchase import Purchase
from .session import BookedSession

__all__ = [
    "AvailabilityOverride",
    "AvailabilityWindow",
    "AvailabilityWindowSet",
    "BookedSession",
    "ClientPayment",
    "Expert",
    "Feedback",
    "Payout",
    "Purchase",
]
