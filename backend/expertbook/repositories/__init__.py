# backend/expertbook/repositories/__init__.py
"""
Repository layer for the expert booking engine.

Repositories own data access only; services own transactions.
"""

from .availability_repository import AvailabilityOverrideRepository, AvailabilityWindowRepository
from .base_repository import BaseRepository
from .billing_repository import ClientPaymentRepository, PayoutRepository
from .expert_repository import ExpertRepository
from .factory import RepositoryFactory
from .feedback_repository import FeedbackRepository
from .purchase_repository import PurchaseRepository
from .session_repository import SessionRepository

__all__ = [
    "AvailabilityOverrideRepository",
    "AvailabilityWindowRepository",
    "BaseRepository",
    "ClientPaymentRepository",
    "ExpertRepository",
    "FeedbackRepository",
    "PayoutRepository",
    "PurchaseRepository",
    "RepositoryFactory",
    "SessionRepository",
]
