# backend/expertbook/repositories/factory.py
"""
Repository Factory for the expert booking engine

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import (
        AvailabilityOverrideRepository,
        AvailabilityWindowRepository,
    )
    from .billing_repository import ClientPaymentRepository, PayoutRepository
    from .expert_repository import ExpertRepository
    from .feedback_repository import FeedbackRepository
    from .purchase_repository import PurchaseRepository
    from .session_repository import SessionRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_expert_repository(db: Session) -> "ExpertRepository":
        """Create repository for expert reference data."""
        from .expert_repository import ExpertRepository

        return ExpertRepository(db)

    @staticmethod
    def create_override_repository(db: Session) -> "AvailabilityOverrideRepository":
        """Create repository for date overrides."""
        from .availability_repository import AvailabilityOverrideRepository

        return AvailabilityOverrideRepository(db)

    @staticmethod
    def create_window_repository(db: Session) -> "AvailabilityWindowRepository":
        """Create repository for explicit availability windows."""
        from .availability_repository import AvailabilityWindowRepository

        return AvailabilityWindowRepository(db)

    @staticmethod
    def create_purchase_repository(db: Session) -> "PurchaseRepository":
        """Create repository for hour packages."""
        from .purchase_repository import PurchaseRepository

        return PurchaseRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        """Create repository for booked sessions."""
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_payout_repository(db: Session) -> "PayoutRepository":
        """Create repository for expert payouts."""
        from .billing_repository import PayoutRepository

        return PayoutRepository(db)

    @staticmethod
    def create_client_payment_repository(db: Session) -> "ClientPaymentRepository":
        """Create repository for client payments."""
        from .billing_repository import ClientPaymentRepository

        return ClientPaymentRepository(db)

    @staticmethod
    def create_feedback_repository(db: Session) -> "FeedbackRepository":
        """Create repository for feedback."""
        from .feedback_repository import FeedbackRepository

        return FeedbackRepository(db)
