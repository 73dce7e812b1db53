# backend/expertbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. Every service shares
the request's database session and wall clock; tests override
``get_db`` and ``get_clock`` on the app.
"""

from datetime import datetime

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.availability import AvailabilityService
from ...services.base import Clock
from ...services.billing_service import BillingService
from ...services.booking_service import BookingService
from ...services.cancellation_service import CancellationService
from ...services.feedback_service import FeedbackService
from ...services.purchase_service import PurchaseService


def get_clock() -> Clock:
    """Wall clock used by time-dependent rules."""
    return datetime.now


def get_availability_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> AvailabilityService:
    return AvailabilityService(db, clock=clock)


def get_purchase_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> PurchaseService:
    return PurchaseService(db, clock=clock)


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BookingService:
    """
    Get booking service instance.

    Shares the availability service so slot revalidation reads through the
    same session.
    """
    return BookingService(db, clock=clock, availability_service=availability_service)


def get_cancellation_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> CancellationService:
    return CancellationService(db, clock=clock)


def get_billing_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> BillingService:
    return BillingService(db, clock=clock)


def get_feedback_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> FeedbackService:
    return FeedbackService(db, clock=clock)
