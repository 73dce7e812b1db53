"""FastAPI dependency providers."""

from .services import (
    get_availability_service,
    get_billing_service,
    get_booking_service,
    get_cancellation_service,
    get_clock,
    get_feedback_service,
    get_purchase_service,
)

__all__ = [
    "get_availability_service",
    "get_billing_service",
    "get_booking_service",
    "get_cancellation_service",
    "get_clock",
    "get_feedback_service",
    "get_purchase_service",
]
