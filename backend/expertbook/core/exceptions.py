# backend/expertbook/core/exceptions.py
"""
Domain-specific exceptions for the expert booking engine.

Every user-recoverable failure carries a stable ``code`` (the error kind)
so the presentation layer can re-prompt with corrected input. The
exceptions also know how to turn themselves into HTTP errors for the
API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when an actor lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class InvalidTimeFormatException(ValidationException):
    """Raised when a clock string or date key cannot be parsed."""

    def __init__(self, value: object, expected: str = "HH:MM"):
        super().__init__(
            message=f"Invalid time value {value!r}, expected {expected}",
            code="INVALID_TIME_FORMAT",
            details={"value": str(value), "expected": expected},
        )


class NoAvailableSlotsException(ConflictException):
    """Raised when none of the requested slots are still free."""

    def __init__(self, booking_date: str, requested: int):
        super().__init__(
            message="Selected slots are no longer available",
            code="NO_AVAILABLE_SLOTS",
            details={"date": booking_date, "requested": requested},
        )


class InsufficientHoursException(BusinessRuleException):
    """Raised when a booking would overdraw a purchase."""

    def __init__(self, needed_minutes: int, remaining_minutes: int):
        super().__init__(
            message="Not enough hours remaining to book all selected slots",
            code="INSUFFICIENT_HOURS",
            details={
                "needed_hours": round(needed_minutes / 60, 2),
                "remaining_hours": round(remaining_minutes / 60, 2),
            },
        )


class CancellationWindowClosedException(BusinessRuleException):
    """Raised when a session is cancelled too close to its start."""

    def __init__(self, required_hours: int, hours_until_start: float):
        super().__init__(
            message=f"Sessions can only be cancelled up to {required_hours} hours before start",
            code="CANCELLATION_WINDOW_CLOSED",
            details={
                "required_hours": required_hours,
                "hours_until_start": round(hours_until_start, 2),
            },
        )


class MissingReasonException(ValidationException):
    """Raised when a cancellation has no reason."""

    def __init__(self) -> None:
        super().__init__(
            message="Please provide a cancellation reason",
            code="MISSING_REASON",
        )


class MissingRatingException(ValidationException):
    """Raised when feedback is submitted without a star rating."""

    def __init__(self) -> None:
        super().__init__(
            message="Please select a star rating",
            code="MISSING_RATING",
        )


class DuplicateFeedbackException(ConflictException):
    """Raised when feedback already exists for a purchase."""

    def __init__(self, purchase_id: str):
        super().__init__(
            message="Feedback already submitted for this package",
            code="DUPLICATE_FEEDBACK",
            details={"purchase_id": purchase_id},
        )


class FeedbackNotAllowedException(BusinessRuleException):
    """Raised when a purchase is not yet ready for feedback."""

    def __init__(self, purchase_id: str, state: str):
        super().__init__(
            message="Feedback is allowed once the package is used up and all sessions are over",
            code="FEEDBACK_NOT_ELIGIBLE",
            details={"purchase_id": purchase_id, "state": state},
        )


class OverlappingWindowException(ConflictException):
    """Raised when an availability window clashes with a window or a booked session."""

    def __init__(self, specific_date: str, new_range: str, conflicting_range: str, source: str):
        super().__init__(
            message=(
                f"Overlapping window on {specific_date}: {new_range} conflicts with "
                f"{source} {conflicting_range}"
            ),
            code="OVERLAPPING_WINDOW",
            details={
                "date": specific_date,
                "new_window": new_range,
                "conflicting": conflicting_range,
                "source": source,
            },
        )


class WindowTooShortException(ValidationException):
    """Raised when an availability window is shorter than one slot."""

    def __init__(self, minimum_minutes: int, provided_minutes: int):
        super().__init__(
            message=f"Minimum window is {minimum_minutes} minutes",
            code="WINDOW_TOO_SHORT",
            details={
                "minimum_minutes": minimum_minutes,
                "provided_minutes": provided_minutes,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
