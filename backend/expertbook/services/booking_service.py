# backend/expertbook/services/booking_service.py
"""
Booking Service

Turns a client's slot selection into sessions against a purchase.

The selection is never trusted: free slots are re-derived at
confirmation time, inside a per-(expert, date) critical section that
also covers the balance deduction, the session inserts and the commit.
A second booking for the same expert and date therefore always sees the
first one's sessions before it resolves availability.
"""

from datetime import date
import logging
import secrets
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.booking_lock import booking_lock, purchase_lock
from ..core.config import settings
from ..core.enums import SessionStatus
from ..core.exceptions import (
    ForbiddenException,
    InsufficientHoursException,
    NoAvailableSlotsException,
    NotFoundException,
    ValidationException,
)
from ..core.time_utils import date_key, slot_start
from ..models.purchase import Purchase
from ..models.session import BookedSession
from ..repositories.factory import RepositoryFactory
from .availability import AvailabilityService, TimeSlot
from .base import BaseService, Clock
from .session_status import derive_session_status

if TYPE_CHECKING:
    from ..repositories.purchase_repository import PurchaseRepository
    from ..repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


def as_time_slot(value: Any) -> TimeSlot:
    """
    Accept a TimeSlot, a (start, end) pair or any object with start/end.

    Raises:
        ValidationException: anything else, or non-integer bounds
    """
    if isinstance(value, TimeSlot):
        return value
    try:
        if isinstance(value, (tuple, list)):
            start, end = value
        elif isinstance(value, dict):
            start, end = value["start"], value["end"]
        else:
            start, end = value.start, value.end
        return TimeSlot(int(start), int(end))
    except (AttributeError, KeyError, TypeError, ValueError):
        raise ValidationException(
            "Slot must provide integer start and end minutes",
            code="INVALID_SLOT",
            details={"slot": repr(value)},
        )


class BookingService(BaseService):
    """Service layer for converting slot selections into sessions."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        availability_service: Optional[AvailabilityService] = None,
        purchase_repository: Optional["PurchaseRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.availability_service = availability_service or AvailabilityService(
            db, clock=self.clock
        )
        self.purchase_repository = (
            purchase_repository or RepositoryFactory.create_purchase_repository(db)
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    def _get_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.purchase_repository.get_by_id(purchase_id)
        if purchase is None:
            raise NotFoundException(
                f"Purchase {purchase_id} not found",
                code="PURCHASE_NOT_FOUND",
                details={"purchase_id": purchase_id},
            )
        return purchase

    def _meeting_link(self) -> str:
        token = secrets.token_hex(settings.meeting_link_token_length)[
            : settings.meeting_link_token_length
        ]
        return f"{settings.meeting_link_base_url.rstrip('/')}/{token}"

    @BaseService.measure_operation("book_slots")
    def book_slots(
        self,
        purchase_id: str,
        booking_date: date,
        requested_slots: Iterable[Any],
        user_id: Optional[str] = None,
    ) -> List[BookedSession]:
        """
        Book the requested slots against a purchase.

        Requested slots that are no longer free, or that have already
        started, are dropped silently; the rest are booked together.

        Raises:
            NotFoundException: unknown purchase
            ForbiddenException: ``user_id`` given and not the purchase owner
            NoAvailableSlotsException: none of the requested slots survive
            InsufficientHoursException: the survivors cost more than the balance
        """
        purchase = self._get_purchase(purchase_id)
        if user_id is not None and purchase.user_id != user_id:
            raise ForbiddenException(
                "Purchase does not belong to user",
                code="PURCHASE_NOT_OWNED",
                details={"purchase_id": purchase_id},
            )
        expert = self.availability_service.get_expert(purchase.expert_id)
        requested = sorted({as_time_slot(slot) for slot in requested_slots})
        day = date_key(booking_date)

        with booking_lock(expert.id, booking_date), purchase_lock(purchase_id):
            with self.transaction():
                purchase = self.purchase_repository.get_for_update(purchase_id)
                fresh = set(self.availability_service.free_slots_for(expert, booking_date))
                now = self.now()
                surviving = [
                    slot
                    for slot in requested
                    if slot in fresh and slot_start(booking_date, slot.start) > now
                ]
                if not surviving:
                    raise NoAvailableSlotsException(day, len(requested))

                needed_minutes = sum(slot.duration for slot in surviving)
                if needed_minutes > purchase.minutes_remaining:
                    raise InsufficientHoursException(needed_minutes, purchase.minutes_remaining)

                purchase.minutes_remaining = max(0, purchase.minutes_remaining - needed_minutes)
                created = [
                    self.session_repository.create(
                        user_id=purchase.user_id,
                        expert_id=expert.id,
                        purchase_id=purchase.id,
                        booking_date=booking_date,
                        start_min=slot.start,
                        end_min=slot.end,
                        meeting_link=self._meeting_link(),
                        created_at=now,
                    )
                    for slot in surviving
                ]

        logger.info(
            "Sessions booked",
            extra={
                "purchase_id": purchase_id,
                "expert_id": expert.id,
                "date": day,
                "requested": len(requested),
                "booked": len(created),
                "minutes_remaining": purchase.minutes_remaining,
            },
        )
        return created

    def status_of(self, session: BookedSession) -> SessionStatus:
        return derive_session_status(session, self.now())

    def get_session(self, session_id: str) -> BookedSession:
        session = self.session_repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException(
                f"Session {session_id} not found",
                code="SESSION_NOT_FOUND",
                details={"session_id": session_id},
            )
        return session

    def list_sessions(
        self,
        user_id: Optional[str] = None,
        expert_id: Optional[str] = None,
        status: Optional[SessionStatus] = None,
    ) -> List[BookedSession]:
        """Sessions ordered by date and start, optionally filtered by derived status."""
        sessions = self.session_repository.list_sessions(user_id=user_id, expert_id=expert_id)
        if status is None:
            return sessions
        now = self.now()
        return [s for s in sessions if derive_session_status(s, now) == status]
