# backend/expertbook/services/availability/availability_service.py
"""
Availability Service

Loads an expert's availability layers from the record store, resolves
free slots, and manages the per-date layers an expert controls:

- Explicit windows (add, remove one, clear a date)
- Date overrides (set/replace, clear, list)

Window creation is validated against the other windows of the date and
against booked sessions, under the same per-(expert, date) lock that
bookings take, so a window can never be declared over a session that is
being booked at the same moment.
"""

from datetime import date
import logging
from typing import TYPE_CHECKING, List, Optional, Union

from sqlalchemy.orm import Session

from ...core.booking_lock import booking_lock
from ...core.constants import SLOT_MINUTES
from ...core.exceptions import (
    NotFoundException,
    OverlappingWindowException,
    ValidationException,
    WindowTooShortException,
)
from ...core.time_utils import date_key, format_range, overlaps, to_minutes
from ...models.availability import AvailabilityOverride
from ...models.expert import Expert
from ...repositories.factory import RepositoryFactory
from ..base import BaseService, Clock
from .resolver import TimeSlot, free_slots

if TYPE_CHECKING:
    from ...repositories.availability_repository import (
        AvailabilityOverrideRepository,
        AvailabilityWindowRepository,
    )
    from ...repositories.expert_repository import ExpertRepository
    from ...repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)

ClockValue = Union[str, int]


def as_minutes(value: ClockValue) -> int:
    """Accept either "HH:MM" or a minute-of-day integer."""
    if isinstance(value, str):
        return to_minutes(value)
    return int(value)


class AvailabilityService(BaseService):
    """Service layer for slot resolution and expert-managed availability."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        expert_repository: Optional["ExpertRepository"] = None,
        override_repository: Optional["AvailabilityOverrideRepository"] = None,
        window_repository: Optional["AvailabilityWindowRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.expert_repository = (
            expert_repository or RepositoryFactory.create_expert_repository(db)
        )
        self.override_repository = (
            override_repository or RepositoryFactory.create_override_repository(db)
        )
        self.window_repository = window_repository or RepositoryFactory.create_window_repository(
            db
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    def get_expert(self, expert_id: str) -> Expert:
        expert = self.expert_repository.get_by_id(expert_id)
        if expert is None:
            raise NotFoundException(
                f"Expert {expert_id} not found",
                code="EXPERT_NOT_FOUND",
                details={"expert_id": expert_id},
            )
        return expert

    # Slot resolution

    def free_slots_for(self, expert: Expert, specific_date: date) -> List[TimeSlot]:
        """Resolve free slots from the current state of the store."""
        sessions = self.session_repository.get_active_for_expert_date(expert.id, specific_date)
        override = self.override_repository.get_for_expert_date(expert.id, specific_date)
        window_set = self.window_repository.get_for_expert_date(expert.id, specific_date)
        return free_slots(
            expert,
            specific_date,
            sessions,
            [override] if override is not None else [],
            [window_set] if window_set is not None else [],
        )

    @BaseService.measure_operation("get_free_slots")
    def get_free_slots(self, expert_id: str, specific_date: date) -> List[TimeSlot]:
        """
        Bookable 30-minute slots for an expert on a date.

        Past slots are not filtered here; booking confirmation rejects them.
        """
        return self.free_slots_for(self.get_expert(expert_id), specific_date)

    # Explicit windows

    def get_windows(self, expert_id: str, specific_date: date) -> List[TimeSlot]:
        window_set = self.window_repository.get_for_expert_date(expert_id, specific_date)
        if window_set is None:
            return []
        return sorted(TimeSlot(w.start_min, w.end_min) for w in window_set.windows)

    @BaseService.measure_operation("add_window")
    def add_window(
        self, expert_id: str, specific_date: date, start: ClockValue, end: ClockValue
    ) -> List[TimeSlot]:
        """
        Declare an explicit bookable window for a date.

        Raises:
            WindowTooShortException: window shorter than one slot
            OverlappingWindowException: clashes with a window or a booked session
        """
        self.get_expert(expert_id)
        start_min, end_min = as_minutes(start), as_minutes(end)
        if end_min - start_min < SLOT_MINUTES:
            raise WindowTooShortException(SLOT_MINUTES, end_min - start_min)

        day = date_key(specific_date)
        new_range = format_range(start_min, end_min)
        with booking_lock(expert_id, specific_date):
            with self.transaction():
                for existing in self.get_windows(expert_id, specific_date):
                    if existing.overlaps(start_min, end_min):
                        raise OverlappingWindowException(day, new_range, existing.label, "window")
                for session in self.session_repository.get_active_for_expert_date(
                    expert_id, specific_date
                ):
                    if overlaps(session.start_min, session.end_min, start_min, end_min):
                        raise OverlappingWindowException(
                            day,
                            new_range,
                            format_range(session.start_min, session.end_min),
                            "session",
                        )

                window_set = self.window_repository.get_or_create_set(expert_id, specific_date)
                self.window_repository.add_window(window_set, start_min, end_min)

        self.log_operation("add_window", expert_id=expert_id, date=day, window=new_range)
        return self.get_windows(expert_id, specific_date)

    @BaseService.measure_operation("remove_window")
    def remove_window(self, expert_id: str, specific_date: date, start: ClockValue) -> List[TimeSlot]:
        """Remove the window starting at ``start``; the date's set goes with its last window."""
        start_min = as_minutes(start)
        with self.transaction():
            window_set = self.window_repository.get_for_expert_date(expert_id, specific_date)
            window = None
            if window_set is not None:
                window = next((w for w in window_set.windows if w.start_min == start_min), None)
            if window is None:
                raise NotFoundException(
                    "No window starts at that time",
                    code="WINDOW_NOT_FOUND",
                    details={"date": date_key(specific_date), "start_min": start_min},
                )
            self.window_repository.remove_window(window_set, window)

        self.log_operation("remove_window", expert_id=expert_id, date=date_key(specific_date))
        return self.get_windows(expert_id, specific_date)

    @BaseService.measure_operation("clear_windows")
    def clear_windows(self, expert_id: str, specific_date: date) -> int:
        """Drop every explicit window for a date. Returns how many were removed."""
        with self.transaction():
            window_set = self.window_repository.get_for_expert_date(expert_id, specific_date)
            if window_set is None:
                return 0
            removed = len(window_set.windows)
            self.window_repository.delete_entity(window_set)

        self.log_operation(
            "clear_windows", expert_id=expert_id, date=date_key(specific_date), removed=removed
        )
        return removed

    # Date overrides

    @BaseService.measure_operation("set_override")
    def set_override(
        self,
        expert_id: str,
        specific_date: date,
        workday: bool,
        day_start: Optional[ClockValue] = None,
        day_end: Optional[ClockValue] = None,
    ) -> AvailabilityOverride:
        """
        Create or replace the override for one date.

        Missing bounds fall back to the expert's default hours.
        """
        expert = self.get_expert(expert_id)
        start_min = as_minutes(day_start) if day_start is not None else None
        end_min = as_minutes(day_end) if day_end is not None else None
        if workday:
            effective_start = expert.day_start_min if start_min is None else start_min
            effective_end = expert.day_end_min if end_min is None else end_min
            if effective_end <= effective_start:
                raise ValidationException(
                    "Override end must be after start",
                    code="INVALID_OVERRIDE",
                    details={"start_min": effective_start, "end_min": effective_end},
                )

        with self.transaction():
            override = self.override_repository.get_for_expert_date(expert_id, specific_date)
            if override is None:
                override = self.override_repository.create(
                    expert_id=expert_id,
                    date=specific_date,
                    workday=workday,
                    day_start_min=start_min,
                    day_end_min=end_min,
                )
            else:
                override.workday = workday
                override.day_start_min = start_min
                override.day_end_min = end_min
                self.override_repository.flush()

        self.log_operation(
            "set_override", expert_id=expert_id, date=date_key(specific_date), workday=workday
        )
        return override

    @BaseService.measure_operation("clear_override")
    def clear_override(self, expert_id: str, specific_date: date) -> bool:
        with self.transaction():
            override = self.override_repository.get_for_expert_date(expert_id, specific_date)
            if override is None:
                return False
            self.override_repository.delete_entity(override)
        self.log_operation("clear_override", expert_id=expert_id, date=date_key(specific_date))
        return True

    def list_overrides(
        self,
        expert_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[AvailabilityOverride]:
        return self.override_repository.list_for_expert(expert_id, start_date, end_date)
