"""Availability resolution and management."""

from .availability_service import AvailabilityService
from .resolver import TimeSlot, free_slots

__all__ = ["AvailabilityService", "TimeSlot", "free_slots"]
