# backend/expertbook/schemas/availability.py
"""
Availability schemas: free slots, explicit windows and date overrides.

Times travel as "HH:MM" strings on input; responses carry both the
minute-of-day integers and their clock rendering.
"""

import datetime
from typing import List, Optional

from pydantic import field_validator

from ..core.time_utils import to_clock_string
from .base import StandardizedModel, StrictRequestModel, validate_clock


class SlotResponse(StandardizedModel):
    start_min: int
    end_min: int
    start: str
    end: str

    @classmethod
    def from_interval(cls, start_min: int, end_min: int) -> "SlotResponse":
        return cls(
            start_min=start_min,
            end_min=end_min,
            start=to_clock_string(start_min),
            end=to_clock_string(end_min),
        )


class FreeSlotsResponse(StandardizedModel):
    """Bookable slots for one expert on one date."""

    expert_id: str
    date: datetime.date
    slots: List[SlotResponse]


class WindowCreate(StrictRequestModel):
    """Explicit window to declare for a date."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _validate_clock(cls, v: str) -> str:
        return validate_clock(v)


class WindowListResponse(StandardizedModel):
    expert_id: str
    date: datetime.date
    windows: List[SlotResponse]


class OverrideUpsert(StrictRequestModel):
    """Replace an expert's hours for one date; omitted bounds use the defaults."""

    workday: bool = True
    day_start: Optional[str] = None
    day_end: Optional[str] = None

    @field_validator("day_start", "day_end")
    @classmethod
    def _validate_bounds(cls, v: Optional[str]) -> Optional[str]:
        return validate_clock(v) if v is not None else v


class OverrideResponse(StandardizedModel):
    expert_id: str
    date: datetime.date
    workday: bool
    day_start_min: Optional[int] = None
    day_end_min: Optional[int] = None


class WindowsClearedResponse(StandardizedModel):
    removed: int
