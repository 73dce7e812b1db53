# backend/expertbook/services/availability/resolver.py
"""
Free-slot resolution for one expert on one date.

The bookable span of a date comes from three layers, tried in priority
order until one of them answers:

1. Explicit windows declared for the date (ignored when the set is empty)
2. A date override (``workday=False`` means the expert is off)
3. The expert's default weekday hours

Each base window is cut into consecutive 30-minute slots from its start;
a trailing remainder shorter than a slot is dropped. Slots overlapping a
non-cancelled session are removed and the survivors are returned sorted.

Everything here is pure: inputs are plain records (ORM rows or snapshot
objects) and the same inputs always give the same output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from ...core.constants import SLOT_MINUTES
from ...core.time_utils import format_range, overlaps, weekday_index

Window = Tuple[int, int]


@dataclass(frozen=True, order=True)
class TimeSlot:
    """Half-open [start, end) interval in minutes from midnight."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def label(self) -> str:
        return format_range(self.start, self.end)

    def overlaps(self, start: int, end: int) -> bool:
        return overlaps(self.start, self.end, start, end)


@dataclass(frozen=True)
class ResolutionContext:
    """Availability layers already narrowed to one (expert, date)."""

    expert: Any
    day: date
    override: Any = None
    window_set: Any = None


Strategy = Callable[[ResolutionContext], Optional[List[Window]]]


def _same_expert_day(record: Any, expert_id: str, day: date, date_attr: str) -> bool:
    return getattr(record, "expert_id", None) == expert_id and getattr(record, date_attr) == day


def _explicit_windows(ctx: ResolutionContext) -> Optional[List[Window]]:
    windows = getattr(ctx.window_set, "windows", None) if ctx.window_set is not None else None
    if not windows:
        return None
    return [(int(w.start_min), int(w.end_min)) for w in windows]


def _date_override(ctx: ResolutionContext) -> Optional[List[Window]]:
    override = ctx.override
    if override is None:
        return None
    if not override.workday:
        return []
    start = override.day_start_min
    end = override.day_end_min
    if start is None:
        start = ctx.expert.day_start_min
    if end is None:
        end = ctx.expert.day_end_min
    return [(int(start), int(end))]


def _default_hours(ctx: ResolutionContext) -> Optional[List[Window]]:
    if weekday_index(ctx.day) in ctx.expert.workday_set:
        return [(int(ctx.expert.day_start_min), int(ctx.expert.day_end_min))]
    return None


# Highest priority first; the first strategy returning a list wins.
RESOLUTION_ORDER: Tuple[Strategy, ...] = (_explicit_windows, _date_override, _default_hours)


def resolve_base_windows(
    ctx: ResolutionContext, strategies: Sequence[Strategy] = RESOLUTION_ORDER
) -> List[Window]:
    for strategy in strategies:
        windows = strategy(ctx)
        if windows is not None:
            return windows
    return []


def enumerate_slots(window_start: int, window_end: int) -> List[TimeSlot]:
    """Consecutive slots from ``window_start`` that end on or before ``window_end``."""
    slots = []
    start = window_start
    while start + SLOT_MINUTES <= window_end:
        slots.append(TimeSlot(start, start + SLOT_MINUTES))
        start += SLOT_MINUTES
    return slots


def free_slots(
    expert: Any,
    day: date,
    sessions: Iterable[Any],
    overrides: Iterable[Any],
    explicit_windows: Iterable[Any],
) -> List[TimeSlot]:
    """
    Bookable 30-minute slots for ``expert`` on ``day``.

    ``sessions``, ``overrides`` and ``explicit_windows`` may hold records
    for other experts or dates; only those matching (expert, day) count.
    """
    expert_id = expert.id
    override = next(
        (o for o in overrides if _same_expert_day(o, expert_id, day, "date")), None
    )
    window_set = next(
        (w for w in explicit_windows if _same_expert_day(w, expert_id, day, "date")), None
    )
    busy = [
        (int(s.start_min), int(s.end_min))
        for s in sessions
        if _same_expert_day(s, expert_id, day, "booking_date")
        and getattr(s, "cancelled_at", None) is None
    ]

    ctx = ResolutionContext(expert=expert, day=day, override=override, window_set=window_set)
    candidates: List[TimeSlot] = []
    for window_start, window_end in resolve_base_windows(ctx):
        candidates.extend(enumerate_slots(window_start, window_end))

    return sorted(
        slot
        for slot in candidates
        if not any(slot.overlaps(busy_start, busy_end) for busy_start, busy_end in busy)
    )
