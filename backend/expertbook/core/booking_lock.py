"""
Process-local mutual exclusion for the booking critical sections.

Two scopes are used:

- ``booking_lock(expert_id, date)`` serializes slot revalidation, hour
  deduction and session creation for one expert/day, so a second booking
  attempt sees the first one's sessions before computing free slots.
- ``purchase_lock(purchase_id)`` serializes mutations of one purchase's
  balance (cancellation refunds, feedback submission).

Locks are re-entrant per thread and are dropped from the registry once no
thread holds or waits on them.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
import threading
import time
from typing import Dict, Iterator, Optional

from .config import settings
from .exceptions import ServiceException
from .time_utils import date_key

logger = logging.getLogger(__name__)


class _LockEntry:
    __slots__ = ("lock", "refs")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.refs = 0


class KeyedLockRegistry:
    """Hands out one re-entrant lock per string key."""

    def __init__(self) -> None:
        self._entries: Dict[str, _LockEntry] = {}
        self._guard = threading.Lock()

    def _checkout(self, key: str) -> _LockEntry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _LockEntry()
                self._entries[key] = entry
            entry.refs += 1
            return entry

    def _checkin(self, key: str, entry: _LockEntry) -> None:
        with self._guard:
            entry.refs -= 1
            if entry.refs <= 0 and self._entries.get(key) is entry:
                del self._entries[key]

    @contextmanager
    def hold(self, key: str, timeout: Optional[float] = None) -> Iterator[None]:
        wait_s = settings.lock_timeout_seconds if timeout is None else timeout
        entry = self._checkout(key)
        started = time.monotonic()
        try:
            acquired = entry.lock.acquire(timeout=wait_s)
            if not acquired:
                logger.warning(
                    "lock_acquire_timeout",
                    extra={"lock_key": key, "timeout_s": wait_s},
                )
                raise ServiceException(
                    "Another operation is in progress, please retry",
                    code="LOCK_TIMEOUT",
                    details={"lock_key": key},
                )
            waited = time.monotonic() - started
            if waited > 0.5:
                logger.info("lock_contended", extra={"lock_key": key, "waited_s": round(waited, 3)})
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)

    def active_keys(self) -> list[str]:
        with self._guard:
            return sorted(self._entries)


_REGISTRY = KeyedLockRegistry()


def _booking_key(expert_id: str, booking_date: date) -> str:
    return f"booking:{expert_id}:{date_key(booking_date)}:mutex"


def _purchase_key(purchase_id: str) -> str:
    return f"purchase:{purchase_id}:mutex"


@contextmanager
def booking_lock(
    expert_id: str, booking_date: date, timeout: Optional[float] = None
) -> Iterator[None]:
    with _REGISTRY.hold(_booking_key(expert_id, booking_date), timeout=timeout):
        yield


@contextmanager
def purchase_lock(purchase_id: str, timeout: Optional[float] = None) -> Iterator[None]:
    with _REGISTRY.hold(_purchase_key(purchase_id), timeout=timeout):
        yield
