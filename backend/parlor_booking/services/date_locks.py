"""
Per-date critical sections for the booking engine.

Appointments of one date are the only contended resource. Every
check-then-write on a date runs while holding that date's lock, so two
requests for the same slot can never both pass the conflict check.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, Optional

from parlor_booking.core.exceptions import UnavailableError

logger = logging.getLogger(__name__)


class DateLockRegistry:
    """Hands out one re-entrant lock per calendar date.

    Locks are reference counted and dropped once nobody holds or waits for
    them, so the registry does not grow with every date ever booked.
    """

    def __init__(self, timeout: Optional[float] = 30.0) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[date, threading.RLock] = {}
        self._users: Dict[date, int] = defaultdict(int)

    @contextmanager
    def hold(self, *days: date) -> Iterator[None]:
        """Hold the locks of ``days`` (acquired in date order)."""
        ordered = sorted(set(days))
        acquired = []
        try:
            for day in ordered:
                lock = self._checkout(day)
                timeout = -1 if self._timeout is None else self._timeout
                if not lock.acquire(timeout=timeout):
                    self._release_user(day)
                    logger.warning(
                        "Timed out waiting for booking date lock",
                        extra={"context": {"date": day.isoformat()}},
                    )
                    raise UnavailableError(
                        f"Bookings for {day.isoformat()} are busy, try again"
                    )
                acquired.append((day, lock))
            yield
        finally:
            for day, lock in reversed(acquired):
                lock.release()
                self._release_user(day)

    def _checkout(self, day: date) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(day)
            if lock is None:
                lock = threading.RLock()
                self._locks[day] = lock
            self._users[day] += 1
            return lock

    def _release_user(self, day: date) -> None:
        with self._guard:
            self._users[day] -= 1
            if self._users[day] <= 0:
                self._users.pop(day, None)
                self._locks.pop(day, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Process-wide registry shared by every request handled by this worker
date_locks = DateLockRegistry()
