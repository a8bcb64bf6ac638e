from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, TypeVar

from dateutils import covers, month_bounds, ranges_overlap
from history import BookingHistory, InMemoryHistoryStore
from models import Booking, BookingHistoryEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryError(Exception):
    """Storage failure. The original exception is kept as __cause__."""


# -----------------------------
# Storage (raw collection access)
# -----------------------------
class IBookingStore(ABC):
    """The `bookings` collection as seen by the adapter below."""

    @abstractmethod
    def get(self, booking_id: str) -> Optional[Booking]:
        pass

    @abstractmethod
    def find_overlapping(self, start: date, end: date) -> List[Booking]:
        """Bookings whose range may overlap [start, end]. May over-match."""

    @abstractmethod
    def find_starting_between(self, start: date, end: date, user_id: Optional[str] = None) -> List[Booking]:
        pass

    @abstractmethod
    def insert(self, booking: Booking) -> None:
        pass

    @abstractmethod
    def replace(self, booking: Booking) -> bool:
        pass

    @abstractmethod
    def delete(self, booking_id: str) -> bool:
        pass


class InMemoryBookingStore(IBookingStore):
    def __init__(self) -> None:
        self._items: Dict[str, Booking] = {}
        self._lock = Lock()

    def get(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            return self._items.get(booking_id)

    def list_all(self) -> List[Booking]:
        with self._lock:
            return list(self._items.values())

    def find_overlapping(self, start: date, end: date) -> List[Booking]:
        with self._lock:
            return [
                b for b in self._items.values()
                if ranges_overlap(b.date, b.last_day, start, end)
            ]

    def find_starting_between(self, start: date, end: date, user_id: Optional[str] = None) -> List[Booking]:
        with self._lock:
            return [
                b for b in self._items.values()
                if start <= b.date <= end and (user_id is None or b.user_id == user_id)
            ]

    def insert(self, booking: Booking) -> None:
        with self._lock:
            if booking.id in self._items:
                raise KeyError(f"duplicate booking id {booking.id}")
            self._items[booking.id] = booking

    def replace(self, booking: Booking) -> bool:
        with self._lock:
            if booking.id not in self._items:
                return False
            self._items[booking.id] = booking
            return True

    def delete(self, booking_id: str) -> bool:
        with self._lock:
            if booking_id not in self._items:
                return False
            del self._items[booking_id]
            return True

    def reset(self) -> None:
        """Clear all bookings. For testing only."""
        with self._lock:
            self._items.clear()


# -----------------------------
# Repository adapter
# -----------------------------
class BookingRepository:
    """
    Queries and mutations used by the validator and the booking service.

    Every mutation is followed by exactly one audit entry. Audit logging is
    best-effort: a failing history store is logged and the mutation stands.
    """

    def __init__(
        self,
        store: Optional[IBookingStore] = None,
        history: Optional[BookingHistory] = None,
    ) -> None:
        self._store = store if store is not None else InMemoryBookingStore()
        self._history = history if history is not None else BookingHistory(InMemoryHistoryStore())

    # ---- queries ----

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self._call("find_by_id", self._store.get, booking_id)

    def find_by_date(self, day: date) -> List[Booking]:
        candidates = self._call("find_by_date", self._store.find_overlapping, day, day)
        # Range queries on some backends are loose; recheck inclusive containment
        return [b for b in candidates if covers(b.date, b.end_date, day)]

    def find_by_user_and_month(self, user_id: str, year: int, month: int) -> List[Booking]:
        """Bookings of `user_id` that start in the given month (1-12)."""
        first, last = month_bounds(year, month)
        candidates = self._call(
            "find_by_user_and_month", self._store.find_starting_between, first, last, user_id
        )
        return [b for b in candidates if b.user_id == user_id and first <= b.date <= last]

    def find_by_month(self, year: int, month: int) -> List[Booking]:
        first, last = month_bounds(year, month)
        items = self._call("find_by_month", self._store.find_starting_between, first, last)
        items.sort(key=lambda b: (b.date, b.created_at))
        return items

    def history_for(self, booking_id: str) -> List[BookingHistoryEntry]:
        return self._call("history_for", self._history.for_booking, booking_id)

    # ---- mutations ----

    def insert(self, booking: Booking) -> Booking:
        self._call("insert", self._store.insert, booking)
        self._audit("create", booking.id, self._history.log_create, booking)
        return booking

    def update(self, booking_id: str, **changes: Any) -> Optional[Booking]:
        """Apply `changes` to a stored booking. Returns None if it does not exist."""
        before = self.find_by_id(booking_id)
        if before is None:
            return None

        after = dataclasses.replace(before, updated_at=datetime.now(timezone.utc), **changes)
        if not self._call("update", self._store.replace, after):
            return None

        self._audit("update", booking_id, self._history.log_update, before, after)
        return after

    def delete(self, booking_id: str) -> Optional[Booking]:
        """Delete a booking. Returns the removed booking, or None if it did not exist."""
        before = self.find_by_id(booking_id)
        if before is None:
            return None

        if not self._call("delete", self._store.delete, booking_id):
            return None

        self._audit("delete", booking_id, self._history.log_delete, before)
        return before

    # ---- helpers ----

    def _call(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return fn(*args)
        except Exception as exc:
            logger.exception("Booking storage failed during %s", operation)
            raise RepositoryError(f"Booking storage failed during {operation}") from exc

    def _audit(self, action: str, booking_id: str, log: Callable[..., Any], *args: Any) -> None:
        try:
            log(*args)
        except Exception:
            logger.exception("Failed to record %s history for booking %s", action, booking_id)
