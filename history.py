"""Append-only audit trail of booking mutations."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import Lock
from typing import List
from uuid import uuid4

from models import (
    DELETE_SNAPSHOT_FIELDS,
    UPDATE_SNAPSHOT_FIELDS,
    Booking,
    BookingHistoryEntry,
    HistoryAction,
)

logger = logging.getLogger(__name__)


class IHistoryStore(ABC):
    """Storage for history entries. Entries are never updated or removed."""

    @abstractmethod
    def append(self, entry: BookingHistoryEntry) -> None:
        pass

    @abstractmethod
    def list_for_booking(self, booking_id: str) -> List[BookingHistoryEntry]:
        pass


class InMemoryHistoryStore(IHistoryStore):
    def __init__(self) -> None:
        self._entries: List[BookingHistoryEntry] = []
        self._lock = Lock()

    def append(self, entry: BookingHistoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def list_for_booking(self, booking_id: str) -> List[BookingHistoryEntry]:
        with self._lock:
            return [e for e in self._entries if e.booking_id == booking_id]

    def list_all(self) -> List[BookingHistoryEntry]:
        with self._lock:
            return list(self._entries)

    def reset(self) -> None:
        """Clear all entries. For testing only."""
        with self._lock:
            self._entries.clear()


class BookingHistory:
    """Builds one history entry per mutation and hands it to the store."""

    def __init__(self, store: IHistoryStore) -> None:
        self._store = store

    def _append(self, action: HistoryAction, booking: Booking, **snapshots) -> BookingHistoryEntry:
        entry = BookingHistoryEntry(
            id=f"hst_{uuid4().hex}",
            action=action,
            booking_id=booking.id,
            user_id=booking.user_id,
            user_name=booking.user_name,
            timestamp=datetime.now(timezone.utc),
            **snapshots,
        )
        self._store.append(entry)
        logger.debug("Logged %s for booking %s", action.value, booking.id)
        return entry

    def log_create(self, booking: Booking) -> BookingHistoryEntry:
        return self._append(HistoryAction.CREATE, booking, booking_data=booking.to_record())

    def log_update(self, before: Booking, after: Booking) -> BookingHistoryEntry:
        # Owner identity is taken from the pre-update booking
        return self._append(
            HistoryAction.UPDATE,
            before,
            old_data=before.snapshot(UPDATE_SNAPSHOT_FIELDS),
            new_data=after.snapshot(UPDATE_SNAPSHOT_FIELDS),
        )

    def log_delete(self, booking: Booking) -> BookingHistoryEntry:
        return self._append(
            HistoryAction.DELETE,
            booking,
            booking_data=booking.snapshot(DELETE_SNAPSHOT_FIELDS),
        )

    def for_booking(self, booking_id: str) -> List[BookingHistoryEntry]:
        return sorted(self._store.list_for_booking(booking_id), key=lambda e: e.timestamp)
