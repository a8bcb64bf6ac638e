from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List
from uuid import uuid4

from models import (
    Booking,
    BookingOut,
    CreateBookingIn,
    HistoryEntryOut,
    UpdateBookingIn,
    ValidationResult,
)
from repository import BookingRepository
from validation import BookingValidator

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for domain/service errors."""


class BookingNotFoundError(BookingError):
    pass


class BookingRejectedError(BookingError):
    """A booking failed one of the acceptance rules; `result` says which."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.error)
        self.result = result


class BookingService:
    def __init__(self, repo: BookingRepository, validator: BookingValidator) -> None:
        self._repo = repo
        self._validator = validator

    def check_booking(self, payload: CreateBookingIn) -> ValidationResult:
        """Dry run of create_booking: every rule, no writes."""
        window = self._validator.validate_booking_window(payload.date)
        if not window.valid:
            return window
        return self._validator.validate_booking(
            payload.user_id, payload.date, payload.last_day, payload.category
        )

    def create_booking(self, payload: CreateBookingIn) -> BookingOut:
        self._ensure_valid(self.check_booking(payload), payload.user_id)

        booking = Booking(
            id=f"bkg_{uuid4().hex}",
            date=payload.date,
            end_date=payload.end_date,
            user_id=payload.user_id,
            user_name=payload.user_name,
            category=payload.category,
            reason=payload.reason,
            created_at=datetime.now(timezone.utc),
        )
        self._repo.insert(booking)
        logger.info(
            "Booking %s created for user %s (%s to %s)",
            booking.id, booking.user_id, booking.date, booking.last_day,
        )
        return BookingOut.from_booking(booking)

    def update_booking(self, booking_id: str, payload: UpdateBookingIn) -> BookingOut:
        existing = self._get(booking_id)

        # Past bookings are frozen before any capacity check runs
        self._ensure_valid(self._validator.validate_can_edit(existing.date), existing.user_id)
        self._ensure_valid(self._validator.validate_booking_window(payload.date), existing.user_id)
        self._ensure_valid(
            self._validator.validate_booking(
                existing.user_id,
                payload.date,
                payload.last_day,
                payload.category,
                exclude_booking_id=existing.id,
            ),
            existing.user_id,
        )

        updated = self._repo.update(
            booking_id,
            date=payload.date,
            end_date=payload.end_date,
            category=payload.category,
            reason=payload.reason,
        )
        if updated is None:
            # Deleted between the read above and the write
            raise BookingNotFoundError()

        logger.info("Booking %s updated by user %s", booking_id, existing.user_id)
        return BookingOut.from_booking(updated)

    def delete_booking(self, booking_id: str) -> None:
        # Cancellation is a hard delete; the audit entry keeps the snapshot.
        deleted = self._repo.delete(booking_id)
        if deleted is None:
            raise BookingNotFoundError()
        logger.info("Booking %s deleted", booking_id)

    def get_booking(self, booking_id: str) -> BookingOut:
        return BookingOut.from_booking(self._get(booking_id))

    def get_owned_booking(self, booking_id: str, user_id: str) -> BookingOut:
        """Like get_booking, but bookings of other users are reported as missing."""
        booking = self._get(booking_id)
        if booking.user_id != user_id:
            raise BookingNotFoundError()
        return BookingOut.from_booking(booking)

    def list_bookings_for_date(self, day: date) -> List[BookingOut]:
        items = self._repo.find_by_date(day)
        items.sort(key=lambda b: (b.date, b.created_at))
        return [BookingOut.from_booking(b) for b in items]

    def list_bookings_for_month(self, year: int, month: int) -> List[BookingOut]:
        return [BookingOut.from_booking(b) for b in self._repo.find_by_month(year, month)]

    def get_history(self, booking_id: str) -> List[HistoryEntryOut]:
        return [HistoryEntryOut.from_entry(e) for e in self._repo.history_for(booking_id)]

    def _get(self, booking_id: str) -> Booking:
        booking = self._repo.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError()
        return booking

    def _ensure_valid(self, result: ValidationResult, user_id: str) -> None:
        if not result.valid:
            logger.warning(
                "Booking rejected for user %s: %s", user_id, result.failure.value
            )
            raise BookingRejectedError(result)
