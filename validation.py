"""
Booking acceptance rules.

The validator only reads from the repository it is given and never writes.
Rule failures are returned as ValidationResult values, not raised.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from dateutils import (
    CivilDateLike,
    dates_in_range,
    days_count,
    is_within_booking_window,
    max_booking_date,
    to_civil_date,
    today,
)
from models import LeaveCategory, ValidationFailure, ValidationResult, max_days
from repository import BookingRepository, RepositoryError

logger = logging.getLogger(__name__)

UNVERIFIABLE_MESSAGE = "Could not verify booking availability, please try again later."


class BookingValidator:
    def __init__(
        self,
        repository: BookingRepository,
        daily_capacity: int = 2,
        monthly_limit: int = 1,
    ) -> None:
        self._repo = repository
        self.daily_capacity = daily_capacity
        self.monthly_limit = monthly_limit

    def validate_booking(
        self,
        user_id: str,
        start_date: CivilDateLike,
        end_date: Optional[CivilDateLike],
        category: LeaveCategory,
        exclude_booking_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Run the acceptance rules in order and stop at the first failure:
        span limit, per-day capacity, then the monthly limit.

        `exclude_booking_id` leaves one stored booking out of the counts so
        an update can be checked against everything except itself.
        """
        start = to_civil_date(start_date)
        end = to_civil_date(end_date) if end_date is not None else start
        category = LeaveCategory(category)

        result = self.check_max_span(start, end, category)
        if not result.valid:
            return result

        try:
            result = self.check_capacity(start, end, exclude_booking_id)
            if result.valid:
                result = self.check_monthly_limit(user_id, start, exclude_booking_id)
        except RepositoryError:
            # Without trustworthy counts the booking is refused
            logger.warning("Validation for user %s aborted: storage unavailable", user_id)
            return ValidationResult.fail(ValidationFailure.UNVERIFIABLE, UNVERIFIABLE_MESSAGE)

        return result

    # -----------------------------
    # Individual rules
    # -----------------------------
    def check_max_span(self, start: date, end: date, category: LeaveCategory) -> ValidationResult:
        requested = days_count(start, end)
        limit = max_days(category)
        if requested > limit:
            return ValidationResult.fail(
                ValidationFailure.MAX_SPAN_EXCEEDED,
                f"{category.label} leave is limited to {limit} days "
                f"(requested {requested} days).",
            )
        return ValidationResult.ok()

    def check_capacity(
        self, start: date, end: date, exclude_booking_id: Optional[str] = None
    ) -> ValidationResult:
        # Ascending order, so the first full day found is the earliest one
        for day in dates_in_range(start, end):
            taken = [b for b in self._repo.find_by_date(day) if b.id != exclude_booking_id]
            if len(taken) >= self.daily_capacity:
                return ValidationResult.fail(
                    ValidationFailure.DATE_AT_CAPACITY,
                    f"{day.isoformat()} is fully booked "
                    f"({len(taken)} of {self.daily_capacity} slots taken).",
                )
        return ValidationResult.ok()

    def check_monthly_limit(
        self, user_id: str, start: date, exclude_booking_id: Optional[str] = None
    ) -> ValidationResult:
        existing = [
            b for b in self._repo.find_by_user_and_month(user_id, start.year, start.month)
            if b.id != exclude_booking_id
        ]
        if len(existing) >= self.monthly_limit:
            noun = "booking" if self.monthly_limit == 1 else "bookings"
            return ValidationResult.fail(
                ValidationFailure.MONTHLY_LIMIT_EXCEEDED,
                f"You already have leave booked in {start:%B %Y}; "
                f"the limit is {self.monthly_limit} {noun} per month.",
            )
        return ValidationResult.ok()

    # -----------------------------
    # Preconditions checked by the service
    # -----------------------------
    def validate_can_edit(
        self, booking_date: CivilDateLike, current: Optional[date] = None
    ) -> ValidationResult:
        if to_civil_date(booking_date) < (current or today()):
            return ValidationResult.fail(
                ValidationFailure.EDIT_WINDOW_EXPIRED,
                "Bookings whose date has already passed cannot be edited.",
            )
        return ValidationResult.ok()

    def validate_booking_window(
        self, start_date: CivilDateLike, current: Optional[date] = None
    ) -> ValidationResult:
        current = current or today()
        if not is_within_booking_window(to_civil_date(start_date), current):
            return ValidationResult.fail(
                ValidationFailure.OUTSIDE_BOOKING_WINDOW,
                f"Leave can only be booked from {current.isoformat()} "
                f"to {max_booking_date(current).isoformat()}.",
            )
        return ValidationResult.ok()
