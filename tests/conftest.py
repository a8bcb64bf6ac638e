from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

import pytest

from dateutils import today
from history import BookingHistory, InMemoryHistoryStore
from models import Booking, LeaveCategory
from repository import BookingRepository, InMemoryBookingStore
from services import BookingService
from validation import BookingValidator


def month_start(offset: int) -> date:
    """First day of the month `offset` months after the current one."""
    current = today()
    years, month_index = divmod(current.month - 1 + offset, 12)
    return date(current.year + years, month_index + 1, 1)


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()


@pytest.fixture
def repo(store, history_store):
    return BookingRepository(store, BookingHistory(history_store))


@pytest.fixture
def validator(repo):
    return BookingValidator(repo)


@pytest.fixture
def service(repo, validator):
    return BookingService(repo, validator)


@pytest.fixture
def add_booking(store):
    """Put a booking straight into storage, bypassing validation and history."""

    def _add(
        start: date,
        end: Optional[date] = None,
        user_id: str = "U_other",
        category: LeaveCategory = LeaveCategory.DOMESTIC,
        booking_id: Optional[str] = None,
    ) -> Booking:
        booking = Booking(
            id=booking_id or f"bkg_{uuid4().hex}",
            date=start,
            end_date=end,
            user_id=user_id,
            user_name=f"name-{user_id}",
            category=category,
            created_at=datetime.now(timezone.utc),
        )
        store.insert(booking)
        return booking

    return _add
