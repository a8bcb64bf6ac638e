from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Field names below shadow the `date` type inside class bodies
CivilDate = date
Timestamp = datetime


# -----------------------------
# Enumerations
# -----------------------------
class LeaveCategory(str, Enum):
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"

    @property
    def label(self) -> str:
        return self.value.capitalize()


MAX_DAYS: Dict[LeaveCategory, int] = {
    LeaveCategory.DOMESTIC: 7,
    LeaveCategory.INTERNATIONAL: 9,
}


def max_days(category: LeaveCategory) -> int:
    return MAX_DAYS[LeaveCategory(category)]


class HistoryAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ValidationFailure(str, Enum):
    MAX_SPAN_EXCEEDED = "max_span_exceeded"
    DATE_AT_CAPACITY = "date_at_capacity"
    MONTHLY_LIMIT_EXCEEDED = "monthly_limit_exceeded"
    EDIT_WINDOW_EXPIRED = "edit_window_expired"
    OUTSIDE_BOOKING_WINDOW = "outside_booking_window"
    UNVERIFIABLE = "unverifiable"


# -----------------------------
# Domain model
# -----------------------------
# Keys shared with the storage layer and the audit snapshots
UPDATE_SNAPSHOT_FIELDS = ("date", "endDate", "category", "reason", "updatedAt")
DELETE_SNAPSHOT_FIELDS = ("date", "endDate", "category", "reason", "createdAt", "updatedAt")


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class Booking:
    id: str
    date: CivilDate  # first day of leave, inclusive
    user_id: str
    user_name: str
    category: LeaveCategory
    created_at: Timestamp  # aware, UTC
    end_date: Optional[CivilDate] = None  # last day of leave, inclusive
    reason: Optional[str] = None
    updated_at: Optional[Timestamp] = None

    @property
    def last_day(self) -> CivilDate:
        return self.end_date or self.date

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "endDate": _iso(self.end_date),
            "userId": self.user_id,
            "userName": self.user_name,
            "category": self.category.value,
            "reason": self.reason,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def snapshot(self, fields: Iterable[str]) -> Dict[str, Any]:
        record = self.to_record()
        return {name: record[name] for name in fields}


@dataclass(frozen=True)
class BookingHistoryEntry:
    id: str
    action: HistoryAction
    booking_id: str
    user_id: str
    user_name: str
    timestamp: Timestamp  # aware, UTC
    old_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    booking_data: Optional[Dict[str, Any]] = None


# -----------------------------
# API models (transport layer)
# -----------------------------
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingDatesIn(CamelModel):
    date: CivilDate
    end_date: Optional[CivilDate] = None
    category: LeaveCategory
    reason: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "BookingDatesIn":
        if self.end_date is not None and self.end_date < self.date:
            raise ValueError("endDate must not be before date")
        return self

    @property
    def last_day(self) -> CivilDate:
        return self.end_date or self.date


class CreateBookingIn(BookingDatesIn):
    user_id: str = Field(..., min_length=1)
    user_name: str = Field(..., min_length=1)


class UpdateBookingIn(BookingDatesIn):
    pass


class BookingOut(CamelModel):
    id: str
    date: CivilDate
    end_date: Optional[CivilDate] = None
    user_id: str
    user_name: str
    category: LeaveCategory
    reason: Optional[str] = None
    created_at: Timestamp
    updated_at: Optional[Timestamp] = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingOut":
        return cls(
            id=booking.id,
            date=booking.date,
            end_date=booking.end_date,
            user_id=booking.user_id,
            user_name=booking.user_name,
            category=booking.category,
            reason=booking.reason,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class HistoryEntryOut(CamelModel):
    id: str
    action: HistoryAction
    booking_id: str
    user_id: str
    user_name: str
    timestamp: Timestamp
    old_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    booking_data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_entry(cls, entry: BookingHistoryEntry) -> "HistoryEntryOut":
        return cls(
            id=entry.id,
            action=entry.action,
            booking_id=entry.booking_id,
            user_id=entry.user_id,
            user_name=entry.user_name,
            timestamp=entry.timestamp,
            old_data=entry.old_data,
            new_data=entry.new_data,
            booking_data=entry.booking_data,
        )


class ValidationResult(CamelModel):
    valid: bool
    error: Optional[str] = None
    failure: Optional[ValidationFailure] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, failure: ValidationFailure, error: str) -> "ValidationResult":
        return cls(valid=False, failure=failure, error=error)
