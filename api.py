from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Header, HTTPException, Path, Query, status

from models import (
    BookingOut,
    CreateBookingIn,
    HistoryEntryOut,
    UpdateBookingIn,
    ValidationFailure,
    ValidationResult,
)
from repository import RepositoryError
from services import BookingNotFoundError, BookingRejectedError, BookingService

# Rules about other people's bookings are conflicts, the rest are bad input
CONFLICT_FAILURES = {
    ValidationFailure.DATE_AT_CAPACITY,
    ValidationFailure.MONTHLY_LIMIT_EXCEEDED,
}


def rejected(exc: BookingRejectedError) -> HTTPException:
    result = exc.result
    code = (
        status.HTTP_409_CONFLICT
        if result.failure in CONFLICT_FAILURES
        else status.HTTP_422_UNPROCESSABLE_CONTENT
    )
    return HTTPException(
        status_code=code,
        detail={"error": result.error, "failure": result.failure.value},
    )


def not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found.")


def unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Booking storage is temporarily unavailable.",
    )


def create_router(service: BookingService) -> APIRouter:
    router = APIRouter()

    @router.post("/bookings", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
    def create_booking(payload: CreateBookingIn) -> BookingOut:
        try:
            return service.create_booking(payload)
        except BookingRejectedError as exc:
            raise rejected(exc)
        except RepositoryError:
            raise unavailable()

    @router.post("/bookings/validate", response_model=ValidationResult)
    def validate_booking(payload: CreateBookingIn) -> ValidationResult:
        try:
            return service.check_booking(payload)
        except RepositoryError:
            raise unavailable()

    @router.get("/bookings", response_model=List[BookingOut])
    def list_bookings_for_date(day: date = Query(..., alias="date")) -> List[BookingOut]:
        try:
            return service.list_bookings_for_date(day)
        except RepositoryError:
            raise unavailable()

    @router.get("/bookings/{booking_id}", response_model=BookingOut)
    def get_booking(booking_id: str = Path(..., min_length=1)) -> BookingOut:
        try:
            return service.get_booking(booking_id)
        except BookingNotFoundError:
            raise not_found()
        except RepositoryError:
            raise unavailable()

    @router.put("/bookings/{booking_id}", response_model=BookingOut)
    def update_booking(
        payload: UpdateBookingIn,
        booking_id: str = Path(..., min_length=1),
        x_user_id: str = Header(..., min_length=1),
    ) -> BookingOut:
        try:
            service.get_owned_booking(booking_id, x_user_id)
            return service.update_booking(booking_id, payload)
        except BookingNotFoundError:
            raise not_found()
        except BookingRejectedError as exc:
            raise rejected(exc)
        except RepositoryError:
            raise unavailable()

    @router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_booking(
        booking_id: str = Path(..., min_length=1),
        x_user_id: str = Header(..., min_length=1),
    ) -> None:
        try:
            service.get_owned_booking(booking_id, x_user_id)
            service.delete_booking(booking_id)
            return None
        except BookingNotFoundError:
            raise not_found()
        except RepositoryError:
            raise unavailable()

    @router.get("/bookings/{booking_id}/history", response_model=List[HistoryEntryOut])
    def get_booking_history(booking_id: str = Path(..., min_length=1)) -> List[HistoryEntryOut]:
        try:
            return service.get_history(booking_id)
        except RepositoryError:
            raise unavailable()

    @router.get("/calendar/{year}/{month}", response_model=List[BookingOut])
    def list_bookings_for_month(
        year: int = Path(..., ge=1, le=9999),
        month: int = Path(..., ge=1, le=12),
    ) -> List[BookingOut]:
        try:
            return service.list_bookings_for_month(year, month)
        except RepositoryError:
            raise unavailable()

    return router
