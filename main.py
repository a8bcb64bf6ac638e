from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from api import create_router
from config import configure_logging, get_settings
from repository import BookingRepository
from services import BookingService
from validation import BookingValidator


def build_service(repo: Optional[BookingRepository] = None) -> BookingService:
    """Wire the booking service around `repo` (in-memory storage by default)."""
    settings = get_settings()
    repo = repo if repo is not None else BookingRepository()
    validator = BookingValidator(
        repo,
        daily_capacity=settings.DAILY_CAPACITY,
        monthly_limit=settings.MONTHLY_BOOKING_LIMIT,
    )
    return BookingService(repo, validator)


def create_app(service: Optional[BookingService] = None) -> FastAPI:
    app = FastAPI(title=get_settings().APP_TITLE, version="1.0.0")
    app.include_router(create_router(service or build_service()))
    return app


configure_logging()
app = create_app()
