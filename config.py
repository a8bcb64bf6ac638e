from __future__ import annotations

import logging
import os
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings:
    """Application settings read from the environment."""

    APP_TITLE: str = os.getenv("APP_TITLE", "Leave Booking API")

    # Civil timezone every date rule is evaluated in
    BOOKING_TIMEZONE: str = os.getenv("BOOKING_TIMEZONE", "Asia/Bangkok")

    # Business rules
    DAILY_CAPACITY: int = int(os.getenv("DAILY_CAPACITY", "2"))
    MONTHLY_BOOKING_LIMIT: int = int(os.getenv("MONTHLY_BOOKING_LIMIT", "1"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def __init__(self):
        self._validate()

    def _validate(self):
        """Validate settings that would otherwise fail deep inside a request"""
        try:
            ZoneInfo(self.BOOKING_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown BOOKING_TIMEZONE: {self.BOOKING_TIMEZONE!r}") from exc
        if self.DAILY_CAPACITY < 1:
            raise ValueError("DAILY_CAPACITY must be at least 1")
        if self.MONTHLY_BOOKING_LIMIT < 1:
            raise ValueError("MONTHLY_BOOKING_LIMIT must be at least 1")
        if self.LOG_LEVEL not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {self.LOG_LEVEL!r}")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
