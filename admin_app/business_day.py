"""Business-day window used to bucket "today's" orders."""

from __future__ import annotations

from datetime import datetime, timedelta

from admin_app.config import BUSINESS_DAY_START_HOUR


def business_day_start(now: datetime, start_hour: int = BUSINESS_DAY_START_HOUR) -> datetime:
    """Start of the shift containing ``now``; before the cutoff it is still yesterday's shift."""
    effective = now - timedelta(days=1) if now.hour < start_hour else now
    return effective.replace(hour=start_hour, minute=0, second=0, microsecond=0)


def business_day_end(now: datetime, start_hour: int = BUSINESS_DAY_START_HOUR) -> datetime:
    return business_day_start(now, start_hour) + timedelta(hours=24)


def local_now() -> datetime:
    """Timezone-aware local time; the store reads naive datetimes as UTC."""
    return datetime.now().astimezone()


def until_rollover(now: datetime, start_hour: int = BUSINESS_DAY_START_HOUR) -> timedelta:
    """Time left before the next shift starts."""
    return business_day_end(now, start_hour) - now
