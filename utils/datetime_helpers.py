"""Timezone-aware date/time helpers for the hotel application."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Asia/Manila')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_timezone())


def get_now_iso() -> str:
    """Current timestamp as an ISO-8601 string (stored in *_time columns)."""
    return get_now().isoformat(timespec='seconds')


def get_month_start() -> date:
    """First day of the current month in the configured timezone."""
    return get_today().replace(day=1)
