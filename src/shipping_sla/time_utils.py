"""Time utilities: naive-UTC normalisation and fractional-hour arithmetic."""
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from .config import SECONDS_PER_HOUR

UTC = ZoneInfo("UTC")


def to_naive_utc(dt: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are assumed to be UTC already."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def local_to_utc(local_dt: datetime, tz: ZoneInfo) -> datetime:
    if local_dt.tzinfo is not None:
        return local_dt.astimezone(UTC).replace(tzinfo=None)
    local_aware = local_dt.replace(tzinfo=tz)
    return local_aware.astimezone(UTC).replace(tzinfo=None)


def utc_to_local(utc_dt: datetime, tz: ZoneInfo) -> datetime:
    utc_aware = utc_dt.replace(tzinfo=UTC)
    return utc_aware.astimezone(tz).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed fractional hours from start to end."""
    return (to_naive_utc(end) - to_naive_utc(start)).total_seconds() / SECONDS_PER_HOUR


def add_hours(dt: datetime, hours: float) -> datetime:
    return dt + timedelta(hours=hours)


def parse_now(val: Optional[str]) -> datetime:
    """Parse a CLI --now value (ISO 8601); falls back to the current UTC time."""
    if not val:
        return utc_now()
    try:
        return to_naive_utc(datetime.fromisoformat(val))
    except ValueError:
        raise ValueError(f"Cannot parse --now value: {val}. Expected ISO 8601, e.g. 2025-06-15T18:00")
