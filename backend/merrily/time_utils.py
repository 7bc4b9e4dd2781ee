from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context


# Upper bounds (exclusive) of each reporting bucket, in sale-clock hours
TIME_SLOT_BOUNDS = (
    (11, "morning"),
    (14, "lunch"),
    (17, "afternoon"),
)


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_today() -> date:
    """Business date in the shop's timezone."""
    tz_name = "UTC"
    if has_app_context():
        tz_name = current_app.config.get("APP_TIMEZONE", "UTC")
    return datetime.now(ZoneInfo(tz_name)).date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    if dt.tzinfo is None:
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse "YYYY-MM-DD". Raises ValueError on malformed input."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    return date.fromisoformat(s[:10])


def parse_clock_time(value: Optional[str]) -> Optional[time]:
    """Parse "HH:MM" or "HH:MM:SS"."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    return time.fromisoformat(s)


def time_slot_for(value: time) -> str:
    for upper, slot in TIME_SLOT_BOUNDS:
        if value.hour < upper:
            return slot
    return "evening"


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_iso_date(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def to_clock(t: Optional[time]) -> Optional[str]:
    return t.strftime("%H:%M:%S") if t else None


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def as_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Drivers differ on returning aware or naive values; compare in naive UTC."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
