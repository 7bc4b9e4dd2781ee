from __future__ import annotations
import re
from datetime import date, datetime, time
from merrily.time_utils import parse_iso_datetime, parse_iso_date, parse_clock_time

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Date, Float, Integer, JSON, String, Text, DateTime, Time
from sqlalchemy.orm import DeclarativeMeta


# Upper bound for any single price or amount (JPY)
MAX_AMOUNT = 99_999_999

# ASCII letters and digits only, at least one of each, 8+ characters
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d]{8,}$")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., double clock-in)."""


class NotFoundError(LookupError):
    """404-level missing (or soft-deleted) row."""


class PermissionDeniedError(PermissionError):
    """403-level ownership or authority failure."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - ignore_unknown: drop non-writable keys instead of rejecting them
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    ignore_unknown: bool = False


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Booleans (checked before Integer: bool is an int subclass)
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Float):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{col.key} must be a number")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, Date):
        if isinstance(value, date):
            return value
        try:
            d = parse_iso_date(str(value))
        except ValueError:
            raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")
        if d is None:
            raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")
        return d

    if isinstance(coltype, Time):
        if isinstance(value, time):
            return value
        try:
            t = parse_clock_time(str(value))
        except ValueError:
            raise ValidationError(f"{col.key} must be a time (HH:MM)")
        if t is None:
            raise ValidationError(f"{col.key} must be a time (HH:MM)")
        return t

    if isinstance(coltype, JSON):
        return value

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    writable = {}
    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            if policy.ignore_unknown:
                continue
            if k not in policy.writable_fields:
                raise ValidationError(f"Field not allowed: {k}")
            raise ValidationError(f"Unknown field: {k}")
        writable[k] = raw

    patch: dict = {}

    for k, raw in writable.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_amounts(patch: dict, *fields: str) -> None:
    """Money fields must be whole, non-negative and below MAX_AMOUNT."""
    for field in fields:
        if field not in patch or patch[field] is None:
            continue
        amount = patch[field]
        if amount < 0:
            raise ValidationError(f"{field} must be >= 0")
        if amount > MAX_AMOUNT:
            raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT}")


def enforce_date_window(start: date | None, end: date | None) -> None:
    if start and end and start > end:
        raise ValidationError("start_date must be on or before end_date")


def enforce_year_month(year: Any, month: Any) -> tuple[int, int]:
    try:
        y = int(year)
        m = int(month)
    except (TypeError, ValueError):
        raise ValidationError("year and month must be integers")
    if not 1 <= m <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 2000 <= y <= 2100:
        raise ValidationError("year is out of range")
    return y, m


def validate_password(password) -> None:
    if not isinstance(password, str) or not PASSWORD_PATTERN.match(password):
        raise ValidationError(
            "Password must be at least 8 characters of letters and digits, including both"
        )


def require_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def optional_date(value: Any, name: str) -> date | None:
    """Query-string date: blank means absent, malformed is a 400."""
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


def truthy_arg(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")
