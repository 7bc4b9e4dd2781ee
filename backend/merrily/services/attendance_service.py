# Overview: Service-layer operations for staff attendance (clock-in/clock-out).

"""
Attendance Service

A record is OPEN while clock_out is null. Each staff member has at most one
OPEN record: clock-in checks for one inside the same transaction and
re-checks before commit. Closing a record computes work_hours.
"""
from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import Attendance
from ..validation import ValidationError, ConflictError, NotFoundError
from merrily.time_utils import utcnow, local_today, parse_iso_date, parse_iso_datetime, parse_clock_time, as_naive_utc

DEFAULT_LIST_LIMIT = 200


def _open_query(*, staff_name: str | None = None, user_id: str | None = None):
    query = db.session.query(Attendance).filter(Attendance.clock_out.is_(None))
    if user_id:
        query = query.filter(Attendance.user_id == user_id)
    if staff_name:
        query = query.filter(Attendance.staff_name == staff_name)
    return query


def _work_hours(clock_in: datetime, clock_out: datetime) -> float:
    return round((as_naive_utc(clock_out) - as_naive_utc(clock_in)).total_seconds() / 3600, 2)


def _parse_clock(value, work_date, name: str) -> datetime | None:
    """Accept a full ISO datetime, or HH:MM combined with work_date."""
    if value in (None, ""):
        return None
    raw = str(value).strip()
    try:
        if "T" in raw or len(raw) > 8:
            return parse_iso_datetime(raw)
        return datetime.combine(work_date, parse_clock_time(raw))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an ISO-8601 datetime or HH:MM")


def list_records(
    *,
    staff_name: str | None = None,
    user_id: str | None = None,
    open_only: bool = False,
    limit: int | None = None,
) -> list[Attendance]:
    query = db.session.query(Attendance)
    if staff_name:
        query = query.filter(Attendance.staff_name == staff_name)
    if user_id:
        query = query.filter(Attendance.user_id == user_id)
    if open_only:
        query = query.filter(Attendance.clock_out.is_(None))
    return (
        query.order_by(Attendance.work_date.desc(), Attendance.clock_in.desc(), Attendance.id.desc())
        .limit(min(max(limit or DEFAULT_LIST_LIMIT, 1), DEFAULT_LIST_LIMIT))
        .all()
    )


def create_record(payload: dict) -> Attendance:
    """Manual entry from the admin attendance screen."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    staff_name = (payload.get("staff_name") or "").strip()
    if not staff_name or not payload.get("work_date") or not payload.get("clock_in"):
        raise ValidationError("staff_name, work_date, clock_in are required")
    try:
        work_date = parse_iso_date(payload["work_date"])
    except ValueError:
        raise ValidationError("work_date must be a date (YYYY-MM-DD)")

    clock_in = _parse_clock(payload["clock_in"], work_date, "clock_in")
    clock_out = _parse_clock(payload.get("clock_out"), work_date, "clock_out")
    if clock_out and clock_out < clock_in:
        raise ValidationError("clock_out must be after clock_in")

    if clock_out is None and _open_query(staff_name=staff_name).first():
        raise ConflictError(f"{staff_name} already has an open attendance record")

    record = Attendance(
        user_id=payload.get("user_id") or None,
        staff_name=staff_name,
        work_date=work_date,
        clock_in=clock_in,
        clock_out=clock_out,
        work_hours=_work_hours(clock_in, clock_out) if clock_out else None,
        note=payload.get("note") or None,
    )
    db.session.add(record)
    db.session.commit()
    return record


def clock_in(*, user_id: str, staff_name: str, note: str | None = None) -> Attendance:
    if _open_query(user_id=user_id).first() or _open_query(staff_name=staff_name).first():
        raise ConflictError("Already clocked in")

    record = Attendance(
        user_id=user_id,
        staff_name=staff_name,
        work_date=local_today(),
        clock_in=utcnow(),
        note=note,
    )
    db.session.add(record)
    db.session.flush()

    # A concurrent request may have inserted between the check and the flush
    if _open_query(staff_name=staff_name).count() > 1:
        db.session.rollback()
        raise ConflictError("Already clocked in")

    db.session.commit()
    return record


def clock_out(*, user_id: str | None = None, staff_name: str | None = None, note: str | None = None) -> Attendance:
    if not user_id and not staff_name:
        raise ValidationError("user_id or staff_name is required")
    record = (
        _open_query(user_id=user_id, staff_name=staff_name)
        .order_by(Attendance.clock_in.desc())
        .first()
    )
    if record is None:
        raise NotFoundError("No open attendance record")

    record.clock_out = utcnow()
    record.work_hours = _work_hours(record.clock_in, record.clock_out)
    if note:
        record.note = note
    db.session.commit()
    return record


def current_record(user_id: str) -> Attendance | None:
    return _open_query(user_id=user_id).order_by(Attendance.clock_in.desc()).first()


def update_record(record_id: int, payload: dict) -> Attendance:
    record = db.session.get(Attendance, record_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if "clock_in" in payload:
        clock_in = _parse_clock(payload["clock_in"], record.work_date, "clock_in")
        if clock_in is None:
            raise ValidationError("clock_in cannot be null")
        record.clock_in = clock_in
    if "clock_out" in payload:
        record.clock_out = _parse_clock(payload["clock_out"], record.work_date, "clock_out")
    if "note" in payload:
        record.note = payload["note"] or None

    if record.clock_out is not None:
        if as_naive_utc(record.clock_out) < as_naive_utc(record.clock_in):
            raise ValidationError("clock_out must be after clock_in")
        record.work_hours = _work_hours(record.clock_in, record.clock_out)
    else:
        record.work_hours = None
        # Reopening a closed record must not leave the staff member with two open shifts
        others = _open_query(staff_name=record.staff_name).filter(Attendance.id != record.id)
        if record.user_id:
            others = others.union(
                _open_query(user_id=record.user_id).filter(Attendance.id != record.id)
            )
        if others.first() is not None:
            db.session.rollback()
            raise ConflictError(f"{record.staff_name} already has an open attendance record")
    db.session.commit()
    return record


def delete_record(record_id: int) -> None:
    record = db.session.get(Attendance, record_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    db.session.delete(record)
    db.session.commit()
