# Overview: Service-layer operations for the staff activity log.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ActivityLog


def log_activity(message: str, user_name: str | None = None, user_id: str | None = None) -> ActivityLog | None:
    """Append an activity row. Failures are logged and swallowed; callers never depend on it."""
    try:
        entry = ActivityLog(message=message, user_name=user_name, user_id=user_id)
        db.session.add(entry)
        db.session.commit()
        return entry
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to write activity log")
        return None


def create_entry(*, message: str, user_name: str | None, user_id: str | None) -> ActivityLog:
    entry = ActivityLog(message=message, user_name=user_name, user_id=user_id)
    db.session.add(entry)
    db.session.commit()
    return entry


def recent_entries(limit: int = 50) -> list[ActivityLog]:
    return (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
