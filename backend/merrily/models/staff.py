from __future__ import annotations

from ..extensions import db
from merrily.time_utils import to_utc_z, to_iso_date


class UserProfile(db.Model):
    """
    Local mirror of an auth-platform user.

    The platform owns credentials and user_metadata; this row carries what
    joins need (display name, avatar) plus the admin flag and department tags.
    """
    __tablename__ = "user_profiles"

    id = db.Column(db.String(64), primary_key=True)  # auth user id (uuid)
    email = db.Column(db.String(255), nullable=True)
    display_name = db.Column(db.String(128), nullable=False)
    avatar_url = db.Column(db.String(512), nullable=True)
    departments = db.Column(db.JSON, nullable=False, default=list)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_public_dict(self) -> dict:
        return {
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "departments": list(self.departments or []),
            "is_admin": self.is_admin,
            "created_at": to_utc_z(self.created_at),
        }


class Attendance(db.Model):
    """
    Staff attendance record.

    LIFECYCLE:
    - OPEN: clock_in set, clock_out null
    - CLOSED: clock_out set, work_hours calculated

    At most one OPEN record per staff_name.
    """
    __tablename__ = "attendance"
    __table_args__ = (
        db.Index("ix_attendance_staff_open", "staff_name", "clock_out"),
        db.Index("ix_attendance_work_date", "work_date", "clock_in"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=True, index=True)
    staff_name = db.Column(db.String(128), nullable=False)
    work_date = db.Column(db.Date, nullable=False)
    clock_in = db.Column(db.DateTime(timezone=True), nullable=False)
    clock_out = db.Column(db.DateTime(timezone=True), nullable=True)
    work_hours = db.Column(db.Float, nullable=True)
    note = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "staff_name": self.staff_name,
            "work_date": to_iso_date(self.work_date),
            "clock_in": to_utc_z(self.clock_in),
            "clock_out": to_utc_z(self.clock_out),
            "work_hours": self.work_hours,
            "note": self.note,
            "status": "OPEN" if self.is_open else "CLOSED",
        }


class ActivityLog(db.Model):
    __tablename__ = "activity_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=True, index=True)
    user_name = db.Column(db.String(128), nullable=True)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "message": self.message,
            "created_at": to_utc_z(self.created_at),
        }
