from __future__ import annotations

from ..extensions import db
from merrily.time_utils import to_utc_z


class UiPreset(db.Model):
    """Named set of theme sections. Default presets ship read-only."""
    __tablename__ = "ui_presets"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    sections = db.Column(db.JSON, nullable=False)
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sections": self.sections,
            "is_default": self.is_default,
            "display_order": self.display_order,
            "created_at": to_utc_z(self.created_at),
        }


class SiteConfig(db.Model):
    """Single-row JSON document holding the public site's branding."""
    __tablename__ = "pr_site"

    SINGLETON_ID = 1

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    payload = db.Column(db.JSON, nullable=False)
    updated_by = db.Column(db.String(128), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "payload": self.payload,
            "updated_by": self.updated_by,
            "updated_at": to_utc_z(self.updated_at),
        }
