# Overview: Service-layer operations for UI presets and the single-row public site config.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import UiPreset, SiteConfig
from ..validation import ValidationError, NotFoundError, PermissionDeniedError


def list_presets() -> list[UiPreset]:
    return db.session.query(UiPreset).order_by(UiPreset.display_order.asc(), UiPreset.id.asc()).all()


def _require_name_and_sections(payload) -> tuple[str, object]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    name = str(payload.get("name") or "").strip()
    sections = payload.get("sections")
    if not name or not sections:
        raise ValidationError("name and sections are required")
    if len(name) > 128:
        raise ValidationError("name exceeds max length 128")
    return name, sections


def create_preset(payload: dict) -> UiPreset:
    name, sections = _require_name_and_sections(payload)
    max_order = db.session.query(func.max(UiPreset.display_order)).scalar() or 0
    preset = UiPreset(name=name, sections=sections, is_default=False, display_order=max_order + 1)
    db.session.add(preset)
    db.session.commit()
    return preset


def _editable_preset(preset_id: int, action: str) -> UiPreset:
    preset = db.session.get(UiPreset, preset_id)
    if preset is None:
        raise NotFoundError("Preset not found")
    if preset.is_default:
        raise PermissionDeniedError(f"Cannot {action} default preset")
    return preset


def update_preset(preset_id: int, payload: dict) -> UiPreset:
    name, sections = _require_name_and_sections(payload)
    preset = _editable_preset(preset_id, "update")
    preset.name = name
    preset.sections = sections
    db.session.commit()
    return preset


def delete_preset(preset_id: int) -> None:
    preset = _editable_preset(preset_id, "delete")
    db.session.delete(preset)
    db.session.commit()


def get_site_payload() -> dict | None:
    row = db.session.get(SiteConfig, SiteConfig.SINGLETON_ID)
    return row.payload if row else None


def save_site_payload(payload, updated_by: str | None = None) -> dict:
    """Upsert row 1. The whole payload is replaced, never merged."""
    if not payload:
        raise ValidationError("payload is required")
    if not isinstance(payload, dict):
        raise ValidationError("payload must be an object")

    row = db.session.get(SiteConfig, SiteConfig.SINGLETON_ID)
    if row is None:
        row = SiteConfig(id=SiteConfig.SINGLETON_ID)
        db.session.add(row)
    row.payload = payload
    row.updated_by = updated_by or None
    db.session.commit()
    return row.payload
