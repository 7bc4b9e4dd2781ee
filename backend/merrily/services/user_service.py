# Overview: Service-layer operations for user profiles and admin user management.

"""
User Service

Two sources of truth are kept in step:
- auth-platform user_metadata (full_name, departments, is_admin)
- the local user_profiles mirror used for joins and admin checks

Admin operations go through the platform's service-role handle.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db, platform
from ..models import UserProfile, Notification, Post
from ..platform import PlatformError
from ..validation import ValidationError, NotFoundError
from merrily.time_utils import utcnow

PROFILE_MUTABLE_FIELDS = {"display_name", "avatar_url", "departments"}


def _clean_departments(value) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError("departments must be a list")
    cleaned = []
    for item in value:
        tag = str(item).strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def get_profile(user_id: str) -> UserProfile | None:
    return db.session.get(UserProfile, user_id)


def ensure_profile(user) -> UserProfile:
    """Return the caller's profile, creating it from auth metadata if missing."""
    profile = get_profile(user.id)
    if profile is not None:
        return profile

    profile = UserProfile(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        departments=user.departments,
        is_admin=user.metadata_is_admin,
    )
    db.session.add(profile)
    db.session.commit()
    current_app.logger.info("Created profile for user=%s", user.id)
    return profile


def create_profile(*, user_id: str, email: str | None, display_name: str, departments=None) -> UserProfile:
    profile = UserProfile(
        id=user_id,
        email=email,
        display_name=display_name,
        departments=_clean_departments(departments),
        is_admin=False,
    )
    db.session.add(profile)
    db.session.commit()
    return profile


def update_own_profile(profile: UserProfile, patch: dict) -> UserProfile:
    for key, value in patch.items():
        if key not in PROFILE_MUTABLE_FIELDS:
            raise ValidationError(f"Field not allowed: {key}")
        if key == "departments":
            profile.departments = _clean_departments(value)
        elif key == "display_name":
            name = str(value or "").strip()
            if not name:
                raise ValidationError("display_name cannot be blank")
            profile.display_name = name[:128]
        else:
            profile.avatar_url = (str(value).strip() or None) if value is not None else None
    db.session.commit()
    return profile


def _summarize_auth_user(payload: dict) -> dict:
    meta = payload.get("user_metadata") or {}
    departments = meta.get("departments")
    return {
        "id": payload.get("id"),
        "email": payload.get("email"),
        "full_name": meta.get("full_name") or "",
        "departments": departments if isinstance(departments, list) else [],
        "is_admin": meta.get("is_admin") is True or meta.get("role") == "admin",
    }


def list_auth_users() -> list[dict]:
    with platform.admin_client() as client:
        users = client.admin_list_users()
    return [_summarize_auth_user(u) for u in users]


def update_auth_user(user_id: str, *, full_name: str | None, departments, is_admin: bool) -> dict:
    """Write metadata to the platform, then mirror it into user_profiles."""
    metadata = {
        "full_name": (full_name or "").strip(),
        "departments": _clean_departments(departments) if isinstance(departments, list) else [],
        "is_admin": bool(is_admin),
    }
    with platform.admin_client() as client:
        payload = client.admin_update_user(user_id, user_metadata=metadata)

    auth_user = payload.get("user", payload) if isinstance(payload, dict) else {}
    summary = _summarize_auth_user(auth_user or {"id": user_id, "user_metadata": metadata})

    profile = get_profile(user_id)
    if profile is None:
        profile = UserProfile(
            id=user_id,
            email=summary.get("email"),
            display_name=metadata["full_name"] or (summary.get("email") or "User").split("@", 1)[0],
        )
        db.session.add(profile)
    elif metadata["full_name"]:
        profile.display_name = metadata["full_name"]
    profile.departments = metadata["departments"]
    profile.is_admin = metadata["is_admin"]
    db.session.commit()

    return summary


def _purge_local_user_rows(user_id: str) -> None:
    db.session.query(Notification).filter(Notification.user_id == user_id).delete(synchronize_session=False)
    db.session.query(Post).filter(
        Post.user_id == user_id,
        Post.deleted_at.is_(None),
    ).update({"deleted_at": utcnow()}, synchronize_session=False)
    profile = get_profile(user_id)
    if profile is not None:
        db.session.delete(profile)
    db.session.commit()


def delete_user(*, actor_id: str, user_id: str) -> dict:
    """
    Remove a member.

    Deletes the auth user with the service-role handle, then clears the local
    mirror: profile and notifications are deleted, posts are soft-deleted.
    Without a service-role key only the local rows are cleared.
    """
    if actor_id == user_id:
        raise ValidationError("You cannot delete your own account")

    if not platform.has_service_role:
        current_app.logger.warning("No service-role key; deleting local rows only for user=%s", user_id)
        _purge_local_user_rows(user_id)
        return {
            "success": True,
            "message": "Member data removed. Delete the auth user from the platform console.",
            "warning": "Service-role key is not configured; the auth user was not deleted.",
        }

    try:
        with platform.admin_client() as client:
            client.admin_delete_user(user_id)
    except PlatformError as e:
        if e.status_code == 404:
            raise NotFoundError("User not found")
        raise

    _purge_local_user_rows(user_id)
    return {"success": True, "message": "Member deleted"}
