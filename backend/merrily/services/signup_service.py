# Overview: Self-service member registration through the hosted auth platform.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db, platform
from ..platform import PlatformError
from ..validation import ValidationError, validate_password
from . import notification_service, user_service


class SignupError(ValueError):
    """Raised when the platform refuses the registration (duplicate email, weak password...)."""
    pass


def sign_up(payload: dict) -> dict:
    """
    Register a member.

    1. validate required fields and the password rule
    2. platform sign-up with display_name in user metadata
    3. create the local profile (a failure here still counts as success)
    4. send a welcome notification (best effort)
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    for field in ("email", "password", "display_name"):
        if payload.get(field) is not None and not isinstance(payload[field], str):
            raise ValidationError(f"{field} must be a string")
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""
    display_name = (payload.get("display_name") or "").strip()
    if not email or not password or not display_name:
        raise ValidationError("email, password and display_name are required")
    validate_password(password)

    try:
        with platform.user_client(None) as client:
            auth_user = client.sign_up(email=email, password=password, data={"display_name": display_name})
    except PlatformError as e:
        current_app.logger.warning("Sign-up rejected email=%s: %s", email, e)
        raise SignupError(str(e))

    user_id = (auth_user or {}).get("id")
    if not user_id:
        raise PlatformError("User creation failed")

    try:
        user_service.create_profile(
            user_id=user_id,
            email=email,
            display_name=display_name,
            departments=payload.get("departments") or [],
        )
    except (SQLAlchemyError, ValidationError):
        db.session.rollback()
        current_app.logger.exception("Profile creation failed for new user=%s", user_id)
        return {
            "success": True,
            "message": "Account created, but the profile setup did not finish. Please contact an administrator.",
            "user": auth_user,
        }

    notification_service.safe_notify_user(
        user_id=user_id,
        type=notification_service.TYPE_WELCOME,
        title="Welcome to MERRILY!",
        message="Your account is ready. Take a look at the latest posts!",
        link="/",
    )
    return {"success": True, "message": "Account created", "user": auth_user}
