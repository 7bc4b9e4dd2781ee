# Overview: Mirrors browser auth events into server-held session cookies.

"""
Session Service

The browser signs in directly against the hosted platform. It then posts the
auth event here so that server-rendered requests carry the same session in
HttpOnly cookies. No tokens are minted or refreshed by this application.
"""
from __future__ import annotations

from flask import current_app

from . import activity_service
from .auth_service import user_from_payload

EVENT_SIGNED_IN = "SIGNED_IN"
EVENT_SIGNED_OUT = "SIGNED_OUT"
EVENT_TOKEN_REFRESHED = "TOKEN_REFRESHED"

# Refresh tokens outlive access tokens; keep the cookie for 30 days
REFRESH_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


class SessionError(ValueError):
    """Raised for malformed auth-event payloads."""
    pass


def _cookie_kwargs() -> dict:
    return {
        "httponly": True,
        "samesite": "Lax",
        "secure": current_app.config.get("SESSION_COOKIE_SECURE", False),
        "path": "/",
    }


def set_session_cookies(response, session: dict) -> None:
    access_token = session.get("access_token")
    if not access_token:
        raise SessionError("session.access_token is required")

    try:
        max_age = int(session.get("expires_in") or 3600)
    except (TypeError, ValueError):
        max_age = 3600

    response.set_cookie(
        current_app.config["ACCESS_TOKEN_COOKIE"],
        access_token,
        max_age=max_age,
        **_cookie_kwargs(),
    )
    refresh_token = session.get("refresh_token")
    if refresh_token:
        response.set_cookie(
            current_app.config["REFRESH_TOKEN_COOKIE"],
            refresh_token,
            max_age=REFRESH_COOKIE_MAX_AGE,
            **_cookie_kwargs(),
        )


def clear_session_cookies(response) -> None:
    for name in (current_app.config["ACCESS_TOKEN_COOKIE"], current_app.config["REFRESH_TOKEN_COOKIE"]):
        response.delete_cookie(name, path="/")


def apply_auth_event(response, event: str, session: dict | None) -> None:
    """
    Apply a browser auth event to the outgoing response.

    - SIGNED_IN / TOKEN_REFRESHED with a session: store cookies
      (SIGNED_IN also writes a login activity entry)
    - SIGNED_OUT: clear cookies
    - anything else: no-op
    """
    if event in (EVENT_SIGNED_IN, EVENT_TOKEN_REFRESHED) and session:
        if not isinstance(session, dict):
            raise SessionError("session must be an object")
        set_session_cookies(response, session)

        if event == EVENT_SIGNED_IN and isinstance(session.get("user"), dict) and session["user"].get("id"):
            user = user_from_payload(session["user"])
            name = user.user_metadata.get("full_name") or user.email or "Signed-in user"
            activity_service.log_activity("login", name, user.id)
        return

    if event == EVENT_SIGNED_OUT:
        clear_session_cookies(response)
