# Overview: Service-layer operations for authentication; resolves platform tokens to users.

"""
Authentication Service

Credentials, token issuance and refresh belong to the hosted platform.
This module only:
- extracts the caller's access token (Authorization header or session cookie)
- asks the platform who the token belongs to
- derives admin authority from auth metadata and the local profile
"""
from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..extensions import platform


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None
    user_metadata: dict = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        meta = self.user_metadata or {}
        name = meta.get("display_name") or meta.get("full_name")
        if name:
            return str(name)
        if self.email:
            return self.email.split("@", 1)[0]
        return "User"

    @property
    def metadata_is_admin(self) -> bool:
        meta = self.user_metadata or {}
        return meta.get("is_admin") is True or meta.get("role") == "admin"

    @property
    def departments(self) -> list[str]:
        departments = (self.user_metadata or {}).get("departments")
        return list(departments) if isinstance(departments, list) else []


def user_from_payload(payload: dict) -> AuthUser:
    return AuthUser(
        id=str(payload["id"]),
        email=payload.get("email"),
        user_metadata=dict(payload.get("user_metadata") or {}),
    )


def extract_access_token(request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    cookie_name = current_app.config.get("ACCESS_TOKEN_COOKIE", "merrily-access-token")
    return request.cookies.get(cookie_name) or None


def fetch_user(access_token: str) -> AuthUser | None:
    """
    Resolve an access token through the platform.

    Returns None for rejected tokens. Raises PlatformError when the platform
    itself is unreachable or misconfigured.
    """
    with platform.user_client(access_token) as client:
        payload = client.get_user()
    if not payload or "id" not in payload:
        return None
    return user_from_payload(payload)


def is_admin(user: AuthUser, profile=None) -> bool:
    if user.metadata_is_admin:
        return True
    return bool(profile is not None and profile.is_admin)
