# Overview: HTTP client for the hosted auth and object-storage platform.

"""
Hosted Platform Client

The relational data lives in the platform's Postgres (reached through
SQLAlchemy). Everything else the platform owns is reached over HTTP here:
- auth: token verification, sign-up, admin user management
- storage: object upload/removal and public URLs

Two handles, mirroring the platform's key model:
- user_client(token): anon key + the caller's access token (caller privileges)
- admin_client(): service-role key (server-only, bypasses row policies)
"""
from __future__ import annotations

from urllib.parse import quote

import httpx


class PlatformError(Exception):
    """Raised when the hosted platform rejects or fails a call."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PlatformNotConfiguredError(PlatformError):
    """Raised when a call needs a key or URL that is not configured."""


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class PlatformClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not base_url or not api_key:
            raise PlatformNotConfiguredError("Platform URL and key must be configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"apikey": api_key},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self, extra: dict | None = None) -> dict:
        bearer = self.access_token or self.api_key
        headers = {"Authorization": f"Bearer {bearer}"}
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = self._headers(kwargs.pop("headers", None))
        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise PlatformError(f"Platform request failed: {e}") from e
        if response.status_code >= 400:
            raise PlatformError(_error_message(response), status_code=response.status_code)
        return response

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def get_user(self) -> dict | None:
        """Resolve the bound access token to a user. None if the token is rejected."""
        if not self.access_token:
            return None
        try:
            response = self._request("GET", "/auth/v1/user")
        except PlatformError as e:
            if e.status_code in (401, 403):
                return None
            raise
        return response.json()

    def sign_up(self, *, email: str, password: str, data: dict | None = None) -> dict:
        response = self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": data or {}},
        )
        body = response.json()
        # Depending on email confirmation settings the user is nested or top-level
        if isinstance(body, dict) and "user" in body:
            return body["user"]
        return body

    def admin_list_users(self, *, page: int = 1, per_page: int = 200) -> list[dict]:
        response = self._request(
            "GET",
            "/auth/v1/admin/users",
            params={"page": page, "per_page": per_page},
        )
        body = response.json()
        if isinstance(body, dict):
            return body.get("users", [])
        return body

    def admin_update_user(self, user_id: str, *, user_metadata: dict) -> dict:
        response = self._request(
            "PUT",
            f"/auth/v1/admin/users/{quote(user_id)}",
            json={"user_metadata": user_metadata},
        )
        return response.json()

    def admin_delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/auth/v1/admin/users/{quote(user_id)}")

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
        cache_control: str = "3600",
    ) -> str:
        self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            content=content,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
                "cache-control": f"max-age={cache_control}",
            },
        )
        return path

    def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        self._request(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            json={"prefixes": paths},
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(path)}"


def storage_path_from_public_url(url: str, bucket: str) -> str | None:
    """Inverse of public_url(): the object path inside bucket, if url points there."""
    marker = f"/{bucket}/"
    if marker not in url:
        return None
    return url.split(marker, 1)[1] or None


class Platform:
    """Flask extension holding platform settings and producing client handles."""

    def __init__(self, app=None):
        self.base_url = ""
        self.anon_key = ""
        self.service_role_key = ""
        self.timeout = 10.0
        # Optional httpx transport shared by every handle (tests mount a MockTransport here)
        self.transport = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.base_url = app.config.get("PLATFORM_URL", "")
        self.anon_key = app.config.get("PLATFORM_ANON_KEY", "")
        self.service_role_key = app.config.get("PLATFORM_SERVICE_ROLE_KEY", "")
        self.timeout = app.config.get("PLATFORM_TIMEOUT_SECONDS", 10.0)
        app.extensions["platform"] = self

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.anon_key)

    @property
    def has_service_role(self) -> bool:
        return bool(self.service_role_key)

    def user_client(self, access_token: str | None) -> PlatformClient:
        return PlatformClient(
            self.base_url,
            self.anon_key,
            access_token=access_token,
            timeout=self.timeout,
            transport=self.transport,
        )

    def admin_client(self) -> PlatformClient:
        return PlatformClient(
            self.base_url,
            self.service_role_key or self.anon_key,
            timeout=self.timeout,
            transport=self.transport,
        )
