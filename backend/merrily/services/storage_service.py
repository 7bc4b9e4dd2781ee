# Overview: Image uploads to the hosted platform's object storage.

from __future__ import annotations

import re
import time

from flask import current_app

from ..extensions import platform
from ..platform import PlatformError, storage_path_from_public_url
from ..validation import ValidationError

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp"}

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", name or "file")


def _now_ms() -> int:
    return int(time.time() * 1000)


def validate_image(*, content_type: str | None, size: int) -> None:
    max_bytes = current_app.config.get("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)
    if size <= 0:
        raise ValidationError("No file provided")
    if size > max_bytes:
        raise ValidationError(f"File size exceeds {max_bytes // (1024 * 1024)}MB")
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Invalid file type. Only PNG, JPEG, and WebP are allowed")


def upload_blog_image(*, file_name: str, content: bytes, content_type: str, access_token: str) -> dict:
    """Upload an editor image under '<ms>-<sanitized name>' and return its public URL."""
    validate_image(content_type=content_type, size=len(content))
    bucket = current_app.config["BLOG_IMAGE_BUCKET"]
    stored_name = f"{_now_ms()}-{sanitize_file_name(file_name)}"

    with platform.user_client(access_token) as client:
        client.upload(bucket, stored_name, content, content_type=content_type, upsert=False)
        url = client.public_url(bucket, stored_name)

    current_app.logger.info("Uploaded blog image bucket=%s name=%s bytes=%s", bucket, stored_name, len(content))
    return {"success": True, "url": url, "file_name": stored_name}


def upload_post_images(*, user_id: str, files: list, access_token: str) -> list[str]:
    """
    Upload post images under '<user_id>/<ms>.<ext>'.

    files: iterable of (filename, content_type, bytes). Empty files are skipped.
    A failed upload is logged and skipped; the post is still created.
    """
    bucket = current_app.config["POST_IMAGE_BUCKET"]
    urls: list[str] = []
    with platform.user_client(access_token) as client:
        for index, (filename, content_type, content) in enumerate(files):
            if not content:
                continue
            ext = (filename.rsplit(".", 1)[-1] if "." in (filename or "") else "bin").lower()
            path = f"{user_id}/{_now_ms()}-{index}.{ext}"
            try:
                client.upload(bucket, path, content, content_type=content_type or "application/octet-stream")
            except PlatformError:
                current_app.logger.exception("Post image upload failed path=%s", path)
                continue
            urls.append(client.public_url(bucket, path))
    return urls


def remove_post_images(*, urls: list[str], access_token: str) -> None:
    """Best-effort removal of stored post images."""
    bucket = current_app.config["POST_IMAGE_BUCKET"]
    paths = [p for p in (storage_path_from_public_url(u, bucket) for u in urls or []) if p]
    if not paths:
        return
    try:
        with platform.user_client(access_token) as client:
            client.remove(bucket, paths)
    except PlatformError:
        current_app.logger.exception("Failed to remove post images")
