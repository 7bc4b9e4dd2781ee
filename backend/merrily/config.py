# backend/merrily/config.py
from __future__ import annotations
import os


def _env_list(name: str, default: str) -> set[str]:
    raw = os.environ.get(name, default)
    return {item.strip() for item in raw.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Hosted Postgres in production; local SQLite file otherwise
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///merrily.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Hosted auth + storage platform
    PLATFORM_URL = os.environ.get("PLATFORM_URL", "")
    PLATFORM_ANON_KEY = os.environ.get("PLATFORM_ANON_KEY", "")
    # Falls back to the anon key when unset; admin-only calls then fail upstream
    PLATFORM_SERVICE_ROLE_KEY = os.environ.get("PLATFORM_SERVICE_ROLE_KEY", "")
    PLATFORM_TIMEOUT_SECONDS = float(os.environ.get("PLATFORM_TIMEOUT_SECONDS", "10"))

    POST_IMAGE_BUCKET = os.environ.get("POST_IMAGE_BUCKET", "post-images")
    BLOG_IMAGE_BUCKET = os.environ.get("BLOG_IMAGE_BUCKET", "blog-images")
    UPLOAD_MAX_BYTES = int(os.environ.get("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))

    ACCESS_TOKEN_COOKIE = "merrily-access-token"
    REFRESH_TOKEN_COOKIE = "merrily-refresh-token"
    SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE", "false").lower() == "true"

    CORS_ORIGINS = _env_list(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )

    # Business-day boundaries (today's totals, active collections)
    APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "Asia/Tokyo")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PLATFORM_URL = "https://platform.test"
    PLATFORM_ANON_KEY = "anon-test-key"
    PLATFORM_SERVICE_ROLE_KEY = "service-test-key"
    CORS_ORIGINS = {"http://localhost:3000"}
    LOG_LEVEL = "DEBUG"
