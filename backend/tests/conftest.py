"""
Pytest fixtures for MERRILY backend tests.

Provides the in-memory app, a fresh database per test, and a stub of the
hosted platform mounted as an httpx MockTransport.
"""

import json
import re

import httpx
import pytest

from merrily import create_app
from merrily.config import TestConfig
from merrily.extensions import db, platform
from merrily.models import Category, Product, UserProfile


# token -> auth user payload as the platform returns it
PLATFORM_USERS = {
    "admin-token": {
        "id": "admin-1",
        "email": "owner@merrily.test",
        "user_metadata": {"full_name": "Owner", "is_admin": True},
    },
    "staff-token": {
        "id": "staff-1",
        "email": "hana@merrily.test",
        "user_metadata": {"display_name": "Hana"},
    },
    "other-token": {
        "id": "staff-2",
        "email": "ken@merrily.test",
        "user_metadata": {"display_name": "Ken"},
    },
}


class PlatformStub:
    """Answers the auth and storage endpoints the backend calls."""

    def __init__(self):
        self.calls = []
        self.signup_error = None
        self.upload_error = None
        self.deleted_users = []

    def _bearer(self, request):
        header = request.headers.get("Authorization", "")
        return header.split(" ", 1)[1] if header.startswith("Bearer ") else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if request.method == "GET" and path == "/auth/v1/user":
            user = PLATFORM_USERS.get(self._bearer(request))
            if user is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=user)

        if request.method == "POST" and path == "/auth/v1/signup":
            if self.signup_error:
                return httpx.Response(422, json={"msg": self.signup_error})
            body = json.loads(request.content)
            return httpx.Response(200, json={
                "user": {"id": "new-user-1", "email": body["email"], "user_metadata": body["data"]},
            })

        if request.method == "GET" and path == "/auth/v1/admin/users":
            return httpx.Response(200, json={"users": list(PLATFORM_USERS.values())})

        match = re.fullmatch(r"/auth/v1/admin/users/(.+)", path)
        if match:
            user_id = match.group(1)
            known = {u["id"]: u for u in PLATFORM_USERS.values()}
            if user_id not in known:
                return httpx.Response(404, json={"msg": "User not found"})
            if request.method == "PUT":
                body = json.loads(request.content)
                return httpx.Response(200, json={**known[user_id], "user_metadata": body["user_metadata"]})
            if request.method == "DELETE":
                self.deleted_users.append(user_id)
                return httpx.Response(200, json={})

        if path.startswith("/storage/v1/object/"):
            if request.method == "POST" and self.upload_error:
                return httpx.Response(400, json={"message": self.upload_error})
            return httpx.Response(200, json={"Key": path})

        return httpx.Response(404, json={"msg": f"unhandled {request.method} {path}"})

    def called(self, method: str, prefix: str) -> list:
        return [c for c in self.calls if c[0] == method and c[1].startswith(prefix)]


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def platform_stub(app):
    stub = PlatformStub()
    platform.transport = httpx.MockTransport(stub)
    platform.service_role_key = app.config["PLATFORM_SERVICE_ROLE_KEY"]
    yield stub
    platform.transport = None
    platform.service_role_key = app.config["PLATFORM_SERVICE_ROLE_KEY"]


@pytest.fixture(scope='function')
def client(app, platform_stub):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(db_session):
    return auth_headers("admin-token")


@pytest.fixture
def staff_headers(db_session):
    return auth_headers("staff-token")


@pytest.fixture
def other_headers(db_session):
    return auth_headers("other-token")


@pytest.fixture
def category(db_session):
    category = Category(name="Drinks", description="Coffee and tea", display_order=1)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def products(db_session, category):
    """Latte (500/150) and Scone (300/100)."""
    latte = Product(category_id=category.id, name="Latte", selling_price=500, cost_price=150)
    scone = Product(category_id=category.id, name="Scone", selling_price=300, cost_price=100)
    db_session.add_all([latte, scone])
    db_session.commit()
    return latte, scone


@pytest.fixture
def profiles(db_session):
    """Local mirrors for every platform user, as after their first request."""
    rows = [
        UserProfile(id="admin-1", email="owner@merrily.test", display_name="Owner", departments=[], is_admin=True),
        UserProfile(id="staff-1", email="hana@merrily.test", display_name="Hana", departments=["kitchen"]),
        UserProfile(id="staff-2", email="ken@merrily.test", display_name="Ken", departments=[]),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows
