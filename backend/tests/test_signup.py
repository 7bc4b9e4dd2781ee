"""
Self-service sign-up tests.
"""

import pytest

from merrily.models import Notification, UserProfile


def _payload(**overrides):
    payload = {"email": "new@merrily.test", "password": "latte2026", "display_name": "Mio"}
    payload.update(overrides)
    return payload


class TestSignup:

    def test_creates_profile_and_welcome(self, client, db_session):
        resp = client.post("/api/signup", json=_payload(departments=["hall"]))
        assert resp.status_code == 200
        assert resp.json["success"] is True
        assert resp.json["user"]["id"] == "new-user-1"

        profile = db_session.get(UserProfile, "new-user-1")
        assert profile.display_name == "Mio"
        assert profile.departments == ["hall"]
        assert profile.is_admin is False

        [welcome] = db_session.query(Notification).filter_by(user_id="new-user-1").all()
        assert welcome.type == "welcome"

    @pytest.mark.parametrize("password", ["short1", "lettersonly", "12345678", "pass word1"])
    def test_password_rule(self, client, db_session, password):
        resp = client.post("/api/signup", json=_payload(password=password))
        assert resp.status_code == 400
        assert "Password" in resp.json["error"]

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/signup", json=_payload(display_name="")).status_code == 400

    def test_platform_rejection(self, client, db_session, platform_stub):
        platform_stub.signup_error = "User already registered"
        resp = client.post("/api/signup", json=_payload())
        assert resp.status_code == 400
        assert resp.json["error"] == "User already registered"
        assert db_session.query(UserProfile).count() == 0

    @pytest.mark.parametrize("field,value", [
        ("password", 12345678),
        ("email", ["new@merrily.test"]),
        ("display_name", {"name": "Mio"}),
    ])
    def test_non_string_fields(self, client, db_session, platform_stub, field, value):
        resp = client.post("/api/signup", json=_payload(**{field: value}))
        assert resp.status_code == 400
        assert resp.json["error"] == f"{field} must be a string"
        assert platform_stub.called("POST", "/auth/v1/signup") == []
