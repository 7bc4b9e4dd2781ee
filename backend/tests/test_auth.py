"""
Auth bridge tests: session cookies and the current-user endpoint.
"""

from merrily.models import ActivityLog


def _cookie(resp, name):
    return [h for h in resp.headers.getlist("Set-Cookie") if h.startswith(f"{name}=")]


class TestAuthCallback:

    def test_signed_in_sets_cookies_and_logs(self, client, db_session):
        resp = client.post("/auth/callback", json={
            "event": "SIGNED_IN",
            "session": {
                "access_token": "staff-token",
                "refresh_token": "refresh-1",
                "expires_in": 600,
                "user": {"id": "staff-1", "email": "hana@merrily.test", "user_metadata": {"full_name": "Hana"}},
            },
        })
        assert resp.status_code == 200
        [access] = _cookie(resp, "merrily-access-token")
        assert "HttpOnly" in access
        assert "Max-Age=600" in access
        assert _cookie(resp, "merrily-refresh-token")

        [entry] = db_session.query(ActivityLog).all()
        assert (entry.message, entry.user_name, entry.user_id) == ("login", "Hana", "staff-1")

    def test_cookie_authenticates_requests(self, client, db_session):
        client.post("/auth/callback", json={"event": "TOKEN_REFRESHED", "session": {"access_token": "staff-token"}})
        resp = client.get("/api/me")
        assert resp.status_code == 200
        assert resp.json["user"]["id"] == "staff-1"
        assert db_session.query(ActivityLog).count() == 0

    def test_signed_out_clears_cookies(self, client, db_session):
        resp = client.post("/auth/callback", json={"event": "SIGNED_OUT"})
        assert resp.status_code == 200
        [access] = _cookie(resp, "merrily-access-token")
        assert "Max-Age=0" in access or "Expires=Thu, 01 Jan 1970" in access

    def test_unknown_event_is_noop(self, client, db_session):
        resp = client.post("/auth/callback", json={"event": "USER_UPDATED"})
        assert resp.status_code == 200
        assert resp.headers.getlist("Set-Cookie") == []

    def test_bad_payloads(self, client, db_session):
        assert client.post("/auth/callback", json={}).status_code == 400
        resp = client.post("/auth/callback", json={"event": "SIGNED_IN", "session": {"refresh_token": "r"}})
        assert resp.status_code == 400


class TestMe:

    def test_admin_flag_from_metadata(self, client, admin_headers):
        resp = client.get("/api/me", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["is_admin"] is True
        assert resp.json["profile"]["id"] == "admin-1"

    def test_staff(self, client, staff_headers):
        resp = client.get("/api/me", headers=staff_headers)
        assert resp.json["is_admin"] is False
        assert resp.json["profile"]["display_name"] == "Hana"

    def test_rejected_token(self, client, db_session):
        resp = client.get("/api/me", headers={"Authorization": "Bearer expired"})
        assert resp.status_code == 401
