"""
Notification tests.

Verifies:
- Users see their own rows plus broadcasts
- Only admins create notifications
- Read flags are per-user
"""

from merrily.services import notification_service


class TestNotificationFeed:

    def test_own_rows_and_broadcasts(self, app, client, staff_headers, profiles):
        with app.app_context():
            notification_service.notify_user(user_id="staff-1", type="info", title="For Hana", message="")
            notification_service.notify_user(user_id="staff-2", type="info", title="For Ken", message="")
            notification_service.broadcast(type="announcement", title="Closed Monday", message="")

        titles = [n["title"] for n in client.get("/api/notifications", headers=staff_headers).json]
        assert sorted(titles) == ["Closed Monday", "For Hana"]
        # the broadcast is listed but has no per-user read flag to clear
        assert client.get("/api/notifications/unread-count", headers=staff_headers).json == {"count": 1}
        unread = client.get("/api/notifications?unread_only=1", headers=staff_headers).json
        assert [n["title"] for n in unread] == ["For Hana"]

    def test_read_all_clears_count_with_broadcast(self, app, client, staff_headers, profiles):
        with app.app_context():
            notification_service.notify_user(user_id="staff-1", type="info", title="For Hana", message="")
            notification_service.broadcast(type="announcement", title="Closed Monday", message="")

        client.post("/api/notifications/read-all", headers=staff_headers)
        assert client.get("/api/notifications/unread-count", headers=staff_headers).json == {"count": 0}
        feed = client.get("/api/notifications", headers=staff_headers).json
        assert all(n["is_read"] for n in feed)
        assert len(feed) == 2

    def test_limit_is_clamped(self, app, client, staff_headers, profiles):
        with app.app_context():
            for i in range(3):
                notification_service.notify_user(user_id="staff-1", type="info", title=f"n{i}", message="")

        assert len(client.get("/api/notifications?limit=0", headers=staff_headers).json) == 1
        assert len(client.get("/api/notifications?limit=2", headers=staff_headers).json) == 2

    def test_mark_read_and_read_all(self, app, client, staff_headers, other_headers, profiles):
        with app.app_context():
            first = notification_service.notify_user(user_id="staff-1", type="info", title="a", message="").id
            notification_service.notify_user(user_id="staff-1", type="info", title="b", message="")
            notification_service.notify_user(user_id="staff-1", type="info", title="c", message="")

        # someone else's notification is invisible to the caller
        assert client.patch(f"/api/notifications/{first}/read", headers=other_headers).status_code == 404

        resp = client.patch(f"/api/notifications/{first}/read", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["is_read"] is True

        unread = client.get("/api/notifications?unread_only=true", headers=staff_headers).json
        assert sorted(n["title"] for n in unread) == ["b", "c"]

        assert client.post("/api/notifications/read-all", headers=staff_headers).json == {"success": True, "updated": 2}
        assert client.get("/api/notifications/unread-count", headers=staff_headers).json == {"count": 0}

    def test_requires_auth(self, client, db_session):
        assert client.get("/api/notifications").status_code == 401


class TestCreateNotification:

    def test_staff_forbidden(self, client, staff_headers, profiles):
        resp = client.post("/api/notifications", headers=staff_headers, json={"title": "Hi"})
        assert resp.status_code == 403

    def test_admin_broadcast(self, client, admin_headers, staff_headers, profiles):
        resp = client.post("/api/notifications", headers=admin_headers, json={
            "title": "Inventory day", "message": "Come in at 8", "link": "/attendance",
        })
        assert resp.status_code == 201
        assert resp.json["user_id"] is None
        assert resp.json["type"] == "announcement"
        assert resp.json["push"] == {
            "title": "Inventory day",
            "body": "Come in at 8",
            "icon": "/icon-192x192.png",
            "badge": "/icon-192x192.png",
            "tag": "merrily-notification",
            "data": {"url": "/attendance"},
        }

        feed = client.get("/api/notifications", headers=staff_headers).json
        assert [n["link"] for n in feed] == ["/attendance"]

    def test_admin_targeted(self, client, admin_headers, other_headers, profiles):
        resp = client.post("/api/notifications", headers=admin_headers, json={
            "title": "Shift swap", "user_id": "staff-1", "data": {"shift": 3},
        })
        assert resp.status_code == 201
        assert resp.json["user_id"] == "staff-1"
        assert resp.json["link"] == "/"
        assert resp.json["data"] == {"shift": 3}
        assert client.get("/api/notifications", headers=other_headers).json == []

    def test_profile_flag_grants_admin(self, client, staff_headers, profiles, db_session):
        profiles[1].is_admin = True
        db_session.commit()
        assert client.post("/api/notifications", headers=staff_headers, json={"title": "Hi"}).status_code == 201

    def test_title_required(self, client, admin_headers, profiles):
        assert client.post("/api/notifications", headers=admin_headers, json={"title": " "}).status_code == 400


class TestPushPayload:

    def test_defaults(self):
        payload = notification_service.build_push_payload(title="", body="New post")
        assert payload["title"] == "MERRILY"
        assert payload["icon"] == "/icon-192x192.png"
        assert payload["data"] == {"url": "/"}
