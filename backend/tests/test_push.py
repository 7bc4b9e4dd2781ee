"""
Web-push subscription and service worker tests.
"""

SUBSCRIPTION = {
    "endpoint": "https://push.example.test/abc",
    "keys": {"p256dh": "p256-key", "auth": "auth-secret"},
}


class TestSubscriptions:

    def test_subscribe_is_upsert(self, client, staff_headers, db_session):
        first = client.post("/api/push-subscribe", headers=staff_headers, json=SUBSCRIPTION)
        assert first.status_code == 200
        assert first.json["success"] is True

        rotated = {**SUBSCRIPTION, "keys": {"p256dh": "new-key", "auth": "new-auth"}}
        second = client.post("/api/push-subscribe", headers=staff_headers, json={"subscription": rotated})
        assert second.json["subscription"]["id"] == first.json["subscription"]["id"]

    def test_missing_keys(self, client, staff_headers, db_session):
        resp = client.post("/api/push-subscribe", headers=staff_headers, json={"endpoint": "https://x.test"})
        assert resp.status_code == 400

    def test_unsubscribe(self, client, staff_headers, other_headers, db_session):
        client.post("/api/push-subscribe", headers=staff_headers, json=SUBSCRIPTION)

        resp = client.delete("/api/push-subscribe", headers=other_headers, json={"endpoint": SUBSCRIPTION["endpoint"]})
        assert resp.json == {"success": True, "deleted": 0}

        resp = client.delete("/api/push-subscribe", headers=staff_headers, json={"endpoint": SUBSCRIPTION["endpoint"]})
        assert resp.json == {"success": True, "deleted": 1}

    def test_unsubscribe_requires_endpoint(self, client, staff_headers, db_session):
        assert client.delete("/api/push-subscribe", headers=staff_headers, json={}).status_code == 400

    def test_requires_auth(self, client, db_session):
        assert client.post("/api/push-subscribe", json=SUBSCRIPTION).status_code == 401


def test_service_worker_script(client):
    resp = client.get("/sw.js")
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "application/javascript"
    assert resp.headers["Service-Worker-Allowed"] == "/"
    assert resp.headers["Cache-Control"] == "no-cache"
    assert b"notificationclick" in resp.data
    resp.close()
