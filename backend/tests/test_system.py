"""
Health, activity log and app-level error handling tests.
"""


class TestHealth:

    def test_healthy(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["checks"]["platform"] == {"configured": True, "service_role": True}


class TestActivityLog:

    def test_create_and_list(self, client, db_session):
        resp = client.post("/api/logs", json={"message": "Opened the shop", "user_name": "Hana"})
        assert resp.status_code == 201
        client.post("/api/logs", json={"message": "Closed the shop"})

        entries = client.get("/api/logs").json
        assert {e["message"] for e in entries} == {"Opened the shop", "Closed the shop"}

    def test_message_required(self, client, db_session):
        assert client.post("/api/logs", json={"message": "  "}).status_code == 400


class TestAppErrors:

    def test_unknown_route_is_json(self, client, db_session):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json == {"error": "Not found"}

    def test_wrong_method_is_json(self, client, db_session):
        resp = client.patch("/api/health")
        assert resp.status_code == 405
        assert resp.json == {"error": "Method not allowed"}

    def test_cors_for_allowed_origin(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        assert resp.headers["Access-Control-Allow-Credentials"] == "true"

        resp = client.get("/api/health", headers={"Origin": "https://evil.test"})
        assert "Access-Control-Allow-Origin" not in resp.headers
