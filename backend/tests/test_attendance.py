"""
Attendance tests.

Verifies:
- At most one OPEN record per staff member (409 on double clock-in)
- Clock-out closes the caller's record and computes work_hours
- Manual entries accept HH:MM on the work date
"""


class TestClockInOut:

    def test_clock_in_uses_profile_name(self, client, staff_headers):
        resp = client.post("/api/attendance/clock-in", headers=staff_headers, json={})
        assert resp.status_code == 201
        assert resp.json["staff_name"] == "Hana"
        assert resp.json["user_id"] == "staff-1"
        assert resp.json["status"] == "OPEN"

        current = client.get("/api/attendance/current", headers=staff_headers).json
        assert current["record"]["id"] == resp.json["id"]

    def test_double_clock_in_conflicts(self, client, staff_headers):
        assert client.post("/api/attendance/clock-in", headers=staff_headers).status_code == 201
        resp = client.post("/api/attendance/clock-in", headers=staff_headers)
        assert resp.status_code == 409
        assert resp.json["error"] == "Already clocked in"

    def test_clock_out(self, client, staff_headers):
        client.post("/api/attendance/clock-in", headers=staff_headers)
        resp = client.post("/api/attendance/clock-out", headers=staff_headers, json={"note": "closing shift"})
        assert resp.status_code == 200
        assert resp.json["status"] == "CLOSED"
        assert resp.json["work_hours"] >= 0
        assert resp.json["note"] == "closing shift"

        assert client.get("/api/attendance/current", headers=staff_headers).json == {"record": None}
        # a new shift may start once the previous one is closed
        assert client.post("/api/attendance/clock-in", headers=staff_headers).status_code == 201

    def test_clock_out_without_open_record(self, client, staff_headers):
        resp = client.post("/api/attendance/clock-out", headers=staff_headers)
        assert resp.status_code == 404

    def test_clock_out_by_staff_name(self, client, staff_headers, other_headers):
        client.post("/api/attendance/clock-in", headers=staff_headers)
        resp = client.post("/api/attendance/clock-out", headers=other_headers, json={"staff_name": "Hana"})
        assert resp.status_code == 200
        assert resp.json["staff_name"] == "Hana"

    def test_clock_in_requires_auth(self, client, db_session):
        assert client.post("/api/attendance/clock-in").status_code == 401


class TestManualRecords:

    def test_create_closed_record(self, client, staff_headers):
        resp = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Aoi",
            "work_date": "2026-10-01",
            "clock_in": "09:00",
            "clock_out": "17:30",
        })
        assert resp.status_code == 201
        assert resp.json["clock_in"] == "2026-10-01T09:00:00Z"
        assert resp.json["work_hours"] == 8.5

    def test_open_record_conflicts_with_existing(self, client, staff_headers):
        payload = {"staff_name": "Aoi", "work_date": "2026-10-01", "clock_in": "2026-10-01T09:00:00Z"}
        assert client.post("/api/attendance", headers=staff_headers, json=payload).status_code == 201
        assert client.post("/api/attendance", headers=staff_headers, json=payload).status_code == 409

    def test_rejects_missing_and_inverted(self, client, staff_headers):
        resp = client.post("/api/attendance", headers=staff_headers, json={"staff_name": "Aoi"})
        assert resp.status_code == 400
        resp = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Aoi", "work_date": "2026-10-01", "clock_in": "17:00", "clock_out": "09:00",
        })
        assert resp.status_code == 400

    def test_update_recomputes_hours(self, client, staff_headers):
        record = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Aoi", "work_date": "2026-10-01", "clock_in": "09:00",
        }).json
        resp = client.patch(f"/api/attendance/{record['id']}", headers=staff_headers, json={"clock_out": "12:15"})
        assert resp.status_code == 200
        assert resp.json["work_hours"] == 3.25

        resp = client.patch(f"/api/attendance/{record['id']}", headers=staff_headers, json={"clock_out": None})
        assert resp.json["work_hours"] is None
        assert resp.json["status"] == "OPEN"

    def test_reopen_conflicts_with_open_record(self, client, staff_headers):
        closed = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Hana", "work_date": "2026-10-01", "clock_in": "09:00", "clock_out": "17:00",
        }).json
        client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Hana", "work_date": "2026-10-02", "clock_in": "09:00",
        })

        resp = client.patch(f"/api/attendance/{closed['id']}", headers=staff_headers, json={"clock_out": None})
        assert resp.status_code == 409

        open_records = client.get("/api/attendance?staff_name=Hana&open_only=true").json
        assert len(open_records) == 1
        record = next(r for r in client.get("/api/attendance?staff_name=Hana").json if r["id"] == closed["id"])
        assert record["status"] == "CLOSED"
        assert record["work_hours"] == 8.0

    def test_reopen_conflicts_by_user(self, client, staff_headers):
        client.post("/api/attendance/clock-in", headers=staff_headers)
        closed = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Hana (old name)", "user_id": "staff-1",
            "work_date": "2026-10-01", "clock_in": "09:00", "clock_out": "10:00",
        }).json

        resp = client.patch(f"/api/attendance/{closed['id']}", headers=staff_headers, json={"clock_out": None})
        assert resp.status_code == 409

    def test_list_filters_and_delete(self, client, staff_headers):
        client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Aoi", "work_date": "2026-10-01", "clock_in": "09:00", "clock_out": "10:00",
        })
        open_record = client.post("/api/attendance", headers=staff_headers, json={
            "staff_name": "Ren", "work_date": "2026-10-02", "clock_in": "09:00",
        }).json

        assert [r["staff_name"] for r in client.get("/api/attendance").json] == ["Ren", "Aoi"]
        assert [r["staff_name"] for r in client.get("/api/attendance?open_only=1").json] == ["Ren"]
        assert [r["staff_name"] for r in client.get("/api/attendance?staff_name=Aoi").json] == ["Aoi"]

        resp = client.delete(f"/api/attendance/{open_record['id']}", headers=staff_headers)
        assert resp.json == {"ok": True}
        assert client.delete(f"/api/attendance/{open_record['id']}", headers=staff_headers).status_code == 404
