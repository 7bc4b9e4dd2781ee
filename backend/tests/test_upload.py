"""
Editor image upload tests.
"""

import io
import re


def _upload(client, headers, content=b"\x89PNG data", name="my photo.png", content_type="image/png"):
    return client.post(
        "/api/upload",
        headers=headers,
        data={"file": (io.BytesIO(content), name, content_type)},
        content_type="multipart/form-data",
    )


class TestUpload:

    def test_stores_under_timestamped_name(self, client, staff_headers, platform_stub):
        resp = _upload(client, staff_headers)
        assert resp.status_code == 200
        assert resp.json["success"] is True
        assert re.fullmatch(r"\d+-my_photo\.png", resp.json["file_name"])
        assert resp.json["url"] == (
            "https://platform.test/storage/v1/object/public/blog-images/" + resp.json["file_name"]
        )
        assert len(platform_stub.called("POST", "/storage/v1/object/blog-images/")) == 1

    def test_rejects_type(self, client, staff_headers, platform_stub):
        resp = _upload(client, staff_headers, name="notes.txt", content_type="text/plain")
        assert resp.status_code == 400
        assert platform_stub.called("POST", "/storage/v1/object/") == []

    def test_rejects_oversize(self, app, client, staff_headers):
        limit = app.config["UPLOAD_MAX_BYTES"]
        resp = _upload(client, staff_headers, content=b"0" * (limit + 1))
        assert resp.status_code == 400
        assert "File size" in resp.json["error"]

    def test_rejects_missing_and_empty(self, client, staff_headers):
        resp = client.post("/api/upload", headers=staff_headers, data={}, content_type="multipart/form-data")
        assert resp.status_code == 400
        assert _upload(client, staff_headers, content=b"").status_code == 400

    def test_platform_error_status(self, client, staff_headers, platform_stub):
        platform_stub.upload_error = "The resource already exists"
        resp = _upload(client, staff_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "The resource already exists"

    def test_requires_auth(self, client, db_session):
        assert _upload(client, {}).status_code == 401
