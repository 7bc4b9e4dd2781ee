"""
Site configuration tests: UI presets, the public site payload and theme.css.
"""

import unittest

import pytest

from merrily.models import UiPreset
from merrily.services.theme_service import hex_to_hsl, hex_to_rgba, render_theme_css, round_half_up


class TestHexToHsl(unittest.TestCase):

    def test_primaries(self):
        self.assertEqual(hex_to_hsl("#ff0000"), "0 100% 50%")
        self.assertEqual(hex_to_hsl("#0000ff"), "240 100% 50%")

    def test_greys_have_no_saturation(self):
        self.assertEqual(hex_to_hsl("#ffffff"), "0 0% 100%")
        self.assertEqual(hex_to_hsl("#000000"), "0 0% 0%")

    def test_hsl_passes_through(self):
        self.assertEqual(hex_to_hsl("12 50% 40%"), "12 50% 40%")

    def test_invalid_falls_back(self):
        for value in (None, "", "#fff", "#zzzzzz"):
            self.assertEqual(hex_to_hsl(value), "210 40% 98%")

    def test_rgba(self):
        self.assertEqual(hex_to_rgba("#102030", 0.5), "rgba(16, 32, 48, 0.5)")
        self.assertEqual(hex_to_rgba("bad", 1), "rgba(0, 0, 0, 1)")
        self.assertEqual(hex_to_rgba(None, 1), "rgba(0, 0, 0, 1)")
        self.assertEqual(hex_to_rgba(255, 0.5), "rgba(0, 0, 0, 0.5)")

    def test_non_string_values_fall_back(self):
        for value in (123, 1.5, ["#ff0000"], {"hex": "#ff0000"}, True):
            self.assertEqual(hex_to_hsl(value), "210 40% 98%")

    def test_halves_round_up(self):
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-0.5), 0)
        self.assertEqual(round_half_up(49.4), 49)

    def test_magenta_hue_wraps(self):
        self.assertEqual(hex_to_hsl("#ff00ff"), "300 100% 50%")


class TestPresets:

    @pytest.fixture
    def default_preset(self, db_session):
        preset = UiPreset(name="Standard", sections=["hero", "menu"], is_default=True, display_order=1)
        db_session.add(preset)
        db_session.commit()
        return preset

    def test_public_list(self, client, default_preset):
        resp = client.get("/api/presets")
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json] == ["Standard"]

    def test_create_appends_order(self, client, staff_headers, default_preset):
        resp = client.post("/api/presets", headers=staff_headers, json={"name": "Autumn", "sections": ["menu"]})
        assert resp.status_code == 201
        assert resp.json["display_order"] == 2
        assert resp.json["is_default"] is False

    def test_create_requires_name_and_sections(self, client, staff_headers, db_session):
        resp = client.post("/api/presets", headers=staff_headers, json={"name": "Empty"})
        assert resp.status_code == 400

    def test_default_preset_is_protected(self, client, staff_headers, default_preset):
        resp = client.put(f"/api/presets/{default_preset.id}", headers=staff_headers, json={
            "name": "Mine", "sections": ["hero"],
        })
        assert resp.status_code == 403
        assert client.delete(f"/api/presets/{default_preset.id}", headers=staff_headers).status_code == 403

    def test_update_and_delete_custom(self, client, staff_headers, db_session):
        preset = client.post("/api/presets", headers=staff_headers, json={"name": "A", "sections": ["x"]}).json
        resp = client.put(f"/api/presets/{preset['id']}", headers=staff_headers, json={
            "name": "B", "sections": ["y"],
        })
        assert resp.json["name"] == "B"
        assert client.delete(f"/api/presets/{preset['id']}", headers=staff_headers).json == {"success": True}
        assert client.delete(f"/api/presets/{preset['id']}", headers=staff_headers).status_code == 404

    def test_writes_require_auth(self, client, db_session):
        assert client.post("/api/presets", json={"name": "A", "sections": ["x"]}).status_code == 401


class TestSitePayload:

    def test_empty_until_saved(self, client, db_session):
        resp = client.get("/api/pr/website")
        assert resp.status_code == 200
        assert resp.json is None

    def test_save_replaces_whole_payload(self, client, staff_headers, db_session):
        client.put("/api/pr/website", headers=staff_headers, json={
            "payload": {"hero": {"title": "MERRILY"}, "ui": {"lightBackground": "#ffffff"}},
        })
        resp = client.post("/api/pr/website", headers=staff_headers, json={"payload": {"hero": {"title": "New"}}})
        assert resp.json == {"success": True, "payload": {"hero": {"title": "New"}}}
        assert client.get("/api/pr/website").json == {"hero": {"title": "New"}}

    def test_payload_required(self, client, staff_headers, db_session):
        assert client.put("/api/pr/website", headers=staff_headers, json={}).status_code == 400
        assert client.put("/api/pr/website", headers=staff_headers, json={"payload": [1]}).status_code == 400


class TestThemeCss:

    def test_defaults_without_config(self, client, db_session):
        resp = client.get("/theme.css")
        assert resp.status_code == 200
        assert resp.mimetype == "text/css"
        css = resp.get_data(as_text=True)
        assert ":root {" in css
        assert ".dark body {" in css

    def test_uses_saved_colors(self, client, staff_headers, db_session):
        client.put("/api/pr/website", headers=staff_headers, json={"payload": {"ui": {
            "lightBackground": "#ff0000",
            "lightBackgroundAlpha": "0.5",
            "darkBackgroundGradient": "linear-gradient(#000, #111)",
        }}})
        css = client.get("/theme.css").get_data(as_text=True)
        assert "--background: 0 100% 50%;" in css
        assert "background-color: rgba(255, 0, 0, 0.5);" in css
        assert "background-image: linear-gradient(#000, #111);" in css

    def test_non_string_colors_do_not_break_stylesheet(self, client, staff_headers, db_session):
        client.put("/api/pr/website", headers=staff_headers, json={"payload": {"ui": {
            "lightForeground": 123,
            "darkBackground": ["#000000"],
            "cardBgLight": {"hex": "#ffffff"},
        }}})
        resp = client.get("/theme.css")
        assert resp.status_code == 200
        css = resp.get_data(as_text=True)
        assert "--foreground: 210 40% 98%;" in css
        assert "--card: 210 40% 98%;" in css
        assert "background-color: rgba(0, 0, 0, 1);" in css

    def test_render_ignores_non_dict_ui(self):
        css = render_theme_css({"ui": "broken"})
        assert "--card: 0 0% 100%;" in css
