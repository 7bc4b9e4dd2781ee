# Overview: Renders the public site's theme settings as a CSS stylesheet.

"""
Theme Service

Site payloads store colors as "#rrggbb". The frontend's CSS variables use the
space-separated "H S% L%" form, so colors are converted here. Values that
already contain '%' are assumed to be in that form and pass through.
"""
from __future__ import annotations

import math

FALLBACK_HSL = "210 40% 98%"

LIGHT_DEFAULTS = {
    "bg": "#f8fafc",
    "fg": "#0f172a",
    "border": "#e2e8f0",
    "card_bg": "#ffffff",
    "card_fg": "#0f172a",
    "muted": "#64748b",
}
DARK_DEFAULTS = {
    "bg": "#0b1220",
    "fg": "#e5e7eb",
    "border": "#1f2937",
    "card_bg": "#0f172a",
    "card_fg": "#e5e7eb",
    "muted": "#94a3b8",
}


def round_half_up(value: float) -> int:
    """Halves round toward +infinity, matching the browser-side theme script."""
    return math.floor(value + 0.5)


def _parse_hex(value) -> tuple[int, int, int] | None:
    if not isinstance(value, str):
        return None
    h = value.strip().lstrip("#")
    if len(h) != 6:
        return None
    try:
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return None


def hex_to_hsl(value) -> str:
    # Stored payloads are free-form JSON; anything but a non-empty string falls back
    if not value or not isinstance(value, str):
        return FALLBACK_HSL
    if "%" in value:
        return value
    rgb = _parse_hex(value)
    if rgb is None:
        return FALLBACK_HSL

    r, g, b = (c / 255 for c in rgb)
    hi = max(r, g, b)
    lo = min(r, g, b)
    lightness = (hi + lo) / 2
    delta = hi - lo

    hue = 0.0
    sat = 0.0
    if delta != 0:
        sat = delta / (1 - abs(2 * lightness - 1))
        if hi == r:
            hue = math.fmod((g - b) / delta, 6)
        elif hi == g:
            hue = (b - r) / delta + 2
        else:
            hue = (r - g) / delta + 4
        hue = round_half_up(hue * 60)
        if hue < 0:
            hue += 360

    return f"{hue:.0f} {round_half_up(sat * 100)}% {round_half_up(lightness * 100)}%"


def hex_to_rgba(value, alpha: float) -> str:
    rgb = _parse_hex(value)
    if rgb is None:
        return f"rgba(0, 0, 0, {alpha})"
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


def _alpha(value) -> float:
    if value is None:
        return 1
    try:
        return float(value)
    except (TypeError, ValueError):
        return 1


def mode_settings(ui: dict, dark: bool) -> dict:
    defaults = DARK_DEFAULTS if dark else LIGHT_DEFAULTS
    prefix = "dark" if dark else "light"
    suffix = "Dark" if dark else "Light"
    return {
        "bg": ui.get(f"{prefix}Background") or defaults["bg"],
        "bg_alpha": _alpha(ui.get(f"{prefix}BackgroundAlpha")),
        "bg_gradient": ui.get(f"{prefix}BackgroundGradient") or "",
        "fg": ui.get(f"{prefix}Foreground") or defaults["fg"],
        "border": ui.get(f"{prefix}Border") or defaults["border"],
        "card_bg": ui.get(f"cardBg{suffix}") or ui.get("cardBackground") or defaults["card_bg"],
        "card_fg": ui.get(f"cardFg{suffix}") or ui.get("cardForeground") or defaults["card_fg"],
        "muted": ui.get(f"mutedColor{suffix}") or ui.get("mutedColor") or defaults["muted"],
    }


def _block(selector: str, body_selector: str, mode: dict) -> str:
    if mode["bg_gradient"]:
        background = f"  background-image: {mode['bg_gradient']};\n  background-color: transparent;\n"
    else:
        background = (
            "  background-image: none;\n"
            f"  background-color: {hex_to_rgba(mode['bg'], mode['bg_alpha'])};\n"
        )
    return (
        f"{selector} {{\n"
        f"  --background: {hex_to_hsl(mode['bg'])};\n"
        f"  --foreground: {hex_to_hsl(mode['fg'])};\n"
        f"  --border: {hex_to_hsl(mode['border'])};\n"
        f"  --card: {hex_to_hsl(mode['card_bg'])};\n"
        f"  --card-foreground: {hex_to_hsl(mode['card_fg'])};\n"
        f"  --muted: {hex_to_hsl(mode['muted'])};\n"
        "}\n"
        f"{body_selector} {{\n"
        f"{background}"
        "}\n"
    )


def render_theme_css(payload: dict | None) -> str:
    """Light variables on :root, dark variables on .dark."""
    ui = {}
    if isinstance(payload, dict) and isinstance(payload.get("ui"), dict):
        ui = payload["ui"]
    return (
        _block(":root", "body", mode_settings(ui, dark=False))
        + "\n"
        + _block(".dark", ".dark body", mode_settings(ui, dark=True))
    )
