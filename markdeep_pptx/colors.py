"""CSS color parsing and the fixed palettes used on the canvas.

Colors travel through the model as 6-digit uppercase hex strings
(``"2980B9"``). Fully transparent backgrounds become ``NO_FILL`` so that a
container without a visible fill is never drawn as black.
"""

import re
from typing import Optional

from pptx.dml.color import RGBColor

NO_FILL = "none"

# ── Theme (Markdeep default look) ─────────────────────────────────────────────
PRIMARY = "2980B9"
BODY_TEXT = "333333"
LIGHT_TEXT = "666666"
WHITE = "FFFFFF"
PANEL_GRAY = "F5F5F5"
CODE_TEXT = "333333"

# ── List-item highlight markers ───────────────────────────────────────────────
HIGHLIGHT_COLORS = {
    "highlight-red": "C0392B",
    "highlight-orange": "E67E22",
    "highlight-green": "27AE60",
    "highlight-blue": "2980B9",
    "highlight-purple": "8E44AD",
}

# ── Admonition palettes: background, accent border, text ─────────────────────
ADMONITION_PALETTES = {
    "note": {"bg": "E3F2FD", "border": "2196F3", "text": "1565C0"},
    "tip": {"bg": "E8F5E9", "border": "4CAF50", "text": "2E7D32"},
    "warning": {"bg": "FFF8E1", "border": "FFC107", "text": "F57F17"},
    "error": {"bg": "FFEBEE", "border": "F44336", "text": "C62828"},
    "question": {"bg": "FFF3E0", "border": "FF9800", "text": "E65100"},
}

_RGB_RE = re.compile(
    r"rgba?\(\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)"
    r"(?:\s*,\s*([\d.]+))?\s*\)"
)


def parse_css_color(value: Optional[str]) -> Optional[tuple[int, int, int, float]]:
    """Parse a computed CSS color into ``(r, g, b, alpha)``."""
    if not value:
        return None
    value = value.strip().lower()
    if value == "transparent":
        return (0, 0, 0, 0.0)
    if value.startswith("#"):
        rgb = hex_to_rgb(value)
        if rgb is None:
            return None
        return (rgb[0], rgb[1], rgb[2], 1.0)
    match = _RGB_RE.match(value)
    if not match:
        return None
    r, g, b = (min(255, int(float(match.group(i)))) for i in (1, 2, 3))
    alpha = float(match.group(4)) if match.group(4) else 1.0
    return (r, g, b, alpha)


def _blend_over_white(r: int, g: int, b: int, alpha: float) -> tuple[int, int, int]:
    return tuple(int(alpha * c + (1 - alpha) * 255) for c in (r, g, b))


def css_to_hex(value: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """Convert a CSS color to ``RRGGBB``; ``default`` when it cannot be read."""
    parsed = parse_css_color(value)
    if parsed is None:
        return default
    r, g, b, alpha = parsed
    if alpha <= 0:
        return default
    if alpha < 1:
        r, g, b = _blend_over_white(r, g, b, alpha)
    return f"{r:02X}{g:02X}{b:02X}"


def background_to_hex(value: Optional[str]) -> str:
    """Convert a background color, mapping transparent or garbage to NO_FILL."""
    return css_to_hex(value, default=NO_FILL)


def hex_to_rgb(hex_str: str) -> Optional[RGBColor]:
    """Convert #RGB or #RRGGBB to RGBColor."""
    hex_str = hex_str.strip().lstrip("#")
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    if len(hex_str) != 6:
        return None
    try:
        return RGBColor.from_string(hex_str.upper())
    except ValueError:
        return None


def admonition_palette(kind: Optional[str]) -> dict[str, str]:
    """Palette for an admonition kind, falling back to the note palette."""
    return ADMONITION_PALETTES.get((kind or "").lower(), ADMONITION_PALETTES["note"])


def highlight_color(classes) -> Optional[str]:
    """Accent color for the first ``highlight-*`` marker class in ``classes``."""
    for cls in classes:
        if cls.startswith("highlight-") and cls in HIGHLIGHT_COLORS:
            return HIGHLIGHT_COLORS[cls]
    return None
