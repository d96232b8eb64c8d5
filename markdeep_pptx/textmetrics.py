"""Text size estimation from Arial character widths.

Widths are fractions of the em size, measured from Arial TrueType metrics.
East Asian wide characters take a full em. Used to size navigation tabs and
to flag text boxes whose content will not fit.
"""

import math
import unicodedata

# Arial glyph widths grouped by advance
_WIDTH_GROUPS = {
    0.19: "'",
    0.22: "ijl",
    0.26: "|",
    0.28: " !,./:;I[\\]ft",
    0.33: "()-`r{}",
    0.35: '"',
    0.39: "*",
    0.47: "^",
    0.50: "Jckvxyzs",
    0.56: "#$0123456789?L_abdeghnopqu",
    0.58: "+<=>~",
    0.61: "FTZ",
    0.67: "&ABEKPSVXY",
    0.72: "CDHNRUw",
    0.78: "GOQ",
    0.83: "Mm",
    0.89: "%",
    0.94: "W",
    1.02: "@",
}
CHAR_WIDTHS = {ch: width for width, chars in _WIDTH_GROUPS.items() for ch in chars}
DEFAULT_WIDTH = 0.56
WIDE_WIDTH = 1.0
BOLD_SCALE = 1.08  # bold glyphs are ~8% wider on average
MONOSPACE_WIDTH = 0.60

# Text frame insets (inches)
FRAME_MARGIN_X = 0.10
FRAME_MARGIN_Y = 0.05


def char_width(ch: str) -> float:
    width = CHAR_WIDTHS.get(ch)
    if width is not None:
        return width
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return WIDE_WIDTH
    return DEFAULT_WIDTH


def text_width_pt(text: str, font_size: float, bold: bool = False, monospace: bool = False) -> float:
    """Estimated rendered width of a single line, in points."""
    if monospace:
        total = MONOSPACE_WIDTH * len(text)
    else:
        total = sum(char_width(ch) for ch in text)
    width = total * font_size
    return width * BOLD_SCALE if bold else width


def text_width_in(text: str, font_size: float, bold: bool = False) -> float:
    return text_width_pt(text, font_size, bold) / 72.0


def text_height_in(
    text: str,
    font_size: float,
    box_width: float,
    line_spacing: float = 1.2,
    bold: bool = False,
    monospace: bool = False,
) -> float:
    """Estimated height of wrapped text in a box ``box_width`` inches wide."""
    usable_pt = max((box_width - 2 * FRAME_MARGIN_X) * 72.0, 36.0)
    lines = 0.0
    for para in text.split("\n"):
        stripped = para.strip()
        if not stripped:
            lines += 0.4  # empty paragraph
            continue
        rendered = text_width_pt(stripped, font_size, bold, monospace)
        if rendered <= usable_pt:
            lines += 1
        else:
            # 5% slack: lines break at word boundaries
            lines += max(2, math.ceil(rendered / usable_pt * 1.05))
    return lines * font_size / 72.0 * line_spacing + 2 * FRAME_MARGIN_Y
