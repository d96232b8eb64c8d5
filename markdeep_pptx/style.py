"""Style resolution.

Inheritance is an explicit value: each descent resolves the child's
computed style against the parent's ``TextStyle`` and passes the result
down. Nothing here looks at anything but the node it is given.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional

from .colors import NO_FILL, background_to_hex, css_to_hex
from .snapshot import RenderedNode

PT_PER_PX = 0.75
BOLD_WEIGHT = 600
DEFAULT_FONT_SIZE_PX = 16.0

# Slide markers that shrink body text
TEXT_SCALE_MARKERS = {"small-text": 0.85, "tiny-text": 0.7}

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class TextStyle:
    """Inline attributes carried by a text run."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[str] = None

    def with_color(self, color: Optional[str]) -> "TextStyle":
        return replace(self, color=color)


PLAIN = TextStyle()


@dataclass(frozen=True)
class BlockStyle:
    """Style snapshot of a block-level element."""

    font_size: float
    font_face: str
    color: Optional[str]
    bold: bool = False
    italic: bool = False
    underline: bool = False
    align: str = "left"
    line_spacing: Optional[float] = None
    background: Optional[str] = None


def parse_px(value: Optional[str]) -> Optional[float]:
    """First number in a CSS length (``"12px"``, ``"1px 0px"``)."""
    if not value:
        return None
    match = _NUMBER_RE.search(value)
    return float(match.group()) if match else None


def max_px(value: Optional[str]) -> float:
    """Largest number in a possibly multi-valued CSS length, 0 if none."""
    if not value:
        return 0.0
    numbers = [float(n) for n in _NUMBER_RE.findall(value)]
    return max(numbers) if numbers else 0.0


def is_bold_weight(weight: str) -> bool:
    weight = weight.strip().lower()
    if weight in ("bold", "bolder"):
        return True
    try:
        return int(float(weight)) >= BOLD_WEIGHT
    except ValueError:
        return False


def resolve(node: RenderedNode, inherited: TextStyle = PLAIN) -> TextStyle:
    """Overlay ``node``'s computed text attributes onto ``inherited``."""
    bold = inherited.bold
    weight = node.computed("font-weight")
    if weight:
        bold = is_bold_weight(weight)

    italic = inherited.italic
    font_style = node.computed("font-style")
    if font_style:
        italic = font_style.strip().lower() in ("italic", "oblique")

    underline = inherited.underline or "underline" in node.computed(
        "text-decoration"
    ).lower()

    color = inherited.color
    css_color = node.computed("color")
    if css_color:
        hex_color = css_to_hex(css_color)
        if hex_color is not None:
            color = None if hex_color == "000000" else hex_color

    return TextStyle(bold=bold, italic=italic, underline=underline, color=color)


def font_scale(markers) -> float:
    scale = 1.0
    for marker, factor in TEXT_SCALE_MARKERS.items():
        if marker in markers:
            scale *= factor
    return scale


def _first_family(value: str) -> str:
    family = value.split(",")[0].replace('"', "").replace("'", "").strip()
    return family or "Arial"


def _align(value: str) -> str:
    value = value.strip().lower()
    if value in ("center", "right", "justify"):
        return value
    return "left"


def block_style(node: RenderedNode, markers=()) -> BlockStyle:
    """Snapshot of the element's computed style, in points."""
    size_px = parse_px(node.computed("font-size")) or DEFAULT_FONT_SIZE_PX
    text = resolve(node)
    line_height = node.computed("line-height")
    line_px = None if line_height in ("", "normal") else parse_px(line_height)
    background = background_to_hex(node.computed("background-color"))
    return BlockStyle(
        font_size=round(size_px * PT_PER_PX * font_scale(markers), 2),
        font_face=_first_family(node.computed("font-family")),
        color=css_to_hex(node.computed("color"), default="000000"),
        bold=text.bold,
        italic=text.italic,
        underline=text.underline,
        align=_align(node.computed("text-align")),
        line_spacing=None if line_px is None else round(line_px * PT_PER_PX, 2),
        background=None if background == NO_FILL else background,
    )
