"""Canvas primitives handed to the writer.

Coordinates are absolute inches on the slide canvas. List order is z-order:
later primitives are drawn on top.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional


@dataclass
class Span:
    """One formatted run inside a text box. ``\\n`` starts a new paragraph."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[str] = None
    size: Optional[float] = None


@dataclass
class TextBox:
    kind: ClassVar[str] = "text"

    x: float
    y: float
    w: float
    h: float
    spans: list = field(default_factory=list)
    font_face: str = "Arial"
    font_size: float = 14
    color: str = "333333"
    align: str = "left"
    valign: str = "top"
    fill: Optional[str] = None
    line_spacing: Optional[float] = None  # multiple of single spacing
    role: str = ""

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


@dataclass
class Rect:
    kind: ClassVar[str] = "rect"

    x: float
    y: float
    w: float
    h: float
    fill: Optional[str] = None
    line_color: Optional[str] = None
    line_width: float = 0.0  # points
    rounded: bool = False
    radius: float = 0.03  # inches, rounded only
    role: str = ""


@dataclass
class CellSpec:
    text: str
    bold: bool = False
    fill: Optional[str] = None
    color: str = "333333"
    font_size: float = 14
    align: str = "center"


@dataclass
class TablePrimitive:
    kind: ClassVar[str] = "table"

    x: float
    y: float
    w: float
    h: float
    col_widths: list = field(default_factory=list)
    rows: list = field(default_factory=list)
    font_face: str = "Arial"
    border_color: Optional[str] = None
    border_width: float = 0.5
    role: str = ""


@dataclass
class Picture:
    kind: ClassVar[str] = "picture"

    x: float
    y: float
    w: float
    h: float
    source: str = ""
    role: str = ""


def text_box(x, y, w, h, text: str, **options) -> TextBox:
    """Single-span text box; span-level keys go to the span."""
    span_keys = ("bold", "italic", "underline")
    span_options = {k: options.pop(k) for k in span_keys if k in options}
    return TextBox(x, y, w, h, spans=[Span(text, **span_options)], **options)
