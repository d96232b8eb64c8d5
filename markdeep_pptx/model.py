"""The extracted presentation model.

Every element variant is a frozen dataclass with a ``kind`` tag; the layout
synthesizer dispatches on it.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .geometry import CanvasSize, Position
from .runs import TextRun, plain_text
from .style import BlockStyle


@dataclass(frozen=True)
class Element:
    kind: ClassVar[str] = "element"
    position: Position


@dataclass(frozen=True)
class Heading(Element):
    kind: ClassVar[str] = "heading"
    level: int = 1
    runs: tuple = ()
    style: Optional[BlockStyle] = None

    @property
    def text(self) -> str:
        return plain_text(self.runs)


@dataclass(frozen=True)
class Paragraph(Element):
    kind: ClassVar[str] = "paragraph"
    runs: tuple = ()
    style: Optional[BlockStyle] = None

    @property
    def text(self) -> str:
        return plain_text(self.runs)


@dataclass(frozen=True)
class ListItem:
    runs: tuple
    level: int = 0


@dataclass(frozen=True)
class ListBlock(Element):
    kind: ClassVar[str] = "list"
    ordered: bool = False
    items: tuple = ()
    style: Optional[BlockStyle] = None


@dataclass(frozen=True)
class TableCell:
    text: str
    is_header: bool = False


@dataclass(frozen=True)
class Table(Element):
    kind: ClassVar[str] = "table"
    rows: tuple = ()
    style: Optional[BlockStyle] = None


@dataclass(frozen=True)
class Admonition(Element):
    kind: ClassVar[str] = "admonition"
    admonition_kind: str = "note"
    title: Optional[str] = None
    body_lines: tuple = ()

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines)


@dataclass(frozen=True)
class Code(Element):
    kind: ClassVar[str] = "code"
    text: str = ""
    language: str = ""
    style: Optional[BlockStyle] = None


@dataclass(frozen=True)
class Blockquote(Element):
    kind: ClassVar[str] = "blockquote"
    runs: tuple = ()
    style: Optional[BlockStyle] = None

    @property
    def text(self) -> str:
        return plain_text(self.runs)


@dataclass(frozen=True)
class Image(Element):
    kind: ClassVar[str] = "image"
    source: str = ""
    alt: str = ""


@dataclass(frozen=True)
class Border:
    color: str
    width: float  # points


@dataclass(frozen=True)
class Shape(Element):
    kind: ClassVar[str] = "shape"
    fill: Optional[str] = None
    border: Optional[Border] = None
    radius: float = 0.0  # inches


@dataclass(frozen=True)
class NavInfo:
    chapters: tuple
    active_index: Optional[int] = None


@dataclass(frozen=True)
class FooterInfo:
    chapter_label: Optional[str] = None
    page_label: Optional[str] = None


@dataclass(frozen=True)
class Slide:
    index: int
    markers: frozenset = frozenset()
    elements: tuple = ()
    nav: Optional[NavInfo] = None
    footer: Optional[FooterInfo] = None
    slide_id: str = ""
    # Text color of .slide-content; runs in this color carry no emphasis
    base_color: Optional[str] = None

    def first(self, kind: str, level: Optional[int] = None) -> Optional[Element]:
        """First element of ``kind`` (and heading ``level``), if any."""
        for element in self.elements:
            if element.kind != kind:
                continue
            if level is not None and getattr(element, "level", None) != level:
                continue
            return element
        return None


@dataclass(frozen=True)
class Document:
    title: str
    aspect_ratio: float
    canvas: CanvasSize
    slides: tuple = field(default_factory=tuple)


def first_heading_text(slide: Slide) -> str:
    heading = slide.first("heading")
    return heading.text if heading is not None else ""


def has_bold_run(runs) -> bool:
    return any(r.style.bold for r in runs if not r.is_break)


def _first_bold_run(slide: Slide) -> Optional[TextRun]:
    for element in slide.elements:
        for run in getattr(element, "runs", ()):
            if not run.is_break and run.style.bold and run.text.strip():
                return run
        for item in getattr(element, "items", ()):
            for run in item.runs:
                if not run.is_break and run.style.bold and run.text.strip():
                    return run
    return None


UNTITLED = "Untitled Presentation"


def discover_title(slides, fallback_title: str = "") -> str:
    """Document title from the extracted slides, most specific source first."""
    first_slide = slides[0] if slides else None
    if first_slide is not None:
        heading_text = first_heading_text(first_slide)
        if heading_text:
            return heading_text
        paragraph = first_slide.first("paragraph")
        if paragraph is not None and has_bold_run(paragraph.runs):
            return paragraph.text
    if fallback_title and "localhost" not in fallback_title and "file://" not in fallback_title:
        return fallback_title
    if first_slide is not None:
        run = _first_bold_run(first_slide)
        if run is not None:
            return run.text.strip()
    return UNTITLED
