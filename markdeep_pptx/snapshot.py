"""Render snapshot: the rendered slide tree as plain Python values.

A browser renders the deck and stamps every element below a ``.slide`` with
its bounding box and computed style (see ``render.py``). The stamped HTML is
then parsed here with BeautifulSoup, so a snapshot can be saved and
converted again later without a browser.

Stamp format::

    <html data-slide-width="1280" data-slide-height="720">
      ...
      <div class="slide" data-rect="0 0 1280 720"
           data-computed="font-size:24px;color:rgb(51, 51, 51);...">
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .errors import SnapshotError

RECT_ATTR = "data-rect"
STYLE_ATTR = "data-computed"
SLIDE_WIDTH_ATTR = "data-slide-width"
SLIDE_HEIGHT_ATTR = "data-slide-height"

# Tags whose content never reaches the slide
_SKIPPED_TAGS = {"script", "style", "noscript", "template"}
# Attributes worth carrying past the snapshot boundary
_KEPT_ATTRS = ("id", "src", "alt", "href")


@dataclass(frozen=True)
class Rect:
    """Viewport-relative bounding box in CSS pixels."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(eq=False)
class RenderedNode:
    """One element of the rendered tree. ``str`` children are text nodes."""

    tag: str
    classes: list = field(default_factory=list)
    style: dict = field(default_factory=dict)
    rect: Rect = field(default_factory=Rect)
    attrs: dict = field(default_factory=dict)
    children: list = field(default_factory=list)
    parent: Optional["RenderedNode"] = field(default=None, repr=False)

    def __post_init__(self):
        self.tag = self.tag.lower()
        for child in self.children:
            if isinstance(child, RenderedNode):
                child.parent = self

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def computed(self, prop: str, default: str = "") -> str:
        return self.style.get(prop, default)

    def element_children(self) -> list["RenderedNode"]:
        return [c for c in self.children if isinstance(c, RenderedNode)]

    def text_content(self) -> str:
        """DOM ``textContent``: all descendant text, in document order."""
        parts = []
        for child in self.children:
            if isinstance(child, str):
                parts.append(child)
            else:
                parts.append(child.text_content())
        return "".join(parts)

    def iter_descendants(self) -> Iterator["RenderedNode"]:
        for child in self.element_children():
            yield child
            yield from child.iter_descendants()

    def find_all(self, predicate: Callable[["RenderedNode"], bool]) -> list["RenderedNode"]:
        return [n for n in self.iter_descendants() if predicate(n)]

    def find(self, predicate: Callable[["RenderedNode"], bool]) -> Optional["RenderedNode"]:
        for node in self.iter_descendants():
            if predicate(node):
                return node
        return None

    def find_class(self, name: str) -> Optional["RenderedNode"]:
        return self.find(lambda n: n.has_class(name))

    def next_sibling(self) -> Union["RenderedNode", str, None]:
        if self.parent is None:
            return None
        siblings = self.parent.children
        for idx, child in enumerate(siblings):
            if child is self:
                return siblings[idx + 1] if idx + 1 < len(siblings) else None
        return None


@dataclass
class RenderSnapshot:
    """Everything the extractor needs from the renderer."""

    title: str
    viewport: tuple[float, float]
    slides: list = field(default_factory=list)

    @property
    def aspect_ratio(self) -> Optional[float]:
        width, height = self.viewport
        if width <= 0 or height <= 0:
            return None
        return width / height


# ── Stamped HTML parsing ──────────────────────────────────────────────────────


def parse_rect(value: Optional[str]) -> Rect:
    """Parse ``"left top width height"``; anything malformed is a zero rect."""
    if not value:
        return Rect()
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return Rect()
    try:
        left, top, width, height = (float(p) for p in parts)
    except ValueError:
        return Rect()
    return Rect(left, top, max(width, 0.0), max(height, 0.0))


def parse_style(value: Optional[str]) -> dict[str, str]:
    """Parse ``"prop:value;prop:value"`` into a dict."""
    result: dict[str, str] = {}
    if not value:
        return result
    for decl in value.split(";"):
        if ":" not in decl:
            continue
        name, _, prop_value = decl.partition(":")
        name = name.strip().lower()
        if name:
            result[name] = prop_value.strip()
    return result


def _float_attr(tag: Tag, name: str) -> Optional[float]:
    try:
        return float(tag.get(name, ""))
    except ValueError:
        return None


def _convert(tag: Tag) -> RenderedNode:
    children: list = []
    for child in tag.children:
        if isinstance(child, Tag):
            if child.name in _SKIPPED_TAGS:
                continue
            children.append(_convert(child))
        elif isinstance(child, NavigableString) and not isinstance(
            child, PreformattedString
        ):
            children.append(str(child))
    classes = tag.get("class", [])
    if isinstance(classes, str):
        classes = classes.split()
    return RenderedNode(
        tag=tag.name,
        classes=list(classes),
        style=parse_style(tag.get(STYLE_ATTR)),
        rect=parse_rect(tag.get(RECT_ATTR)),
        attrs={k: tag[k] for k in _KEPT_ATTRS if tag.has_attr(k)},
        children=children,
    )


def _top_level_slides(soup: BeautifulSoup) -> list[Tag]:
    slides = []
    for tag in soup.find_all(class_="slide"):
        if tag.find_parent(class_="slide") is None:
            slides.append(tag)
    return slides


def snapshot_from_html(html: str, locator: str = "<snapshot>") -> RenderSnapshot:
    """Build a RenderSnapshot from stamped HTML."""
    soup = BeautifulSoup(html, "lxml")
    root = soup.find("html")
    if root is None:
        raise SnapshotError(locator, "document has no <html> element")

    width = _float_attr(root, SLIDE_WIDTH_ATTR)
    height = _float_attr(root, SLIDE_HEIGHT_ATTR)
    if width is None or height is None:
        raise SnapshotError(
            locator,
            f"missing {SLIDE_WIDTH_ATTR}/{SLIDE_HEIGHT_ATTR} stamps; "
            "was the page rendered by the converter?",
        )

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()

    slides = [_convert(tag) for tag in _top_level_slides(soup)]
    return RenderSnapshot(title=title, viewport=(width, height), slides=slides)
