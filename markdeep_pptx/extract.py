"""Element classifier and slide extraction.

Each rendered node is matched against ``RULES`` top to bottom; the first
rule whose predicate accepts the node produces that node's elements and
decides whether to descend. Handlers return fresh lists which callers
concatenate, so any subtree can be classified on its own.

Rule order:

1. Markdeep marker blocks (title, TOC title, subtitle marker, TOC list)
2. ``h1``-``h6``
3. ``p``
4. ``ul`` / ``ol``
5. ``img``
6. ``.admonition``
7. ``pre`` / ``.listing``
8. ``table``
9. ``blockquote``
10. ``.columns-container``
11. generic containers (``div`` and friends)

Anything else is dropped without descending.
"""

from dataclasses import dataclass, replace
from typing import Callable, NamedTuple, Optional

from .colors import NO_FILL, background_to_hex, highlight_color, parse_css_color
from .config import DEFAULT_ASPECT_RATIO, ConverterConfig
from .geometry import CanvasSize, Position, SlideScale, normalize
from .model import (
    Admonition,
    Blockquote,
    Border,
    Code,
    Document,
    Element,
    FooterInfo,
    Heading,
    Image,
    ListBlock,
    ListItem,
    NavInfo,
    Paragraph,
    Shape,
    Slide,
    Table,
    TableCell,
    discover_title,
)
from .runs import TextRun, build_runs, clean_text, restyle
from .snapshot import RenderedNode, RenderSnapshot
from .style import PLAIN, PT_PER_PX, TextStyle, block_style, max_px, parse_px, resolve

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = ("ul", "ol")
CONTAINER_TAGS = ("div", "section", "article", "main", "aside", "figure", "center")
SUBTITLE_OFFSET = 0.5  # inches below the afterTitles marker
SUBTITLE_HEIGHT = 0.5
BULLET = "• "


@dataclass(frozen=True)
class WalkContext:
    scale: SlideScale
    style: TextStyle = PLAIN
    in_column: bool = False
    markers: frozenset = frozenset()


class Rule(NamedTuple):
    name: str
    matches: Callable[[RenderedNode], bool]
    handle: Callable[[RenderedNode, Position, WalkContext], list]


# ── Helpers ───────────────────────────────────────────────────────────────────


def _div_with(cls: str) -> Callable[[RenderedNode], bool]:
    return lambda n: n.tag == "div" and n.has_class(cls)


def _direct(node: RenderedNode, *tags: str) -> list[RenderedNode]:
    return [c for c in node.element_children() if c.tag in tags]


def _block_style(node: RenderedNode, ctx: WalkContext, **overrides):
    style = block_style(node, ctx.markers)
    return replace(style, **overrides) if overrides else style


def container_shape(node: RenderedNode, position: Position, scale: SlideScale) -> Optional[Shape]:
    """Background shape for a container with a visible fill or border."""
    fill = background_to_hex(node.computed("background-color"))
    border = None
    border_px = max_px(node.computed("border-width"))
    if border_px > 0:
        parsed = parse_css_color(node.computed("border-color"))
        if parsed is None:
            border = Border(color="000000", width=border_px * PT_PER_PX)
        elif parsed[3] > 0:
            r, g, b, _ = parsed
            border = Border(color=f"{r:02X}{g:02X}{b:02X}", width=border_px * PT_PER_PX)
    if fill == NO_FILL and border is None:
        return None
    radius_px = parse_px(node.computed("border-radius")) or 0.0
    return Shape(
        position=position,
        fill=None if fill == NO_FILL else fill,
        border=border,
        radius=radius_px * scale.scale_x,
    )


# ── Rule handlers ─────────────────────────────────────────────────────────────


def _main_title(node, position, ctx):
    return [
        Heading(
            position=position,
            level=1,
            runs=tuple(build_runs(node, ctx.style)),
            style=_block_style(node, ctx, bold=True),
        )
    ]


def _toc_title(node, position, ctx):
    text = clean_text(node.text_content())
    runs = (TextRun(text, TextStyle(bold=True)),) if text else ()
    return [
        Heading(
            position=position,
            level=1,
            runs=runs,
            style=_block_style(node, ctx, bold=True),
        )
    ]


def _subtitle(node, position, ctx):
    # Markdeep leaves the subtitle as a bare text node after the marker
    sibling = node.next_sibling()
    if not isinstance(sibling, str) or not sibling.strip():
        return []
    return [
        Paragraph(
            position=replace(
                position, y=position.y + SUBTITLE_OFFSET, h=SUBTITLE_HEIGHT
            ),
            runs=(TextRun(clean_text(sibling)),),
            style=_block_style(node, ctx),
        )
    ]


def _toc_list(node, position, ctx):
    items = []
    for li in _direct(node, "li"):
        link = li.find(lambda n: n.tag == "a")
        text = clean_text((link or li).text_content())
        if text:
            items.append(ListItem(runs=(TextRun(text),), level=0))
    return [
        ListBlock(
            position=position,
            ordered=False,
            items=tuple(items),
            style=_block_style(node, ctx),
        )
    ]


def _heading(node, position, ctx):
    return [
        Heading(
            position=position,
            level=int(node.tag[1]),
            runs=tuple(build_runs(node, ctx.style)),
            style=_block_style(node, ctx, bold=True),
        )
    ]


def _paragraph(node, position, ctx):
    if not node.text_content().strip():
        return []
    if node.find(lambda n: n.tag == "title" or n.has_class("title")):
        return []
    return [
        Paragraph(
            position=position,
            runs=tuple(build_runs(node, ctx.style)),
            style=_block_style(node, ctx),
        )
    ]


def _list_items(list_node: RenderedNode, style: TextStyle, level: int) -> list[ListItem]:
    items: list[ListItem] = []
    for li in _direct(list_node, "li"):
        li_style = resolve(li, style)
        runs = build_runs(li, li_style, skip=LIST_TAGS)

        marker = li.find(lambda n: any(c.startswith("highlight-") for c in n.classes))
        accent = highlight_color(marker.classes) if marker else None
        if accent:
            runs = restyle(runs, accent)

        if runs:
            items.append(ListItem(runs=tuple(runs), level=level))
        for nested in _direct(li, *LIST_TAGS):
            items.extend(_list_items(nested, resolve(nested, li_style), level + 1))
    return items


def _list(node, position, ctx):
    return [
        ListBlock(
            position=position,
            ordered=node.tag == "ol",
            items=tuple(_list_items(node, ctx.style, 0)),
            style=_block_style(node, ctx),
        )
    ]


def _image(node, position, ctx):
    return [
        Image(
            position=position,
            source=node.attrs.get("src", ""),
            alt=node.attrs.get("alt", ""),
        )
    ]


def _admonition_lines(node: RenderedNode, title_node: Optional[RenderedNode]) -> list[str]:
    lines: list[str] = []
    for child in node.children:
        if child is title_node:
            continue
        if isinstance(child, str):
            text = clean_text(child)
            if text:
                lines.append(text)
        elif child.tag in LIST_TAGS:
            for idx, li in enumerate(_direct(child, "li")):
                prefix = f"{idx + 1}. " if child.tag == "ol" else BULLET
                lines.append(prefix + clean_text(li.text_content()))
        elif child.tag == "p":
            text = clean_text(child.text_content())
            if text:
                lines.append(text)
        else:
            lines.extend(_admonition_lines(child, title_node))
    return lines


def _admonition(node, position, ctx):
    kind = next((c for c in node.classes if c != "admonition"), "note").lower()
    title_node = node.find_class("admonitionTitle")
    title = clean_text(title_node.text_content()) if title_node else None
    return [
        Admonition(
            position=position,
            admonition_kind=kind,
            title=title or None,
            body_lines=tuple(_admonition_lines(node, title_node)),
        )
    ]


def _code(node, position, ctx):
    code_node = node.find(lambda n: n.tag == "code") or node
    return [
        Code(
            position=position,
            text=code_node.text_content(),
            language=" ".join(code_node.classes),
            style=_block_style(code_node, ctx),
        )
    ]


def _table(node, position, ctx):
    rows = []
    for tr in node.find_all(lambda n: n.tag == "tr"):
        cells = tuple(
            TableCell(text=clean_text(cell.text_content()), is_header=cell.tag == "th")
            for cell in _direct(tr, "th", "td")
        )
        if cells:
            rows.append(cells)
    return [Table(position=position, rows=tuple(rows), style=_block_style(node, ctx))]


def _blockquote(node, position, ctx):
    return [
        Blockquote(
            position=position,
            runs=tuple(build_runs(node, ctx.style)),
            style=_block_style(node, ctx),
        )
    ]


def _children(node: RenderedNode, ctx: WalkContext) -> list[Element]:
    elements: list[Element] = []
    for child in node.element_children():
        elements.extend(classify(child, ctx))
    return elements


def _columns(node, position, ctx):
    columns = [node.find_class("column-left"), node.find_class("column-right")]
    columns = [c for c in columns if c is not None]
    elements: list[Element] = []
    for column in columns:
        shape = container_shape(column, normalize(column.rect, ctx.scale, True), ctx.scale)
        if shape is not None:
            elements.append(shape)
    for column in columns:
        column_ctx = replace(ctx, style=resolve(column, ctx.style), in_column=True)
        elements.extend(_children(column, column_ctx))
    return elements


def _container(node, position, ctx):
    elements: list[Element] = []
    shape = container_shape(node, position, ctx.scale)
    if shape is not None:
        elements.append(shape)
    elements.extend(_children(node, ctx))
    return elements


def _drop(node, position, ctx):
    return []


RULES = (
    Rule("anchor-target", lambda n: n.tag == "a" and n.has_class("target"), _drop),
    Rule("main-title", _div_with("title"), _main_title),
    Rule("toc-title", _div_with("toc-title"), _toc_title),
    Rule("subtitle", _div_with("afterTitles"), _subtitle),
    Rule("toc-list", lambda n: n.tag == "ul" and n.has_class("toc-list"), _toc_list),
    Rule("heading", lambda n: n.tag in HEADING_TAGS, _heading),
    Rule("paragraph", lambda n: n.tag == "p", _paragraph),
    Rule("list", lambda n: n.tag in LIST_TAGS, _list),
    Rule("image", lambda n: n.tag == "img", _image),
    Rule("admonition", lambda n: n.has_class("admonition"), _admonition),
    Rule("code", lambda n: n.tag == "pre" or n.has_class("listing"), _code),
    Rule("table", lambda n: n.tag == "table", _table),
    Rule("blockquote", lambda n: n.tag == "blockquote", _blockquote),
    Rule("columns", lambda n: n.has_class("columns-container"), _columns),
    Rule("container", lambda n: n.tag in CONTAINER_TAGS, _container),
)


def match_rule(node: RenderedNode) -> Optional[Rule]:
    for rule in RULES:
        if rule.matches(node):
            return rule
    return None


def classify(node: RenderedNode, ctx: WalkContext) -> list[Element]:
    """Elements for ``node`` and whatever its rule descends into."""
    rule = match_rule(node)
    if rule is None:
        return []
    node_ctx = replace(ctx, style=resolve(node, ctx.style))
    position = normalize(node.rect, ctx.scale, ctx.in_column)
    return [e for e in rule.handle(node, position, node_ctx) if not e.position.is_empty]


# ── Slide and document extraction ─────────────────────────────────────────────


def slide_markers(slide_node: RenderedNode) -> frozenset:
    return frozenset(c for c in slide_node.classes if c != "slide")


def nav_info(slide_node: RenderedNode) -> Optional[NavInfo]:
    chapters: list[str] = []
    active = None
    for item in slide_node.find_all(lambda n: n.has_class("nav-section-item")):
        if item.has_class("toc-button"):
            continue
        chapters.append(clean_text(item.text_content()))
        if item.has_class("active"):
            active = len(chapters) - 1
    if not chapters:
        return None
    return NavInfo(chapters=tuple(chapters), active_index=active)


def footer_info(slide_node: RenderedNode) -> Optional[FooterInfo]:
    chapter = slide_node.find_class("chapter-label")
    page = slide_node.find_class("slide-number")
    chapter_text = clean_text(chapter.text_content()) if chapter else ""
    page_text = clean_text(page.text_content()) if page else ""
    if not chapter_text and not page_text:
        return None
    return FooterInfo(chapter_label=chapter_text or None, page_label=page_text or None)


class SlideExtractor:
    """Turns a RenderSnapshot into a Document."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or ConverterConfig()
        self.warnings: list[str] = []

    def _viewport(self, snapshot: RenderSnapshot) -> tuple[float, float]:
        if snapshot.aspect_ratio is not None:
            return snapshot.viewport
        self.warnings.append(
            f"Degenerate slide size {snapshot.viewport}; assuming "
            f"{self.config.viewport_width}x{self.config.viewport_height}"
        )
        return (float(self.config.viewport_width), float(self.config.viewport_height))

    def extract_slide(
        self,
        slide_node: RenderedNode,
        index: int,
        canvas: CanvasSize,
        viewport: tuple[float, float],
    ) -> Optional[Slide]:
        content = slide_node.find_class("slide-content")
        if content is None:
            return None
        markers = slide_markers(slide_node)
        ctx = WalkContext(
            scale=SlideScale.for_slide(slide_node.rect, canvas, viewport),
            style=resolve(content),
            markers=markers,
        )
        return Slide(
            index=index,
            markers=markers,
            elements=tuple(_children(content, ctx)),
            nav=nav_info(slide_node),
            footer=footer_info(slide_node),
            slide_id=slide_node.attrs.get("id", ""),
            base_color=ctx.style.color,
        )

    def extract(self, snapshot: RenderSnapshot) -> Document:
        viewport = self._viewport(snapshot)
        aspect_ratio = viewport[0] / viewport[1] if viewport[1] else DEFAULT_ASPECT_RATIO
        canvas = CanvasSize.for_aspect_ratio(self.config.canvas_width, aspect_ratio)

        slides: list[Slide] = []
        for source_idx, slide_node in enumerate(snapshot.slides):
            slide = self.extract_slide(slide_node, len(slides), canvas, viewport)
            if slide is None:
                self.warnings.append(
                    f"Slide {source_idx + 1} has no .slide-content; skipped"
                )
                continue
            slides.append(slide)

        return Document(
            title=discover_title(slides, snapshot.title),
            aspect_ratio=aspect_ratio,
            canvas=canvas,
            slides=tuple(slides),
        )
