"""Layout synthesizer: extracted slides to canvas primitives.

Content slides keep the geometry the browser produced, clamped into the
canvas margins. Title, section and table-of-contents slides use fixed
layouts. Every renderer returns a fresh list of primitives.
"""

from typing import Optional

from .classify import Strategy
from .colors import (
    BODY_TEXT,
    CODE_TEXT,
    LIGHT_TEXT,
    PANEL_GRAY,
    PRIMARY,
    WHITE,
    admonition_palette,
)
from .config import TAB_POLICY_EVEN, ConverterConfig
from .geometry import CanvasSize, Position
from .model import Slide
from .primitives import CellSpec, Picture, Rect, Span, TablePrimitive, TextBox, text_box
from .runs import collapse_whitespace, flat_text
from .style import font_scale
from .textmetrics import text_width_in

# ── Font tiers (points) ───────────────────────────────────────────────────────
FONT_SIZES = {
    "title_slide_title": 36,
    "title_slide_subtitle": 18,
    "section_title": 32,
    "slide_title": 24,
    "body": 16,
    "list_item": 16,
    "small": 14,
    "code": 12,
    "footer": 9,
    "nav": 8,
}
# Tiers that follow the slide's small-text / tiny-text marker
SCALED_TIERS = {"body", "list_item", "small"}

CODE_FONT = "Courier New"
QUOTE_FONT = "Georgia"

# ── Spacing (inches) ──────────────────────────────────────────────────────────
NAV_BAR_HEIGHT = 0.35
NAV_TAB_PADDING = 0.15
NAV_TOC_BUTTON_WIDTH = 0.5
CONTENT_MARGIN = 0.5
TITLE_MARGIN = 0.3
TITLE_HEIGHT = 0.5
TITLE_UNDERLINE_GAP = 0.55
TITLE_UNDERLINE_HEIGHT = 0.025
MIN_LIST_TOP = 0.9
MIN_BOX = 0.2
PROGRESS_HEIGHT = 0.04
FOOTER_HEIGHT = 0.25
FOOTER_OFFSET = 0.4
SHAPE_EXTRA_HEIGHT = 0.15  # column backgrounds must cover their text
ADMONITION_MIN_HEIGHT = 0.8
ADMONITION_ACCENT_WIDTH = 0.06
LIST_INDENT = "    "
BULLET = "• "


def _trim_lines(spans: list) -> list:
    """Strip whitespace at paragraph edges without dropping any span."""
    at_line_start = True
    for idx, span in enumerate(spans):
        if span.text == "\n":
            if idx > 0 and spans[idx - 1].text != "\n":
                spans[idx - 1].text = spans[idx - 1].text.rstrip() or spans[idx - 1].text
            at_line_start = True
            continue
        if at_line_start:
            span.text = span.text.lstrip() or span.text
            at_line_start = False
    if spans and spans[-1].text != "\n":
        spans[-1].text = spans[-1].text.rstrip() or spans[-1].text
    return spans


class LayoutSynthesizer:
    """Lays out the slides of one document onto a fixed canvas."""

    def __init__(
        self,
        canvas: CanvasSize,
        total_slides: int,
        config: Optional[ConverterConfig] = None,
    ):
        self.canvas = canvas
        self.total_slides = max(total_slides, 1)
        self.config = config or ConverterConfig()
        self._text_scale = 1.0
        self._base_color = None

    # ── Entry point ──────────────────────────────────────────────────────────

    def synthesize(self, slide: Slide, strategy: Strategy) -> list:
        self._text_scale = font_scale(slide.markers)
        self._base_color = slide.base_color
        if strategy is Strategy.TITLE:
            return self._title_slide(slide)
        if strategy is Strategy.SECTION:
            return self._section_slide(slide)
        if strategy is Strategy.TABLE_OF_CONTENTS:
            primitives = self._toc_slide(slide)
        else:
            primitives = self._content_slide(slide)
        return primitives + self._footer(slide)

    # ── Shared helpers ───────────────────────────────────────────────────────

    @property
    def font(self) -> str:
        return self.config.font_face

    def size(self, tier: str) -> float:
        base = FONT_SIZES[tier]
        if tier in SCALED_TIERS:
            return round(base * self._text_scale, 1)
        return base

    def _clamp_x(self, x: float, margin: float = CONTENT_MARGIN) -> float:
        return min(max(x, margin), self.canvas.width - margin - MIN_BOX)

    def _clamp_box(self, pos: Position, margin: float = CONTENT_MARGIN) -> tuple[float, float]:
        """Left edge and width kept inside the horizontal margins."""
        x = self._clamp_x(pos.x, margin)
        w = min(pos.w, self.canvas.width - 2 * margin)
        w = min(w, self.canvas.width - margin - x)
        return x, max(w, MIN_BOX)

    def _clamp_y(self, y: float) -> float:
        return min(max(y, 0.0), self.canvas.height - MIN_BOX)

    def _fit_height(self, y: float, h: float) -> float:
        return max(min(h, self.canvas.height - y), MIN_BOX)

    def _run_spans(self, runs, size: float, default_color: str = BODY_TEXT) -> list:
        spans = []
        for run in runs:
            if run.is_break:
                spans.append(Span("\n", size=size))
                continue
            style = run.style
            color = style.color if style.color != self._base_color else None
            color = color or (PRIMARY if style.bold else default_color)
            spans.append(
                Span(
                    collapse_whitespace(run.text),
                    bold=style.bold,
                    italic=style.italic,
                    underline=style.underline,
                    color=color,
                    size=size,
                )
            )
        return _trim_lines(spans)

    # ── Navigation and footer ────────────────────────────────────────────────

    def _tab_widths(self, chapters, available: float) -> list:
        if self.config.tab_policy == TAB_POLICY_EVEN:
            return [available / len(chapters)] * len(chapters)
        widths = [
            text_width_in(label, FONT_SIZES["nav"]) + 2 * NAV_TAB_PADDING
            for label in chapters
        ]
        total = sum(widths)
        if total > available:
            widths = [w * available / total for w in widths]
        return widths

    def nav_bar(self, slide: Slide) -> list:
        nav = slide.nav
        if nav is None or not nav.chapters:
            return []
        width = self.canvas.width
        primitives = [
            Rect(0, 0, width, NAV_BAR_HEIGHT, fill=PRIMARY, role="nav-band")
        ]
        start = 0.0
        if self.config.toc_button:
            start = NAV_TOC_BUTTON_WIDTH
            primitives.append(
                text_box(
                    0, 0, start, NAV_BAR_HEIGHT,
                    self.config.toc_title,
                    font_face=self.font,
                    font_size=FONT_SIZES["nav"],
                    color=PRIMARY,
                    fill=WHITE,
                    align="center",
                    valign="middle",
                    role="nav-toc-button",
                )
            )

        widths = self._tab_widths(nav.chapters, width - start)
        x = width - sum(widths)
        for idx, (label, tab_w) in enumerate(zip(nav.chapters, widths)):
            active = idx == nav.active_index
            primitives.append(
                text_box(
                    x, 0, tab_w, NAV_BAR_HEIGHT,
                    label,
                    font_face=self.font,
                    font_size=FONT_SIZES["nav"],
                    color=PRIMARY if active else WHITE,
                    fill=WHITE if active else None,
                    align="center",
                    valign="middle",
                    role="nav-tab-active" if active else "nav-tab",
                )
            )
            x += tab_w
        return primitives

    def _footer(self, slide: Slide) -> list:
        width, height = self.canvas.width, self.canvas.height
        progress = min((slide.index + 1) / self.total_slides, 1.0)
        primitives = [
            Rect(
                0,
                height - PROGRESS_HEIGHT,
                width * progress,
                PROGRESS_HEIGHT,
                fill=PRIMARY,
                role="progress",
            )
        ]
        footer = slide.footer
        if not self.config.footer_labels or footer is None:
            return primitives
        if footer.chapter_label:
            primitives.append(
                text_box(
                    TITLE_MARGIN, height - FOOTER_OFFSET, 3, FOOTER_HEIGHT,
                    footer.chapter_label,
                    font_face=self.font,
                    font_size=FONT_SIZES["footer"],
                    color=PRIMARY,
                    role="footer-chapter",
                )
            )
        if footer.page_label:
            primitives.append(
                text_box(
                    width - 1.2, height - FOOTER_OFFSET, 1, FOOTER_HEIGHT,
                    footer.page_label,
                    font_face=self.font,
                    font_size=FONT_SIZES["footer"],
                    color=LIGHT_TEXT,
                    align="right",
                    role="footer-page",
                )
            )
        return primitives

    # ── Strategies ───────────────────────────────────────────────────────────

    def _fallback(self, slide: Slide) -> list:
        """Title/section slide missing its heading: render what is there."""
        primitives = self.render_elements(slide.elements)
        if primitives or (slide.nav is None and slide.footer is None):
            return primitives
        return self._content_slide(slide) + self._footer(slide)

    def _title_slide(self, slide: Slide) -> list:
        heading = slide.first("heading", level=1) or slide.first("heading")
        subtitle = slide.first("paragraph")
        if heading is None and subtitle is None:
            return self._fallback(slide)

        width = self.canvas.width
        center_y = self.canvas.height / 2 - 0.8
        primitives = []
        if heading is not None:
            primitives.append(
                text_box(
                    0.5, center_y, width - 1, 1,
                    flat_text(heading.runs),
                    font_face=self.font,
                    font_size=FONT_SIZES["title_slide_title"],
                    color=PRIMARY,
                    bold=True,
                    align="center",
                    valign="middle",
                    role="title",
                )
            )
        if subtitle is not None:
            primitives.append(
                text_box(
                    0.5, center_y + 1.2, width - 1, 0.8,
                    flat_text(subtitle.runs),
                    font_face=self.font,
                    font_size=FONT_SIZES["title_slide_subtitle"],
                    color=LIGHT_TEXT,
                    align="center",
                    role="subtitle",
                )
            )
        return primitives

    def _section_slide(self, slide: Slide) -> list:
        heading = slide.first("heading", level=1)
        if heading is None:
            return self._fallback(slide)
        return [
            text_box(
                0.5, self.canvas.height / 2 - 0.5, self.canvas.width - 1, 1,
                flat_text(heading.runs),
                font_face=self.font,
                font_size=FONT_SIZES["section_title"],
                color=PRIMARY,
                bold=True,
                align="center",
                valign="middle",
                role="title",
            )
        ]

    def _title_top(self, slide: Slide) -> float:
        return NAV_BAR_HEIGHT + 0.1 if slide.nav and slide.nav.chapters else TITLE_MARGIN

    def _toc_slide(self, slide: Slide) -> list:
        primitives = self.nav_bar(slide)
        title_y = self._title_top(slide)
        heading = slide.first("heading")
        label = flat_text(heading.runs) if heading is not None else self.config.toc_title
        title_size = FONT_SIZES["slide_title"]
        primitives.append(
            text_box(
                0.5, title_y, max(2.0, text_width_in(label, title_size, bold=True) + 0.4), TITLE_HEIGHT,
                label,
                font_face=self.font,
                font_size=title_size,
                color=PRIMARY,
                bold=True,
                role="title",
            )
        )

        toc = slide.first("list")
        if toc is None or not toc.items:
            return primitives
        size = FONT_SIZES["body"] + 2
        spans = []
        for idx, item in enumerate(toc.items):
            spans.append(Span(f"{idx + 1}. ", bold=True, color=PRIMARY, size=size))
            spans.append(Span(flat_text(item.runs), color=BODY_TEXT, size=size))
            if idx < len(toc.items) - 1:
                spans.append(Span("\n", size=size))
        top = title_y + 0.8
        primitives.append(
            TextBox(
                1.5, top, self.canvas.width - 3, self._fit_height(top, self.canvas.height - title_y - 1.5),
                spans=spans,
                font_face=self.font,
                font_size=size,
                color=BODY_TEXT,
                line_spacing=1.75,
                role="toc-list",
            )
        )
        return primitives

    def _content_slide(self, slide: Slide) -> list:
        primitives = self.nav_bar(slide)
        title = slide.first("heading", level=2)
        if title is not None:
            title_y = self._title_top(slide)
            x, w = self._clamp_box(title.position, margin=TITLE_MARGIN)
            primitives.append(
                text_box(
                    x, title_y, w, TITLE_HEIGHT,
                    flat_text(title.runs),
                    font_face=self.font,
                    font_size=FONT_SIZES["slide_title"],
                    color=PRIMARY,
                    bold=True,
                    role="title",
                )
            )
            primitives.append(
                Rect(
                    x,
                    title_y + TITLE_UNDERLINE_GAP,
                    w,
                    TITLE_UNDERLINE_HEIGHT,
                    fill=PRIMARY,
                    role="title-underline",
                )
            )
        body = [
            e for e in slide.elements if not (e.kind == "heading" and e.level <= 2)
        ]
        return primitives + self.render_elements(body)

    # ── Element renderers ────────────────────────────────────────────────────

    def render_elements(self, elements) -> list:
        primitives = []
        for element in elements:
            renderer = getattr(self, f"_render_{element.kind}", None)
            if renderer is not None:
                primitives.extend(renderer(element))
        return primitives

    def _render_heading(self, element) -> list:
        sizes = {3: self.size("body") + 2, 4: self.size("body")}
        size = sizes.get(element.level, self.size("small"))
        x, w = self._clamp_box(element.position)
        return [
            text_box(
                x, self._clamp_y(element.position.y), w, 0.35,
                flat_text(element.runs),
                font_face=self.font,
                font_size=size,
                color=PRIMARY,
                bold=True,
                role="subheading",
            )
        ]

    def _render_list(self, element) -> list:
        if not element.items:
            return []
        pos = element.position
        size = self.size("small") if pos.in_column else self.size("list_item")
        spans = []
        number = 0
        for idx, item in enumerate(element.items):
            indent = LIST_INDENT * item.level
            if element.ordered and item.level == 0:
                number += 1
                prefix = f"{indent}{number}. "
            else:
                prefix = f"{indent}{BULLET}"
            spans.append(Span(prefix, color=PRIMARY, size=size))
            spans.extend(self._run_spans(item.runs, size))
            if idx < len(element.items) - 1:
                spans.append(Span("\n", size=size))
        x, w = self._clamp_box(pos)
        y = self._clamp_y(max(pos.y, MIN_LIST_TOP))
        h = self._fit_height(y, min(pos.h, self.canvas.height - pos.y - 0.5))
        return [
            TextBox(
                x, y, w, h,
                spans=spans,
                font_face=self.font,
                font_size=size,
                color=BODY_TEXT,
                line_spacing=1.5,
                role="list",
            )
        ]

    def _render_paragraph(self, element) -> list:
        pos = element.position
        size = self.size("small") if pos.in_column else self.size("body")
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        return [
            TextBox(
                x, y, w, self._fit_height(y, max(pos.h, 0.4)),
                spans=self._run_spans(element.runs, size),
                font_face=self.font,
                font_size=size,
                color=BODY_TEXT,
                line_spacing=1.5,
                role="paragraph",
            )
        ]

    def _render_admonition(self, element) -> list:
        pos = element.position
        palette = admonition_palette(element.admonition_kind)
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        height = self._fit_height(y, max(pos.h, ADMONITION_MIN_HEIGHT))
        primitives = [
            Rect(x, y, w, height, fill=palette["bg"], rounded=True, role="admonition-bg"),
            Rect(
                x, y, ADMONITION_ACCENT_WIDTH, height,
                fill=palette["border"],
                role="admonition-accent",
            ),
        ]
        inner_x, inner_w = x + 0.2, max(w - 0.4, MIN_BOX)
        content_y = y + 0.12
        if element.title:
            primitives.append(
                text_box(
                    inner_x, content_y, inner_w, 0.35,
                    element.title,
                    font_face=self.font,
                    font_size=self.size("body"),
                    color=palette["text"],
                    bold=True,
                    role="admonition-title",
                )
            )
            primitives.append(
                Rect(
                    inner_x, content_y + 0.32, inner_w * 0.3, 0.02,
                    fill=palette["border"],
                    role="admonition-title-underline",
                )
            )
            content_y += 0.45
        if element.body_lines:
            primitives.append(
                text_box(
                    inner_x, content_y, inner_w,
                    max(height - (content_y - y) - 0.1, MIN_BOX),
                    element.body,
                    font_face=self.font,
                    font_size=self.size("small"),
                    color=palette["text"],
                    line_spacing=1.5,
                    role="admonition-body",
                )
            )
        return primitives

    def _render_table(self, element) -> list:
        if not element.rows:
            return []
        cols = max(len(row) for row in element.rows)
        size = self.size("small")
        rows = []
        for row in element.rows:
            cells = [
                CellSpec(
                    text=cell.text,
                    bold=cell.is_header,
                    fill=PRIMARY if cell.is_header else PANEL_GRAY,
                    color=WHITE if cell.is_header else BODY_TEXT,
                    font_size=size,
                )
                for cell in row
            ]
            cells.extend(CellSpec(text="", fill=PANEL_GRAY, font_size=size) for _ in range(cols - len(row)))
            rows.append(cells)
        pos = element.position
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        return [
            TablePrimitive(
                x, y, w, self._fit_height(y, pos.h),
                col_widths=[w / cols] * cols,
                rows=rows,
                font_face=self.font,
                border_color=LIGHT_TEXT,
                border_width=0.5,
                role="table",
            )
        ]

    def _render_code(self, element) -> list:
        pos = element.position
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        height = self._fit_height(y, max(pos.h, 0.5))
        return [
            Rect(x, y, w, height, fill=PANEL_GRAY, role="code-bg"),
            text_box(
                x + 0.1, y + 0.08, max(w - 0.2, MIN_BOX), max(height - 0.16, MIN_BOX),
                element.text.rstrip("\n"),
                font_face=CODE_FONT,
                font_size=FONT_SIZES["code"],
                color=CODE_TEXT,
                role="code",
            ),
        ]

    def _render_blockquote(self, element) -> list:
        pos = element.position
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        height = self._fit_height(y, max(pos.h, 0.4))
        return [
            Rect(x, y, 0.04, height, fill=PRIMARY, role="blockquote-bar"),
            text_box(
                x + 0.15, y, max(w - 0.15, MIN_BOX), height,
                flat_text(element.runs),
                font_face=QUOTE_FONT,
                font_size=self.size("body"),
                color=LIGHT_TEXT,
                italic=True,
                role="blockquote",
            ),
        ]

    def _render_shape(self, element) -> list:
        pos = element.position
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        border = element.border
        return [
            Rect(
                x, y, w, self._fit_height(y, pos.h + SHAPE_EXTRA_HEIGHT),
                fill=element.fill or PANEL_GRAY,
                line_color=border.color if border else None,
                line_width=border.width if border else 0.0,
                rounded=True,
                radius=max(element.radius, 0.03),
                role="shape",
            )
        ]

    def _render_image(self, element) -> list:
        if not element.source:
            return []
        pos = element.position
        x, w = self._clamp_box(pos)
        y = self._clamp_y(pos.y)
        h = pos.h * (w / pos.w) if pos.w > 0 else pos.h
        return [Picture(x, y, w, self._fit_height(y, h), source=element.source, role="image")]


def synthesize(
    slide: Slide,
    strategy: Strategy,
    canvas: CanvasSize,
    total_slides: int = 1,
    config: Optional[ConverterConfig] = None,
) -> list:
    """Primitives for one slide."""
    return LayoutSynthesizer(canvas, total_slides, config).synthesize(slide, strategy)
