"""Presentation writer: canvas primitives to a .pptx file via python-pptx."""

import base64
import io
import os
import tempfile
import urllib.request
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from lxml import etree
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from .colors import BODY_TEXT, WHITE, hex_to_rgb
from .errors import WriteError
from .model import Document

BLANK_LAYOUT = 6
IMAGE_TIMEOUT_S = 10

_ALIGN = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}
_ANCHOR = {"top": MSO_ANCHOR.TOP, "middle": MSO_ANCHOR.MIDDLE, "bottom": MSO_ANCHOR.BOTTOM}


def _rgb(color: Optional[str], default: str = BODY_TEXT):
    return hex_to_rgb(color or default) or hex_to_rgb(default)


def set_slide_background(slide, color: str = WHITE):
    """Set solid background color for a slide."""
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = _rgb(color)


def _set_font(run, span, box):
    """Apply span formatting over the box defaults."""
    font = run.font
    font.name = box.font_face
    font.size = Pt(span.size or box.font_size)
    font.bold = span.bold
    font.italic = span.italic
    font.underline = span.underline
    font.color.rgb = _rgb(span.color or box.color)


def _paragraphs(spans) -> list:
    """Split spans on ``\\n`` into per-paragraph span lists."""
    paragraphs: list = [[]]
    for span in spans:
        parts = span.text.split("\n")
        for idx, part in enumerate(parts):
            if idx > 0:
                paragraphs.append([])
            if part:
                paragraphs[-1].append((part, span))
    return paragraphs


def add_text_box(slide, box):
    shape = slide.shapes.add_textbox(
        Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h)
    )
    if box.fill:
        shape.fill.solid()
        shape.fill.fore_color.rgb = _rgb(box.fill)
    tf = shape.text_frame
    tf.word_wrap = True
    tf.auto_size = None
    tf.vertical_anchor = _ANCHOR.get(box.valign, MSO_ANCHOR.TOP)

    for p_idx, p_spans in enumerate(_paragraphs(box.spans)):
        p = tf.paragraphs[0] if p_idx == 0 else tf.add_paragraph()
        p.alignment = _ALIGN.get(box.align, PP_ALIGN.LEFT)
        if box.line_spacing:
            p.line_spacing = box.line_spacing
        if not p_spans:
            # Blank line keeps the box font so its height matches
            run = p.add_run()
            run.text = ""
            run.font.name = box.font_face
            run.font.size = Pt(box.font_size)
            continue
        for text, span in p_spans:
            run = p.add_run()
            run.text = text
            _set_font(run, span, box)
    return shape


def add_rect(slide, rect):
    shape_type = MSO_SHAPE.ROUNDED_RECTANGLE if rect.rounded else MSO_SHAPE.RECTANGLE
    shape = slide.shapes.add_shape(
        shape_type, Inches(rect.x), Inches(rect.y), Inches(rect.w), Inches(rect.h)
    )
    if rect.fill:
        shape.fill.solid()
        shape.fill.fore_color.rgb = _rgb(rect.fill)
    else:
        shape.fill.background()
    if rect.line_color and rect.line_width > 0:
        shape.line.color.rgb = _rgb(rect.line_color)
        shape.line.width = Pt(rect.line_width)
    else:
        shape.line.fill.background()
    if rect.rounded:
        shorter = min(rect.w, rect.h)
        if shorter > 0:
            shape.adjustments[0] = min(rect.radius / shorter, 0.5)
    return shape


def _set_cell_border(cell, color: str, width_pt: float):
    """Outline all four cell edges. Must run before the cell fill is set."""
    tc_pr = cell._tc.get_or_add_tcPr()
    for edge in ("a:lnL", "a:lnR", "a:lnT", "a:lnB"):
        line = etree.SubElement(
            tc_pr, qn(edge), w=str(Pt(width_pt)), cap="flat", cmpd="sng", algn="ctr"
        )
        solid = etree.SubElement(line, qn("a:solidFill"))
        etree.SubElement(solid, qn("a:srgbClr"), val=color)


def add_table(slide, table):
    rows, cols = len(table.rows), len(table.col_widths)
    if rows == 0 or cols == 0:
        return None
    frame = slide.shapes.add_table(
        rows, cols, Inches(table.x), Inches(table.y), Inches(table.w), Inches(table.h)
    )
    grid = frame.table
    for col_idx, width in enumerate(table.col_widths):
        grid.columns[col_idx].width = Inches(width)
    for row_idx, row in enumerate(table.rows):
        for col_idx, spec in enumerate(row[:cols]):
            cell = grid.cell(row_idx, col_idx)
            if table.border_color:
                _set_cell_border(cell, table.border_color, table.border_width)
            if spec.fill:
                cell.fill.solid()
                cell.fill.fore_color.rgb = _rgb(spec.fill)
            cell.vertical_anchor = MSO_ANCHOR.MIDDLE
            p = cell.text_frame.paragraphs[0]
            p.alignment = _ALIGN.get(spec.align, PP_ALIGN.CENTER)
            run = p.add_run()
            run.text = spec.text
            run.font.name = table.font_face
            run.font.size = Pt(spec.font_size)
            run.font.bold = spec.bold
            run.font.color.rgb = _rgb(spec.color)
    return frame


def load_image(source: str, base_dir: Optional[Path] = None):
    """Image bytes (as a stream) or a path for ``add_picture``."""
    if source.startswith("data:"):
        header, _, payload = source.partition(",")
        if ";base64" in header:
            return io.BytesIO(base64.b64decode(payload))
        return io.BytesIO(unquote(payload).encode("latin-1"))
    parsed = urlparse(source)
    if parsed.scheme in ("http", "https"):
        with urllib.request.urlopen(source, timeout=IMAGE_TIMEOUT_S) as response:
            return io.BytesIO(response.read())
    if parsed.scheme == "file":
        return unquote(parsed.path)
    path = Path(unquote(source))
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return str(path)


class PresentationWriter:
    """Builds and persists the presentation for an extracted document."""

    def __init__(self, author: str = "", base_dir: Optional[Path] = None):
        self.author = author
        self.base_dir = base_dir
        self.warnings: list[str] = []

    def add_picture(self, slide, picture, slide_num: int):
        try:
            image = load_image(picture.source, self.base_dir)
            return slide.shapes.add_picture(
                image,
                Inches(picture.x),
                Inches(picture.y),
                Inches(picture.w),
                Inches(picture.h),
            )
        except (OSError, ValueError) as exc:
            self.warnings.append(
                f"Slide {slide_num}: image {picture.source[:60]!r} skipped ({exc})"
            )
            return None

    def build(self, document: Document, slides_primitives) -> Presentation:
        prs = Presentation()
        prs.slide_width = Inches(document.canvas.width)
        prs.slide_height = Inches(document.canvas.height)
        prs.core_properties.title = document.title
        if self.author:
            prs.core_properties.author = self.author
        layout = prs.slide_layouts[BLANK_LAYOUT]

        for slide_num, primitives in enumerate(slides_primitives, start=1):
            slide = prs.slides.add_slide(layout)
            set_slide_background(slide)
            for primitive in primitives:
                if primitive.kind == "text":
                    add_text_box(slide, primitive)
                elif primitive.kind == "rect":
                    add_rect(slide, primitive)
                elif primitive.kind == "table":
                    add_table(slide, primitive)
                elif primitive.kind == "picture":
                    self.add_picture(slide, primitive, slide_num)
        return prs

    def save(self, prs: Presentation, output_path) -> Path:
        """Save atomically: the target is either complete or untouched."""
        target = Path(output_path)
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.stem}-", suffix=".pptx", dir=target.parent
            )
            with os.fdopen(fd, "wb") as fh:
                prs.save(fh)
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as exc:
            raise WriteError(str(target), str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
        return target


def write_presentation(document: Document, slides_primitives, output_path, author: str = "") -> Path:
    writer = PresentationWriter(author=author)
    return writer.save(writer.build(document, slides_primitives), output_path)
