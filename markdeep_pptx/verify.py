"""Text overflow and out-of-canvas checks on synthesized primitives.

Runs on the primitive lists before they are written, using the same
character-width estimates as the layout. Findings are diagnostics only.
"""

from dataclasses import dataclass, field

from .geometry import CanvasSize
from .textmetrics import text_height_in

# Overflow smaller than this is rounding noise
TOLERANCE = 0.05


@dataclass
class TextOverflow:
    """A text box whose estimated text height exceeds the box."""

    slide_num: int
    index: int
    role: str
    text_preview: str
    box_height: float
    needed_height: float

    @property
    def overflow(self) -> float:
        return self.needed_height - self.box_height


@dataclass
class OutOfBounds:
    """A primitive extending past the canvas edge."""

    slide_num: int
    index: int
    role: str
    edge: str
    amount: float


@dataclass
class SlideReport:
    slide_num: int
    total_primitives: int
    overflows: list = field(default_factory=list)
    out_of_bounds: list = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.overflows or self.out_of_bounds)


def _preview(text: str, max_len: int = 30) -> str:
    text = " ".join(text.split())
    return text if len(text) <= max_len else text[: max_len - 3] + "..."


def _needed_height(box) -> float:
    size = max((s.size or box.font_size for s in box.spans), default=box.font_size)
    bold = any(s.bold for s in box.spans)
    spacing = 1.2 * (box.line_spacing or 1.0)
    return text_height_in(
        box.text,
        size,
        box.w,
        line_spacing=spacing,
        bold=bold,
        monospace=box.role == "code",
    )


def verify_primitives(primitives, canvas: CanvasSize, slide_num: int) -> SlideReport:
    report = SlideReport(slide_num=slide_num, total_primitives=len(primitives))
    for idx, primitive in enumerate(primitives):
        edges = {
            "left": -primitive.x,
            "top": -primitive.y,
            "right": primitive.x + primitive.w - canvas.width,
            "bottom": primitive.y + primitive.h - canvas.height,
        }
        for edge, amount in edges.items():
            if amount > TOLERANCE:
                report.out_of_bounds.append(
                    OutOfBounds(slide_num, idx, primitive.role, edge, round(amount, 2))
                )

        if primitive.kind != "text" or not primitive.text.strip():
            continue
        needed = _needed_height(primitive)
        if needed - primitive.h > TOLERANCE:
            report.overflows.append(
                TextOverflow(
                    slide_num=slide_num,
                    index=idx,
                    role=primitive.role,
                    text_preview=_preview(primitive.text),
                    box_height=round(primitive.h, 2),
                    needed_height=round(needed, 2),
                )
            )
    return report


def verify_document(slides_primitives, canvas: CanvasSize) -> list:
    return [
        verify_primitives(primitives, canvas, slide_num)
        for slide_num, primitives in enumerate(slides_primitives, start=1)
    ]


def format_report(reports, verbose: bool = False) -> str:
    lines = []
    flagged = [r for r in reports if r.has_issues]
    total_overflows = sum(len(r.overflows) for r in reports)
    total_oob = sum(len(r.out_of_bounds) for r in reports)
    lines.append(
        f"Verified {len(reports)} slides: {total_overflows} overflow(s), "
        f"{total_oob} out-of-canvas primitive(s)"
    )
    for report in reports if verbose else flagged:
        if not report.has_issues:
            lines.append(f"  Slide {report.slide_num}: OK ({report.total_primitives} primitives)")
            continue
        lines.append(f"  Slide {report.slide_num}:")
        for o in report.overflows:
            lines.append(
                f"    OVERFLOW [{o.role or o.index}] '{o.text_preview}' "
                f"needs {o.needed_height:.2f}\" in {o.box_height:.2f}\" (+{o.overflow:.2f}\")"
            )
        for b in report.out_of_bounds:
            lines.append(f"    OUT OF CANVAS [{b.role or b.index}] {b.edge} by {b.amount:.2f}\"")
    return "\n".join(lines)
