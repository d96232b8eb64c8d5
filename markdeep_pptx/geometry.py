"""Pixel geometry to normalized canvas coordinates (inches)."""

from dataclasses import dataclass, replace

from .snapshot import Rect

# Positions are compared at 1/100 inch
PRECISION = 2


@dataclass(frozen=True)
class CanvasSize:
    width: float
    height: float

    @classmethod
    def for_aspect_ratio(cls, width: float, aspect_ratio: float) -> "CanvasSize":
        """Width is fixed; height follows the source aspect ratio."""
        return cls(width=width, height=round(width / aspect_ratio, 4))


@dataclass(frozen=True)
class Position:
    x: float
    y: float
    w: float
    h: float
    in_column: bool = False

    @property
    def is_empty(self) -> bool:
        return round(self.w, PRECISION) <= 0 or round(self.h, PRECISION) <= 0

    def in_columns(self) -> "Position":
        return replace(self, in_column=True)


@dataclass(frozen=True)
class SlideScale:
    """Origin and scale factors for one slide."""

    origin_x: float
    origin_y: float
    scale_x: float
    scale_y: float

    @classmethod
    def for_slide(cls, slide_rect: Rect, canvas: CanvasSize, viewport) -> "SlideScale":
        """Scale factors from the slide's rendered box onto ``canvas``.

        A degenerate slide box (hidden slide) falls back to the viewport size.
        """
        width, height = slide_rect.width, slide_rect.height
        if slide_rect.is_degenerate:
            width, height = viewport
        return cls(
            origin_x=slide_rect.left,
            origin_y=slide_rect.top,
            scale_x=canvas.width / width,
            scale_y=canvas.height / height,
        )


def normalize(rect: Rect, scale: SlideScale, in_column: bool = False) -> Position:
    return Position(
        x=(rect.left - scale.origin_x) * scale.scale_x,
        y=(rect.top - scale.origin_y) * scale.scale_y,
        w=rect.width * scale.scale_x,
        h=rect.height * scale.scale_y,
        in_column=in_column,
    )
