"""Slide classifier: picks the layout strategy for an extracted slide."""

from enum import Enum

from .config import TOC_LABELS
from .model import Slide, first_heading_text

SECTION_MARKER = "h1-title-slide"


class Strategy(Enum):
    TITLE = "title"
    SECTION = "section"
    TABLE_OF_CONTENTS = "toc"
    CONTENT = "content"


def is_toc_heading(text: str, toc_labels=TOC_LABELS) -> bool:
    return bool(text) and any(label and label in text for label in toc_labels)


def classify_slide(slide: Slide, toc_labels=TOC_LABELS) -> Strategy:
    if slide.index == 0:
        return Strategy.TITLE
    if SECTION_MARKER in slide.markers:
        return Strategy.SECTION
    if is_toc_heading(first_heading_text(slide), toc_labels):
        return Strategy.TABLE_OF_CONTENTS
    return Strategy.CONTENT
