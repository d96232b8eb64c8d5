"""Convert rendered Markdeep Slides decks into PowerPoint presentations."""

from .classify import Strategy, classify_slide
from .config import ConverterConfig
from .converter import MarkdeepToPPTXConverter
from .errors import AcquisitionError, ConversionError, SnapshotError, WriteError
from .extract import SlideExtractor, classify
from .layout import LayoutSynthesizer, synthesize
from .snapshot import RenderedNode, RenderSnapshot, snapshot_from_html

__version__ = "0.1.0"

__all__ = [
    "AcquisitionError",
    "ConversionError",
    "ConverterConfig",
    "LayoutSynthesizer",
    "MarkdeepToPPTXConverter",
    "RenderSnapshot",
    "RenderedNode",
    "SlideExtractor",
    "SnapshotError",
    "Strategy",
    "WriteError",
    "classify",
    "classify_slide",
    "snapshot_from_html",
    "synthesize",
]
