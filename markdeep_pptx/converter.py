"""Converter: snapshot → model → primitives → presentation."""

import sys
import warnings
from pathlib import Path
from typing import Optional

from .classify import classify_slide
from .config import ConverterConfig
from .extract import SlideExtractor
from .layout import LayoutSynthesizer
from .model import Document
from .snapshot import RenderSnapshot
from .verify import verify_document
from .writer import PresentationWriter


class MarkdeepToPPTXConverter:
    """Converts a rendered Markdeep Slides deck to PowerPoint."""

    def __init__(
        self,
        snapshot: RenderSnapshot,
        config: Optional[ConverterConfig] = None,
        base_dir: Optional[Path] = None,
    ):
        self.snapshot = snapshot
        self.config = config or ConverterConfig()
        self.base_dir = base_dir
        self.document: Optional[Document] = None
        self.slides_primitives: list = []
        self.prs = None

        # Track warnings
        self.warnings: list[str] = []

    def extract(self) -> Document:
        extractor = SlideExtractor(self.config)
        document = extractor.extract(self.snapshot)
        self.warnings.extend(extractor.warnings)
        return document

    def synthesize(self, document: Document) -> list:
        synthesizer = LayoutSynthesizer(
            document.canvas, len(document.slides), self.config
        )
        result = []
        for slide in document.slides:
            strategy = classify_slide(slide, self.config.toc_labels)
            result.append(synthesizer.synthesize(slide, strategy))
        return result

    def verify(self) -> list:
        if self.document is None:
            raise RuntimeError("convert() must run before verify()")
        return verify_document(self.slides_primitives, self.document.canvas)

    def convert(self):
        """Extract, lay out and build the presentation in memory."""
        if not self.snapshot.slides:
            warnings.warn(
                "No slides found in snapshot. Check for <div class='slide'> elements."
            )

        self.document = self.extract()
        self.slides_primitives = self.synthesize(self.document)

        writer = PresentationWriter(author=self.config.author, base_dir=self.base_dir)
        self.prs = writer.build(self.document, self.slides_primitives)
        self.warnings.extend(writer.warnings)

        if self.warnings:
            print(f"\nWarnings ({len(self.warnings)}):", file=sys.stderr)
            for w in self.warnings:
                print(f"  - {w}", file=sys.stderr)

        return self.prs

    def save(self, output_path) -> Path:
        """Save the presentation to a file."""
        if self.prs is None:
            self.convert()
        writer = PresentationWriter(author=self.config.author)
        return writer.save(self.prs, output_path)
