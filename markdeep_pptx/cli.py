"""Command line entry point."""

import argparse
import asyncio
import sys
import traceback
from pathlib import Path

from .config import TAB_POLICIES, ConverterConfig
from .converter import MarkdeepToPPTXConverter
from .errors import ConversionError
from .render import acquire_html
from .snapshot import snapshot_from_html
from .verify import format_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markdeep-pptx",
        description="Convert Markdeep Slides HTML decks to PowerPoint presentations.",
    )
    parser.add_argument("input", help="Input HTML file path or URL")
    parser.add_argument(
        "output", nargs="?", help="Output PPTX file path (default: same name as input)"
    )
    parser.add_argument(
        "--from-snapshot",
        action="store_true",
        help="Input is stamped HTML saved with --save-snapshot; skip the browser",
    )
    parser.add_argument(
        "--save-snapshot", metavar="PATH", help="Also save the stamped render snapshot"
    )
    parser.add_argument(
        "--tab-policy",
        choices=TAB_POLICIES,
        default="proportional",
        help="Navigation tab sizing (default: proportional to label width)",
    )
    parser.add_argument(
        "--toc-label",
        action="append",
        metavar="LABEL",
        help="Heading text that marks the table-of-contents slide (repeatable)",
    )
    parser.add_argument(
        "--toc-button", action="store_true", help="Draw a TOC button in the navigation bar"
    )
    parser.add_argument(
        "--no-footer-labels",
        action="store_true",
        help="Omit chapter and page-number labels in the footer",
    )
    parser.add_argument("--font", help="Font face for slide text")
    parser.add_argument(
        "--settle-ms", type=int, help="Extra wait after load for script rendering"
    )
    parser.add_argument(
        "--verify", action="store_true", help="Report text overflow and off-canvas shapes"
    )
    return parser


def config_from_args(args) -> ConverterConfig:
    config = ConverterConfig(
        tab_policy=args.tab_policy,
        toc_button=args.toc_button,
        footer_labels=not args.no_footer_labels,
    )
    if args.toc_label:
        config.toc_labels = tuple(args.toc_label)
    if args.font:
        config.font_face = args.font
    if args.settle_ms is not None:
        config.settle_delay_ms = args.settle_ms
    return config


def _is_url(locator: str) -> bool:
    return locator.startswith(("http://", "https://", "file://"))


def default_output(locator: str) -> Path:
    if _is_url(locator):
        name = Path(locator.rstrip("/").split("/")[-1] or "presentation").stem
        return Path(f"{name}.pptx")
    return Path(locator).with_suffix(".pptx")


def run(args) -> int:
    config = config_from_args(args)
    locator = args.input
    output_path = Path(args.output) if args.output else default_output(locator)

    print(f"Converting: {locator}")
    print(f"Output: {output_path}")

    if args.from_snapshot:
        html = Path(locator).read_text(encoding="utf-8")
    else:
        print("Rendering slides...")
        html = asyncio.run(acquire_html(locator, config))
        if args.save_snapshot:
            Path(args.save_snapshot).write_text(html, encoding="utf-8")
            print(f"Snapshot: {args.save_snapshot}")
    snapshot = snapshot_from_html(html, locator=locator)

    base_dir = None if _is_url(locator) else Path(locator).resolve().parent
    converter = MarkdeepToPPTXConverter(snapshot, config, base_dir=base_dir)
    converter.convert()
    converter.save(output_path)

    document = converter.document
    print(f"Title: {document.title}")
    print(f"Aspect ratio: {document.aspect_ratio:.2f}")
    if args.verify:
        print(format_report(converter.verify()))
    print(f"Done! Created {output_path} ({len(document.slides)} slides)")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)

    if not _is_url(args.input) and not Path(args.input).exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        sys.exit(run(args))
    except (ConversionError, OSError, ValueError) as exc:
        print(f"Error during conversion: {exc}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
