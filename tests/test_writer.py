"""Tests for the presentation writer, verifier and converter."""

import base64

import pytest
from pptx import Presentation
from pptx.oxml.ns import qn
from pptx.util import Inches

from conftest import STAMPED_DECK

from markdeep_pptx.converter import MarkdeepToPPTXConverter
from markdeep_pptx.errors import WriteError
from markdeep_pptx.geometry import CanvasSize
from markdeep_pptx.model import Document
from markdeep_pptx.primitives import CellSpec, Picture, Rect, Span, TablePrimitive, TextBox, text_box
from markdeep_pptx.snapshot import snapshot_from_html
from markdeep_pptx.verify import format_report, verify_document, verify_primitives
from markdeep_pptx.writer import PresentationWriter, load_image, write_presentation

CANVAS = CanvasSize(10.0, 5.625)

# 1x1 transparent PNG
PNG_1PX = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def document():
    return Document(title="Deck", aspect_ratio=16 / 9, canvas=CANVAS, slides=())


class TestPresentationWriter:
    def test_build_and_reopen(self, tmp_path):
        primitives = [
            Rect(0, 0, 10, 0.35, fill="2980B9", role="nav-band"),
            TextBox(
                1, 1, 6, 1,
                spans=[Span("Hello ", bold=True), Span("world"), Span("\n"), Span("again")],
                role="paragraph",
            ),
            Rect(1, 2.5, 3, 1, fill="E3F2FD", line_color="2196F3", line_width=1.5, rounded=True),
            TablePrimitive(
                1, 3.6, 4, 1,
                col_widths=[2, 2],
                rows=[[CellSpec("A", bold=True, fill="2980B9"), CellSpec("B")], [CellSpec("1"), CellSpec("2")]],
                border_color="666666",
            ),
        ]
        target = write_presentation(document(), [primitives], tmp_path / "out.pptx", author="me")
        prs = Presentation(str(target))
        assert prs.slide_width == Inches(10)
        assert prs.slide_height == Inches(5.625)
        assert prs.core_properties.title == "Deck"

        (slide,) = prs.slides
        shapes = list(slide.shapes)
        assert len(shapes) == 4
        paragraphs = shapes[1].text_frame.paragraphs
        assert [p.text for p in paragraphs] == ["Hello world", "again"]
        assert paragraphs[0].runs[0].font.bold is True
        assert shapes[3].table.cell(0, 0).text == "A"

    def test_table_cell_borders(self, tmp_path):
        table = TablePrimitive(
            1, 1, 2, 0.5, col_widths=[2], rows=[[CellSpec("x")]], border_color="666666"
        )
        target = write_presentation(document(), [[table]], tmp_path / "table.pptx")
        cell = Presentation(str(target)).slides[0].shapes[0].table.cell(0, 0)
        tc_pr = cell._tc.tcPr
        for edge in ("a:lnL", "a:lnR", "a:lnT", "a:lnB"):
            line = tc_pr.find(qn(edge))
            assert line is not None
            assert line.find(qn("a:solidFill")).find(qn("a:srgbClr")).get("val") == "666666"

    def test_blank_lines_keep_font(self, tmp_path):
        box = text_box(1, 1, 4, 1, "a\n\nb", font_size=20)
        target = write_presentation(document(), [[box]], tmp_path / "blank.pptx")
        shape = Presentation(str(target)).slides[0].shapes[0]
        assert [p.text for p in shape.text_frame.paragraphs] == ["a", "", "b"]

    def test_data_uri_picture(self, tmp_path):
        picture = Picture(1, 1, 1, 1, source=f"data:image/png;base64,{PNG_1PX}")
        target = write_presentation(document(), [[picture]], tmp_path / "pic.pptx")
        assert len(Presentation(str(target)).slides[0].shapes) == 1

    def test_missing_picture_is_a_warning(self, tmp_path):
        writer = PresentationWriter(base_dir=tmp_path)
        prs = writer.build(document(), [[Picture(1, 1, 1, 1, source="missing.png")]])
        assert len(prs.slides[0].shapes) == 0
        assert len(writer.warnings) == 1
        assert "missing.png" in writer.warnings[0]

    def test_save_is_atomic_on_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        writer = PresentationWriter()
        with pytest.raises(WriteError):
            writer.save(writer.build(document(), [[]]), blocker / "out.pptx")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["file"]

    def test_load_image_sources(self, tmp_path):
        stream = load_image(f"data:image/png;base64,{PNG_1PX}")
        assert stream.read() == base64.b64decode(PNG_1PX)
        assert load_image("file:///tmp/a%20b.png") == "/tmp/a b.png"
        assert load_image("img/x.png", tmp_path) == str(tmp_path / "img" / "x.png")


class TestVerify:
    def test_clean_slide(self):
        box = text_box(1, 1, 6, 1, "Short", font_size=16)
        report = verify_primitives([box], CANVAS, 1)
        assert not report.has_issues

    def test_overflow_detected(self):
        box = text_box(1, 1, 1, 0.3, "word " * 80, font_size=16, role="paragraph")
        (report,) = verify_document([[box]], CANVAS)
        (overflow,) = report.overflows
        assert overflow.role == "paragraph"
        assert overflow.overflow > 0
        assert "OVERFLOW [paragraph]" in format_report([report])

    def test_out_of_canvas(self):
        rect = Rect(9, 5, 2, 1, role="shape")
        report = verify_primitives([rect], CANVAS, 3)
        assert {b.edge for b in report.out_of_bounds} == {"right", "bottom"}
        assert "Slide 3" in format_report([report])


class TestConverter:
    def test_stamped_deck_end_to_end(self, tmp_path):
        snapshot = snapshot_from_html(STAMPED_DECK, locator="deck.html")
        converter = MarkdeepToPPTXConverter(snapshot, base_dir=tmp_path)
        converter.convert()
        target = converter.save(tmp_path / "deck.pptx")

        assert converter.document.title == "Alpha"
        title_slide, content_slide = converter.slides_primitives
        assert [p.role for p in title_slide] == ["title", "subtitle"]
        roles = [p.role for p in content_slide]
        assert roles[:3] == ["nav-band", "nav-tab-active", "nav-tab"]
        assert "list" in roles
        assert roles[-3:] == ["progress", "footer-chapter", "footer-page"]

        prs = Presentation(str(target))
        assert len(prs.slides) == 2
        texts = [s.text_frame.text for s in prs.slides[1].shapes if s.has_text_frame]
        assert "Topic" in texts
        assert any(t.startswith("• One bold") for t in texts)

    def test_verify_requires_convert(self):
        converter = MarkdeepToPPTXConverter(snapshot_from_html(STAMPED_DECK))
        with pytest.raises(RuntimeError):
            converter.verify()
