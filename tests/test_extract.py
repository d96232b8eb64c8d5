"""Tests for the element classifier and slide extraction."""

import pytest

from conftest import BOLD, el, slide, snapshot

from markdeep_pptx.extract import SlideExtractor, WalkContext, classify, match_rule
from markdeep_pptx.model import UNTITLED


def elements_of(*content, classes=()):
    document = SlideExtractor().extract(snapshot(slide(*content, classes=classes)))
    return document.slides[0].elements


class TestRuleTable:
    @pytest.mark.parametrize(
        "node,rule",
        [
            (el("a", classes=["target"]), "anchor-target"),
            (el("div", classes=["title"]), "main-title"),
            (el("div", classes=["toc-title"]), "toc-title"),
            (el("div", classes=["afterTitles"]), "subtitle"),
            (el("ul", classes=["toc-list"]), "toc-list"),
            (el("ul"), "list"),
            (el("h3"), "heading"),
            (el("pre"), "code"),
            (el("div", classes=["listing"]), "code"),
            (el("div", classes=["admonition", "tip"]), "admonition"),
            (el("div", classes=["columns-container"]), "columns"),
            (el("section"), "container"),
        ],
    )
    def test_first_matching_rule_wins(self, node, rule):
        assert match_rule(node).name == rule

    def test_unknown_tags_are_dropped(self, scale):
        node = el("span", el("p", "hidden"))
        assert match_rule(node) is None
        assert classify(node, WalkContext(scale=scale)) == []


class TestTextElements:
    def test_heading_keeps_level_and_runs(self):
        (heading,) = elements_of(el("h2", "Intro ", el("b", "now", style=BOLD)))
        assert heading.kind == "heading"
        assert heading.level == 2
        assert heading.text == "Intro now"
        assert heading.style.bold is True
        assert heading.runs[-1].style.bold is True

    def test_position_in_inches(self):
        (para,) = elements_of(el("p", "Body", rect=(64, 256, 640, 32)))
        pos = para.position
        assert (pos.x, pos.y, pos.w, pos.h) == pytest.approx((0.5, 2.0, 5.0, 0.25))

    def test_empty_paragraph_is_skipped(self):
        assert elements_of(el("p", "   ")) == ()

    def test_paragraph_wrapping_title_is_skipped(self):
        content = el("p", el("span", "Deck", classes=["title"]))
        assert elements_of(content) == ()

    def test_zero_area_elements_are_dropped(self):
        assert elements_of(el("p", "Hidden", rect=(0, 0, 0, 0))) == ()

    def test_anchor_targets_are_dropped(self):
        assert elements_of(el("a", "x", classes=["target"])) == ()

    def test_blockquote(self):
        (quote,) = elements_of(el("blockquote", "\n", el("p", "Said it"), "\n"))
        assert quote.kind == "blockquote"
        assert quote.text == "Said it"


class TestMarkdeepMarkers:
    def test_main_title_is_bold_level_one(self):
        (title,) = elements_of(el("div", "Alpha", classes=["title"]))
        assert title.kind == "heading"
        assert title.level == 1
        assert title.text == "Alpha"
        assert title.style.bold is True

    def test_subtitle_from_text_after_marker(self):
        content = [
            el("div", "Alpha", classes=["title"]),
            el("div", classes=["afterTitles"], rect=(128, 256, 1024, 16)),
            "\n  Beta Corp\n",
        ]
        title, subtitle = elements_of(*content)
        assert subtitle.kind == "paragraph"
        assert subtitle.text == "Beta Corp"
        assert subtitle.position.y == pytest.approx(2.5)
        assert subtitle.position.h == pytest.approx(0.5)

    def test_marker_without_text_gives_nothing(self):
        content = [el("div", classes=["afterTitles"]), el("p", "Next")]
        (para,) = elements_of(*content)
        assert para.text == "Next"

    def test_toc_title_and_list(self):
        toc = el(
            "ul",
            el("li", el("a", "Background", href="#s1")),
            el("li", el("a", "Results", href="#s2")),
            classes=["toc-list"],
        )
        heading, listing = elements_of(el("div", "Contents", classes=["toc-title"]), toc)
        assert heading.level == 1
        assert heading.text == "Contents"
        assert listing.kind == "list"
        assert [i.runs[0].text for i in listing.items] == ["Background", "Results"]


class TestLists:
    def test_nested_items_are_flattened_with_levels(self):
        nested = el("ul", el("li", "Child A"), el("li", "Child B"))
        node = el("ol", el("li", "First", nested), el("li", "Second"))
        (listing,) = elements_of(node)
        assert listing.ordered is True
        texts = [(i.runs[0].text, i.level) for i in listing.items]
        assert texts == [("First", 0), ("Child A", 1), ("Child B", 1), ("Second", 0)]

    def test_inline_styles_survive(self):
        node = el("ul", el("li", "Plain ", el("strong", "key", style=BOLD)))
        (listing,) = elements_of(node)
        runs = listing.items[0].runs
        assert [r.style.bold for r in runs] == [False, True]

    def test_highlight_recolors_item(self):
        node = el("ul", el("li", el("span", "Warm", classes=["highlight-red"]), " tail"))
        (listing,) = elements_of(node)
        assert {r.style.color for r in listing.items[0].runs} == {"C0392B"}


class TestBlocks:
    def test_admonition(self):
        node = el(
            "div",
            el("div", "Heads up", classes=["admonitionTitle"]),
            el("p", "Check the logs."),
            el("ul", el("li", "one"), el("li", "two")),
            el("ol", el("li", "first")),
            classes=["admonition", "warning"],
        )
        (adm,) = elements_of(node)
        assert adm.admonition_kind == "warning"
        assert adm.title == "Heads up"
        assert adm.body_lines == ("Check the logs.", "• one", "• two", "1. first")

    def test_admonition_without_title(self):
        node = el("div", "Careful", classes=["admonition", "Tip"])
        (adm,) = elements_of(node)
        assert adm.admonition_kind == "tip"
        assert adm.title is None
        assert adm.body == "Careful"

    def test_code_keeps_text_verbatim(self):
        source = "def f():\n    return 1\n"
        node = el("pre", el("code", source, classes=["python"]))
        (code,) = elements_of(node)
        assert code.text == source
        assert code.language == "python"

    def test_table_rows(self):
        node = el(
            "table",
            el("thead", el("tr", el("th", "Name"), el("th", "Value"))),
            el("tbody", el("tr", el("td", " a "), el("td", "1"))),
        )
        (table,) = elements_of(node)
        assert [[c.text for c in row] for row in table.rows] == [["Name", "Value"], ["a", "1"]]
        assert [c.is_header for c in table.rows[0]] == [True, True]
        assert [c.is_header for c in table.rows[1]] == [False, False]

    def test_source_whitespace_is_collapsed(self):
        table = el("table", el("tr", el("td", "\n  two\n    words  ")))
        admonition = el(
            "div",
            el("div", "Heads\n   up", classes=["admonitionTitle"]),
            el("p", "Wrapped over\n      two lines."),
            classes=["admonition", "note"],
        )
        table_el, adm = elements_of(table, admonition)
        assert table_el.rows[0][0].text == "two words"
        assert adm.title == "Heads up"
        assert adm.body_lines == ("Wrapped over two lines.",)

    def test_image(self):
        (image,) = elements_of(el("img", src="figure.png", alt="Figure"))
        assert image.source == "figure.png"
        assert image.alt == "Figure"


class TestContainers:
    def test_transparent_container_only_recurses(self):
        node = el("div", el("p", "Inside"), style={"background-color": "rgba(0, 0, 0, 0)"})
        (para,) = elements_of(node)
        assert para.kind == "paragraph"

    def test_filled_container_emits_shape_first(self):
        node = el("div", el("p", "Inside"), style={"background-color": "rgb(227, 242, 253)"})
        shape, para = elements_of(node)
        assert shape.kind == "shape"
        assert shape.fill == "E3F2FD"
        assert shape.border is None
        assert para.text == "Inside"

    def test_border_only_container(self):
        style = {
            "border-width": "2px 2px 2px 2px",
            "border-color": "rgb(33, 150, 243)",
            "border-radius": "8px",
        }
        (shape,) = elements_of(el("div", style=style))
        assert shape.fill is None
        assert shape.border.color == "2196F3"
        assert shape.border.width == pytest.approx(1.5)
        assert shape.radius == pytest.approx(8 / 128)

    def test_transparent_border_is_invisible(self):
        style = {"border-width": "1px", "border-color": "rgba(0, 0, 0, 0)"}
        assert elements_of(el("div", el("p", "x"), style=style))[0].kind == "paragraph"

    def test_columns(self):
        left = el(
            "div",
            el("p", "Left"),
            classes=["column-left"],
            style={"background-color": "rgb(245, 245, 245)"},
        )
        right = el("div", el("ul", el("li", "Right")), classes=["column-right"])
        shape, para, listing = elements_of(el("div", left, right, classes=["columns-container"]))
        assert shape.kind == "shape"
        assert shape.position.in_column is True
        assert para.text == "Left"
        assert para.position.in_column is True
        assert listing.position.in_column is True

    def test_inherited_style_reaches_nested_runs(self):
        node = el("div", el("p", "Loud"), style=BOLD)
        (para,) = elements_of(node)
        assert para.runs[0].style.bold is True


class TestSlides:
    def test_navigation_and_footer(self):
        nav = el(
            "div",
            el("div", "目录", classes=["nav-section-item", "toc-button"]),
            el("div", "One", classes=["nav-section-item"]),
            el("div", "Two", classes=["nav-section-item", "active"]),
            el("div", "Three", classes=["nav-section-item"]),
            classes=["nav-bar"],
        )
        footer = el(
            "div",
            el("span", "One", classes=["chapter-label"]),
            el("span", "3 / 9", classes=["slide-number"]),
            classes=["slide-footer"],
        )
        root = slide(el("h2", "Topic"), extra=(nav, footer), classes=["small-text"])
        (extracted,) = SlideExtractor().extract(snapshot(root)).slides
        assert extracted.nav.chapters == ("One", "Two", "Three")
        assert extracted.nav.active_index == 1
        assert extracted.footer.chapter_label == "One"
        assert extracted.footer.page_label == "3 / 9"
        assert "small-text" in extracted.markers

    def test_base_color_from_slide_content(self):
        content = el(
            "div",
            el("p", "Body", style={"color": "rgb(51, 51, 51)"}),
            classes=["slide-content"],
            style={"color": "rgb(51, 51, 51)"},
            rect=(0, 0, 1280, 720),
        )
        root = el("div", content, classes=["slide"], rect=(0, 0, 1280, 720))
        (extracted,) = SlideExtractor().extract(snapshot(root)).slides
        assert extracted.base_color == "333333"
        assert extracted.elements[0].runs[0].style.color == "333333"

    def test_slide_without_content_is_skipped(self):
        broken = el("div", el("p", "orphan"), classes=["slide"], rect=(0, 720, 1280, 720))
        extractor = SlideExtractor()
        document = extractor.extract(
            snapshot(slide(el("h1", "A")), broken, slide(el("h2", "B"), index=2))
        )
        assert [s.index for s in document.slides] == [0, 1]
        assert len(extractor.warnings) == 1
        assert "Slide 2" in extractor.warnings[0]

    def test_later_slides_are_offset_by_their_own_origin(self):
        document = SlideExtractor().extract(
            snapshot(slide(el("h1", "A")), slide(el("p", "B", rect=(128, 720 + 128, 256, 64)), index=1))
        )
        para = document.slides[1].elements[0]
        assert para.position.y == pytest.approx(1.0)

    def test_canvas_follows_aspect_ratio(self):
        document = SlideExtractor().extract(snapshot(slide(el("h1", "A"))))
        assert document.aspect_ratio == pytest.approx(16 / 9)
        assert document.canvas.width == 10.0
        assert document.canvas.height == 5.625


class TestTitleDiscovery:
    def test_first_heading(self):
        document = SlideExtractor().extract(snapshot(slide(el("div", "Alpha", classes=["title"]))))
        assert document.title == "Alpha"

    def test_bold_paragraph(self):
        root = slide(el("p", el("b", "Launch", style=BOLD), " plan"))
        assert SlideExtractor().extract(snapshot(root, title="Page")).title == "Launch plan"

    def test_page_title(self):
        root = slide(el("p", "no emphasis"))
        assert SlideExtractor().extract(snapshot(root, title="Quarterly")).title == "Quarterly"

    def test_local_page_title_is_ignored(self):
        root = slide(el("ul", el("li", el("b", "Bold item", style=BOLD))))
        document = SlideExtractor().extract(snapshot(root, title="http://localhost:8000/deck"))
        assert document.title == "Bold item"

    def test_untitled(self):
        document = SlideExtractor().extract(snapshot(slide(el("p", "plain")), title=""))
        assert document.title == UNTITLED
