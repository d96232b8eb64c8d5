"""Tests for the command line interface."""

from pathlib import Path

import pytest
from pptx import Presentation

from conftest import STAMPED_DECK

from markdeep_pptx.cli import build_parser, config_from_args, default_output, main
from markdeep_pptx.config import TAB_POLICY_EVEN


class TestArguments:
    def test_defaults(self):
        config = config_from_args(build_parser().parse_args(["deck.html"]))
        assert config.tab_policy == "proportional"
        assert config.toc_button is False
        assert config.footer_labels is True
        assert config.toc_labels == ("目录", "Contents")

    def test_flags_reach_config(self):
        args = build_parser().parse_args(
            [
                "deck.html",
                "--tab-policy", TAB_POLICY_EVEN,
                "--toc-label", "Agenda",
                "--toc-label", "Overview",
                "--toc-button",
                "--no-footer-labels",
                "--font", "Arial",
                "--settle-ms", "0",
            ]
        )
        config = config_from_args(args)
        assert config.tab_policy == TAB_POLICY_EVEN
        assert config.toc_labels == ("Agenda", "Overview")
        assert config.toc_title == "Agenda"
        assert config.toc_button is True
        assert config.footer_labels is False
        assert config.font_face == "Arial"
        assert config.settle_delay_ms == 0

    def test_unknown_tab_policy_is_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["deck.html", "--tab-policy", "random"])

    @pytest.mark.parametrize(
        "locator,expected",
        [
            ("slides/deck.html", Path("slides/deck.pptx")),
            ("https://example.com/talks/intro.html", Path("intro.pptx")),
            ("https://example.com/", Path("example.pptx")),
        ],
    )
    def test_default_output(self, locator, expected):
        assert default_output(locator) == expected


class TestMain:
    def test_missing_input(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "nope.html")])
        assert excinfo.value.code == 1
        assert "Input file not found" in capsys.readouterr().err

    def test_convert_saved_snapshot(self, tmp_path, capsys):
        source = tmp_path / "deck.snapshot.html"
        source.write_text(STAMPED_DECK, encoding="utf-8")
        target = tmp_path / "out" / "deck.pptx"

        with pytest.raises(SystemExit) as excinfo:
            main([str(source), str(target), "--from-snapshot", "--verify"])
        assert excinfo.value.code == 0

        out = capsys.readouterr().out
        assert "Title: Alpha" in out
        assert "Verified 2 slides" in out
        assert "Done!" in out
        assert len(Presentation(str(target)).slides) == 2

    def test_bad_snapshot_exits_with_error(self, tmp_path, capsys):
        source = tmp_path / "plain.html"
        source.write_text("<html><body><div class='slide'></div></body></html>", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main([str(source), "--from-snapshot"])
        assert excinfo.value.code == 1
        assert "Error during conversion" in capsys.readouterr().err
