"""Shared builders for rendered node trees.

Slides are 1280x720 px, which maps onto a 10 x 5.625 in canvas at
128 px per inch in both directions.
"""

import pytest

from markdeep_pptx.geometry import CanvasSize, SlideScale
from markdeep_pptx.snapshot import Rect, RenderedNode, RenderSnapshot

SLIDE_W = 1280
SLIDE_H = 720
PX_PER_IN = 128


def el(tag, *children, classes=(), style=None, rect=(128, 128, 256, 64), **attrs):
    """Build a RenderedNode; rect is (left, top, width, height) in px."""
    return RenderedNode(
        tag=tag,
        classes=list(classes),
        style=dict(style or {}),
        rect=Rect(*rect),
        attrs=attrs,
        children=list(children),
    )


def slide(*content, classes=(), extra=(), index=0):
    """A .slide root holding a .slide-content with ``content``."""
    top = SLIDE_H * index
    body = el("div", *content, classes=["slide-content"], rect=(0, top, SLIDE_W, SLIDE_H))
    return el(
        "div",
        body,
        *extra,
        classes=["slide", *classes],
        rect=(0, top, SLIDE_W, SLIDE_H),
    )


def snapshot(*slides, title="Deck"):
    return RenderSnapshot(title=title, viewport=(SLIDE_W, SLIDE_H), slides=list(slides))


BOLD = {"font-weight": "700"}
ITALIC = {"font-style": "italic"}

# Two slides as the renderer stamps them: a title slide and a content slide
STAMPED_DECK = """<!DOCTYPE html>
<html data-slide-width="1280" data-slide-height="720">
<head>
  <title>Sample Deck</title>
  <script>window.markdeepOptions = {};</script>
</head>
<body>
<div class="slide" id="s1" data-rect="0 0 1280 720" data-computed="font-size:16px">
  <div class="slide-content" data-rect="0 0 1280 720" data-computed="font-size:16px">
    <div class="title" data-rect="128 200 1024 64"
         data-computed="font-size:48px;font-weight:700;color:rgb(41, 128, 185)">Alpha</div>
    <div class="afterTitles" data-rect="128 280 1024 16"></div>
    Beta Corp
    <!-- generated by markdeep -->
  </div>
</div>
<div class="slide" id="s2" data-rect="0 720 1280 720">
  <div class="nav-bar">
    <div class="nav-section-item active" data-rect="1000 720 140 45">Intro</div>
    <div class="nav-section-item" data-rect="1140 720 140 45">Results</div>
  </div>
  <div class="slide-content" data-rect="0 720 1280 720">
    <h2 data-rect="64 780 1152 48" data-computed="font-size:32px;font-weight:700">Topic</h2>
    <style>.slide h2 { color: blue; }</style>
    <ul data-rect="64 840 1152 96" data-computed="font-size:20px">
      <li data-rect="96 840 1120 32">One <strong data-computed="font-weight:700">bold</strong></li>
      <li data-rect="96 872 1120 32">Two</li>
    </ul>
  </div>
  <div class="slide-footer">
    <span class="chapter-label">Intro</span>
    <span class="slide-number">2 / 2</span>
  </div>
</div>
</body>
</html>
"""


@pytest.fixture
def canvas():
    return CanvasSize(10.0, 5.625)


@pytest.fixture
def scale(canvas):
    return SlideScale.for_slide(Rect(0, 0, SLIDE_W, SLIDE_H), canvas, (SLIDE_W, SLIDE_H))
