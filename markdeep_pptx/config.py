"""Converter configuration.

Defaults live as module constants; the CLI copies its flags onto a
``ConverterConfig`` instance.
"""

from dataclasses import dataclass

# ── Canvas ────────────────────────────────────────────────────────────────────
CANVAS_WIDTH = 10.0  # inches; height follows the source aspect ratio
DEFAULT_ASPECT_RATIO = 16 / 9

# ── Render acquisition ────────────────────────────────────────────────────────
VIEWPORT_WIDTH = 1920
VIEWPORT_HEIGHT = 1080
NAVIGATION_TIMEOUT_MS = 60000
SELECTOR_TIMEOUT_MS = 30000
SETTLE_DELAY_MS = 2000  # MathJax and other script-driven rendering

# ── Layout policy ─────────────────────────────────────────────────────────────
TOC_LABELS = ("目录", "Contents")
TAB_POLICY_PROPORTIONAL = "proportional"
TAB_POLICY_EVEN = "even"
TAB_POLICIES = (TAB_POLICY_PROPORTIONAL, TAB_POLICY_EVEN)
DEFAULT_FONT = "Microsoft YaHei"


@dataclass
class ConverterConfig:
    """Options shared by acquisition, layout and writing."""

    canvas_width: float = CANVAS_WIDTH
    viewport_width: int = VIEWPORT_WIDTH
    viewport_height: int = VIEWPORT_HEIGHT
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS
    selector_timeout_ms: int = SELECTOR_TIMEOUT_MS
    settle_delay_ms: int = SETTLE_DELAY_MS
    toc_labels: tuple = TOC_LABELS
    tab_policy: str = TAB_POLICY_PROPORTIONAL
    toc_button: bool = False
    footer_labels: bool = True
    font_face: str = DEFAULT_FONT
    author: str = "Markdeep to PPTX Converter"

    def __post_init__(self):
        if self.tab_policy not in TAB_POLICIES:
            raise ValueError(
                f"Unknown tab policy {self.tab_policy!r}; expected one of {TAB_POLICIES}"
            )
        if self.canvas_width <= 0:
            raise ValueError("canvas_width must be positive")

    @property
    def toc_title(self) -> str:
        """Label drawn on the navigation TOC button."""
        return self.toc_labels[0] if self.toc_labels else "Contents"
