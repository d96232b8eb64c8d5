"""Render acquisition through headless Chromium.

The deck is opened in Playwright, given time to finish Markdeep and MathJax
rendering, and then every element below a ``.slide`` is stamped with its
bounding box and computed style. The stamped page is handed to
``snapshot.snapshot_from_html``.
"""

import asyncio
from pathlib import Path

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import ConverterConfig
from .errors import AcquisitionError
from .snapshot import RenderSnapshot, snapshot_from_html

STAMPED_PROPERTIES = (
    "display",
    "visibility",
    "font-family",
    "font-size",
    "font-weight",
    "font-style",
    "text-decoration",
    "text-align",
    "line-height",
    "color",
    "background-color",
    "border-width",
    "border-color",
    "border-radius",
)

# Runs inside the page. Writes the stamps described in snapshot.py.
_STAMP_SCRIPT = """
(props) => {
    const first = document.querySelector('.slide');
    const slideStyle = window.getComputedStyle(first);
    const root = document.documentElement;
    root.setAttribute('data-slide-width', parseFloat(slideStyle.width) || 0);
    root.setAttribute('data-slide-height', parseFloat(slideStyle.height) || 0);

    const stamp = (el) => {
        const rect = el.getBoundingClientRect();
        el.setAttribute('data-rect',
            [rect.left, rect.top, rect.width, rect.height].join(' '));
        const computed = window.getComputedStyle(el);
        el.setAttribute('data-computed',
            props.map(p => p + ':' + computed.getPropertyValue(p)).join(';'));
    };

    document.querySelectorAll('.slide').forEach(slide => {
        stamp(slide);
        slide.querySelectorAll('*').forEach(stamp);
    });
    return document.querySelectorAll('.slide').length;
}
"""


def to_url(locator: str) -> str:
    """Turn a local path into a file:// URL; URLs pass through."""
    if locator.startswith(("file://", "http://", "https://")):
        return locator
    return Path(locator).resolve().as_uri()


async def acquire_html(locator: str, config: ConverterConfig) -> str:
    """Render ``locator`` and return the stamped page HTML."""
    url = to_url(locator)
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=True,
                args=["--disable-web-security", "--allow-file-access-from-files"],
            )
            try:
                page = await browser.new_page(
                    viewport={
                        "width": config.viewport_width,
                        "height": config.viewport_height,
                    }
                )
                await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=config.navigation_timeout_ms,
                )
                await page.wait_for_selector(
                    ".slide", timeout=config.selector_timeout_ms
                )
                await page.wait_for_timeout(config.settle_delay_ms)
                await page.evaluate(_STAMP_SCRIPT, list(STAMPED_PROPERTIES))
                return await page.content()
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise AcquisitionError(locator, str(exc)) from exc


def acquire_snapshot(locator: str, config: ConverterConfig) -> RenderSnapshot:
    """Synchronous wrapper: render, stamp and parse in one call."""
    html = asyncio.run(acquire_html(locator, config))
    return snapshot_from_html(html, locator=locator)
