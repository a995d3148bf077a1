"""
Browser session used by the page-based scrapers.

One Chromium instance per run, driven through Playwright's sync API. The
scrapers only see `BrowserSession`, so tests can hand them any object with
the same five methods.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

log = logging.getLogger(__name__)

NAV_TIMEOUT_MS = 45_000
WAIT_TIMEOUT_MS = 15_000


class BrowserSession:
    """Thin wrapper around a single Playwright page."""

    def __init__(self, page) -> None:
        self._page = page

    def goto(self, url: str) -> None:
        self._page.goto(url, wait_until="domcontentloaded", timeout=NAV_TIMEOUT_MS)

    def wait_visible(self, selector: str, timeout_ms: int = WAIT_TIMEOUT_MS) -> None:
        self._page.wait_for_selector(selector, state="visible", timeout=timeout_ms)

    def wait(self, ms: int) -> None:
        """Fixed render pause (for pages that hydrate after DOMContentLoaded)."""
        if ms > 0:
            self._page.wait_for_timeout(ms)

    def content(self) -> str:
        """Snapshot of the current DOM as HTML."""
        return self._page.content()

    def click(self, selector: str) -> bool:
        """Click the first match; False when nothing matches."""
        el = self._page.query_selector(selector)
        if el is None:
            return False
        el.click()
        return True


@contextmanager
def open_browser(headless: bool = True) -> Iterator[BrowserSession]:
    """
    Launch Chromium, yield a session, and always close the browser.
    """
    from playwright.sync_api import sync_playwright

    log.info("Starting Chromium (%s)", "headless" if headless else "visible")
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=headless)
        try:
            page = browser.new_page()
            yield BrowserSession(page)
        finally:
            try:
                browser.close()
                log.info("Browser closed.")
            except Exception as e:
                log.warning("Error closing browser: %s", e)
