# modules/job_hunter/lib/scrapers/hn.py
"""
Hacker News "Who is hiring?" threads.

Page structure: every comment is a `tr.athing.comtr` row with
  - td.ind[indent]   nesting depth ("0" = top-level = a job posting)
  - .commtext        the comment body
  - span.age a       permalink ("item?id=NNNN")
Long threads are split across pages linked by `a.morelink`.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from .. import ratelimit
from ..browser import BrowserSession
from ..config import SourceConfig
from ..models import Posting, ScrapeOptions
from ..utils import extract_title, inner_text
from .base import BaseScraper
from .registry import register

log = logging.getLogger(__name__)

HN_BASE = "https://news.ycombinator.com"
COMMENT_ROW = "tr.athing.comtr"
MORE_LINK = "a.morelink"

# Safety bound regardless of max_postings_per_site
MAX_PAGES = 5


@register
class HackerNewsScraper(BaseScraper):
    """
    Top-level comments of an HN thread, one posting per comment.

    Each page is read with ONE DOM snapshot and parsed in a single pass;
    threads routinely carry thousands of nested replies and per-element
    round-trips to the browser are far too slow.
    """

    kind = "hn"

    def scrape(
        self,
        session: BrowserSession,
        spec: SourceConfig,
        options: ScrapeOptions,
    ) -> list[Posting]:
        base = str(spec.params.get("base_url") or HN_BASE)
        cap = options.max_postings_per_site

        log.info("Scraping %s - %s", spec.label, spec.url)
        session.goto(spec.url)
        session.wait_visible(COMMENT_ROW)

        collected: list[Posting] = []
        page = 1
        while True:
            page_items = self._extract_top_level(session.content(), base, start_index=len(collected))
            collected.extend(page_items)
            log.info("  Page %d: %d postings (%d total)", page, len(page_items), len(collected))

            if len(collected) >= cap or page >= MAX_PAGES:
                break
            ratelimit.pause(options.request_delay_ms)
            if not self._load_more(session):
                break
            page += 1

        return collected[:cap]

    # ---- internals ----

    def _extract_top_level(self, html: str, base: str, *, start_index: int = 0) -> list[Posting]:
        soup = BeautifulSoup(html, "html.parser")
        out: list[Posting] = []
        for row in soup.select(COMMENT_ROW):
            ind = row.select_one("td.ind")
            if ind is None or ind.get("indent") != "0":
                continue
            text_el = row.select_one(".commtext")
            if text_el is None:
                continue
            text = inner_text(text_el)
            if not text:
                continue
            age_link = row.select_one("span.age a")
            href = age_link.get("href") if age_link is not None else None
            out.append(
                Posting(
                    url=self._permalink(href, base) or f"hn-comment-{start_index + len(out)}",
                    title=extract_title(text),
                    body=text,
                    source=self.kind,
                )
            )
        log.debug("Extracted %d top-level comments from page", len(out))
        return out

    @staticmethod
    def _permalink(href: str | None, base: str) -> str | None:
        if not href:
            return None
        if href.startswith("http"):
            return href
        return f"{base.rstrip('/')}/{href.lstrip('/')}"

    @staticmethod
    def _load_more(session: BrowserSession) -> bool:
        """Click 'More' if present. True when another page loaded."""
        try:
            if not session.click(MORE_LINK):
                return False
            session.wait_visible(COMMENT_ROW)
            return True
        except Exception as e:
            log.debug("  'More' link failed: %s", e)
            return False
