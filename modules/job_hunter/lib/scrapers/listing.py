# modules/job_hunter/lib/scrapers/listing.py
"""
Two-phase listing scraper: collect links from a listing page, then visit
each link and concatenate the content blocks found there.

Subclasses pick the selectors; everything else (render waits, politeness
pauses, per-item failure isolation) lives here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from .. import ratelimit
from ..browser import BrowserSession
from ..config import SourceConfig
from ..models import Posting, ScrapeOptions
from ..utils import inner_text, resolve_url
from .base import BaseScraper

log = logging.getLogger(__name__)

# Fixed render waits: listing pages hydrate slowly, detail pages a bit less.
LISTING_RENDER_MS = 2000
DETAIL_RENDER_MS = 1500


@dataclass(frozen=True)
class _Link:
    href: str
    title: str


def origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class ListingScraper(BaseScraper):
    """
    Base for listing -> detail crawls.

    Subclasses set:
      listing_selectors: tried in order; the first one matching anything wins
      content_selector: CSS for content blocks on each detail page
      link_attr: attribute holding the link URL (default "href")
      skip_blank_titles: drop links without visible text
    """

    listing_selectors: tuple[str, ...] = ()
    content_selector: str | None = None
    link_attr: str = "href"
    skip_blank_titles: bool = True

    # ---- hooks ----
    def listing_url(self, spec: SourceConfig) -> str:
        return spec.url

    def base_url(self, spec: SourceConfig) -> str:
        return str(spec.params.get("base_url") or origin(spec.url))

    def selectors(self, spec: SourceConfig) -> tuple[str, ...]:
        return self.listing_selectors

    def detail_selector(self, spec: SourceConfig) -> str | None:
        return self.content_selector

    def attr(self, spec: SourceConfig) -> str:
        return self.link_attr

    # ---- contract ----
    def scrape(
        self,
        session: BrowserSession,
        spec: SourceConfig,
        options: ScrapeOptions,
    ) -> list[Posting]:
        url = self.listing_url(spec)
        log.info("Scraping %s - %s", spec.label, url)
        session.goto(url)
        session.wait(LISTING_RENDER_MS)

        links = self._collect_links(session.content(), spec, options.max_postings_per_site)
        log.info("  Found %d links on %s", len(links), spec.label)

        content_selector = self.detail_selector(spec)
        if not content_selector:
            # Listing entries are the postings themselves.
            return [Posting(url=ln.href, title=ln.title, body=ln.title, source=self.kind) for ln in links]

        return self._fetch_details(session, links, content_selector, options)

    # ---- internals ----
    def _collect_links(self, html: str, spec: SourceConfig, limit: int) -> list[_Link]:
        soup = BeautifulSoup(html, "html.parser")

        elements = []
        for selector in self.selectors(spec):
            elements = soup.select(selector)
            if elements:
                break

        attr = self.attr(spec)
        base = self.base_url(spec)
        out: list[_Link] = []
        for el in elements[:limit]:
            href = el.get(attr)
            if isinstance(href, list):  # multi-valued attrs like class
                href = " ".join(href)
            if not href:
                continue
            title = el.get_text(" ", strip=True)
            if not title and self.skip_blank_titles:
                continue
            absolute = resolve_url(href, base)
            out.append(_Link(href=absolute, title=title or absolute))
        return out

    def _fetch_details(
        self,
        session: BrowserSession,
        links: list[_Link],
        content_selector: str,
        options: ScrapeOptions,
    ) -> list[Posting]:
        postings: list[Posting] = []
        for link in links:
            ratelimit.pause(options.request_delay_ms)
            log.info("  Loading: %s", link.title)
            try:
                session.goto(link.href)
                session.wait(DETAIL_RENDER_MS)
                soup = BeautifulSoup(session.content(), "html.parser")
                blocks = [inner_text(el) for el in soup.select(content_selector)]
                text = "\n\n".join(b for b in blocks if b)
            except Exception as e:
                log.warning("  Failed to load %s (%s): %s", link.title, link.href, e)
                continue
            postings.append(
                Posting(
                    url=link.href,
                    title=link.title,
                    body=text if text.strip() else link.title,
                    source=self.kind,
                )
            )
        return postings
