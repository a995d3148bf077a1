from __future__ import annotations

from abc import ABC, abstractmethod

from ..browser import BrowserSession
from ..config import SourceConfig
from ..models import Posting, ScrapeOptions


class ScraperError(Exception):
    """Base exception for scraper failures."""


class BaseScraper(ABC):
    """
    Abstract scraper interface.

    One instance scrapes one configured source. The engine runs sources
    SEQUENTIALLY because they share one browser session.

    Contract:
      - scrape(session, spec, options) returns a LIST of Posting.
      - Per-item failures are caught inside the scraper (skip the item).
      - A failure loading the listing itself may raise; the engine turns it
        into an empty result for this source only.
      - Do NOT print, touch the tracker, or mutate global state.
      - Return *all* postings found (dedupe happens upstream in the tracker).
    """

    # Concrete subclasses MUST set this to a stable string, e.g. "hn", "css", "reddit_hiring"
    kind: str = ""

    @abstractmethod
    def scrape(
        self,
        session: BrowserSession,
        spec: SourceConfig,
        options: ScrapeOptions,
    ) -> list[Posting]:
        """
        Scrape one source.

        Args:
            session: shared browser session (unused by API-only scrapers)
            spec: the source's configuration, with last_modified injected
            options: run-wide delay and per-source item cap

        Returns:
            List[Posting] in page order.
        """
        raise NotImplementedError
