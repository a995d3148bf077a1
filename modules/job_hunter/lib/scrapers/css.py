# modules/job_hunter/lib/scrapers/css.py
from __future__ import annotations

from ..config import SourceConfig
from .base import ScraperError
from .listing import ListingScraper
from .registry import register


@register
class CssScraper(ListingScraper):
    """
    Generic selector-driven scraper for sites without a dedicated adapter.

    Source params:
      listing_selector: CSS for the link elements on the listing page (REQUIRED)
      link_attr: attribute holding the URL (default "href")
      content_selector: CSS for content on each detail page (optional)
      base_url: prefix for relative links (default: the source url)

    Without content_selector the listing entries are the postings, with
    body == title.
    """

    kind = "css"
    skip_blank_titles = False

    def selectors(self, spec: SourceConfig) -> tuple[str, ...]:
        selector = str(spec.params.get("listing_selector") or "").strip()
        if not selector:
            raise ScraperError(f"{spec.id}: css source needs params.listing_selector")
        return (selector,)

    def detail_selector(self, spec: SourceConfig) -> str | None:
        return str(spec.params.get("content_selector") or "").strip() or None

    def attr(self, spec: SourceConfig) -> str:
        return str(spec.params.get("link_attr") or "href")

    def base_url(self, spec: SourceConfig) -> str:
        return str(spec.params.get("base_url") or spec.url)
