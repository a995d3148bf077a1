from __future__ import annotations

import logging

from .. import logging_bridge
from ..browser import BrowserSession
from ..config import SourceConfig
from ..models import Posting, ScrapeOptions
from .base import BaseScraper
from .registry import register, register_fallback

log = logging.getLogger(__name__)


class _NoOpScraper(BaseScraper):
    """Returns nothing and records why; never raises."""

    reason = ""

    def scrape(
        self,
        session: BrowserSession,
        spec: SourceConfig,
        options: ScrapeOptions,
    ) -> list[Posting]:
        log.warning("No working scraper for kind %r (%s) - skipping %s", spec.kind, self.reason, spec.id)
        logging_bridge.activity({
            "component": "job_hunter.scrapers",
            "op": "unsupported_kind",
            "source": spec.id,
            "kind": spec.kind,
            "reason": self.reason,
        })
        return []


@register
class TwitterScraper(_NoOpScraper):
    """Placeholder: needs Twitter API v2 credentials or a Nitter mirror."""

    kind = "twitter"
    reason = "not implemented"


@register_fallback
class UnknownKindScraper(_NoOpScraper):
    kind = "unknown"
    reason = "unknown kind"
