# modules/job_hunter/lib/scrapers/reddit_hiring.py
"""
Reddit "Who's Hiring" threads through Reddit's JSON API (no browser).

Example source entry:
{
  "id": "rust-hiring",
  "kind": "reddit_hiring",
  "name": "r/rust hiring thread",
  "url": "https://old.reddit.com/r/rust",
  "params": {"hiring_pattern": "official /r/rust \"who's hiring\" thread"}
}

Flow:
  1. search the subreddit for the newest thread whose title contains the pattern
  2. fetch that thread's top-level replies (depth=1)
Replies without an external link fall back to their own permalink.
"""

from __future__ import annotations

import logging
from typing import Any

from ..browser import BrowserSession
from ..config import SourceConfig
from ..http_client import HttpClient
from ..models import Posting, ScrapeOptions
from ..utils import extract_title, first_external_url, normalize_quotes
from .base import BaseScraper
from .registry import register

log = logging.getLogger(__name__)

OLD_REDDIT = "https://old.reddit.com"
DEFAULT_PATTERN = "who's hiring"
# Moderator boilerplate that opens every official hiring thread
DEFAULT_SKIP_MARKER = "This is the top-level comment for"
REPLY_LIMIT = 500


@register
class RedditHiringScraper(BaseScraper):
    kind = "reddit_hiring"

    def __init__(self, client: HttpClient | None = None) -> None:
        self._owns_client = client is None
        self._client = client or HttpClient(user_agent="job-hunter/1.0 (python)")

    def scrape(
        self,
        session: BrowserSession,
        spec: SourceConfig,
        options: ScrapeOptions,
    ) -> list[Posting]:
        try:
            return self._scrape(spec, options)
        finally:
            if self._owns_client:
                self._client.close()

    # ---- internals ----

    def _scrape(self, spec: SourceConfig, options: ScrapeOptions) -> list[Posting]:
        pattern = str(spec.params.get("hiring_pattern") or DEFAULT_PATTERN)
        skip_marker = str(spec.params.get("skip_marker") or DEFAULT_SKIP_MARKER)
        subreddit_url = spec.url.rstrip("/")

        log.info("Scraping %s via JSON API - %s", spec.label, subreddit_url)
        permalink = self._search_thread(subreddit_url, pattern)
        if not permalink:
            log.warning("  No %r thread found on %s", pattern, spec.label)
            return []

        log.info("  Found hiring thread: %s", permalink)
        replies = self._top_level_replies(permalink) or []
        log.info("  Found %d top-level comments", len(replies))

        postings: list[Posting] = []
        for reply in replies:
            try:
                posting = self._to_posting(reply, skip_marker)
            except Exception as e:
                log.warning("  Skipping malformed reply in %s: %s", permalink, e)
                continue
            if posting is None:
                continue
            postings.append(posting)
            if len(postings) >= options.max_postings_per_site:
                break
        return postings

    def _to_posting(self, reply: dict[str, Any], skip_marker: str) -> Posting | None:
        d = reply.get("data") or {}
        body = d.get("body") or ""
        if not body.strip() or body.startswith(skip_marker):
            return None
        return Posting(
            url=first_external_url(body, "reddit.com") or f"{OLD_REDDIT}{d.get('permalink') or ''}",
            title=extract_title(body),
            body=body,
            source=self.kind,
        )

    def _search_thread(self, subreddit_url: str, pattern: str) -> str | None:
        """Permalink path (/r/x/comments/...) of the newest matching thread, or None."""
        needle = normalize_quotes(pattern.lower())
        try:
            data = self._client.get_json(
                f"{subreddit_url}/search.json",
                params={
                    "q": f'"{pattern}"',
                    "restrict_sr": "on",
                    "sort": "new",
                    "t": "year",
                },
            )
        except Exception as e:
            log.warning("Reddit JSON search failed for %s: %s", subreddit_url, e)
            return None

        for child in _children(data):
            post = child.get("data") or {}
            title = normalize_quotes(str(post.get("title") or "").lower())
            if needle in title and post.get("permalink"):
                return str(post["permalink"])
        return None

    def _top_level_replies(self, permalink: str) -> list[dict[str, Any]] | None:
        try:
            data = self._client.get_json(
                f"{OLD_REDDIT}{permalink}.json",
                params={"limit": str(REPLY_LIMIT), "depth": "1", "sort": "new"},
            )
        except Exception as e:
            log.warning("Reddit JSON comments failed for %s: %s", permalink, e)
            return None

        # Response is [thread_listing, comments_listing]
        if not isinstance(data, list) or len(data) < 2:
            log.warning("Unexpected comments payload for %s", permalink)
            return None

        return [c for c in _children(data[1]) if c.get("kind") == "t1"]


def _children(listing: Any) -> list[dict[str, Any]]:
    if not isinstance(listing, dict):
        return []
    children = (listing.get("data") or {}).get("children") or []
    return [c for c in children if isinstance(c, dict)]
