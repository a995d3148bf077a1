# modules/job_hunter/lib/scrapers/reddit.py
from __future__ import annotations

from ..config import SourceConfig
from .listing import ListingScraper
from .registry import register

OLD_REDDIT = "https://old.reddit.com"


@register
class RedditScraper(ListingScraper):
    """
    Subreddit front pages via old.reddit.com (plain server-rendered HTML).

    Post links live in `#siteTable div.thing a.title`; self-post text is on
    the post page under `.usertext-body .md`.
    """

    kind = "reddit"
    listing_selectors = ("#siteTable div.thing a.title", "a.title")
    content_selector = ".usertext-body .md"

    def listing_url(self, spec: SourceConfig) -> str:
        return spec.url.replace("www.reddit.com", "old.reddit.com")

    def base_url(self, spec: SourceConfig) -> str:
        return OLD_REDDIT
