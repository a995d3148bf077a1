# modules/job_hunter/lib/scrapers/discourse.py
from __future__ import annotations

from .listing import ListingScraper
from .registry import register


@register
class DiscourseScraper(ListingScraper):
    """
    Discourse forums (Elixir Forum, etc.): topic list -> topic body.

    Example source entry:
    {
      "id": "elixir-forum-jobs",
      "kind": "discourse",
      "name": "Elixir Forum Jobs",
      "url": "https://elixirforum.com/c/work/jobs/16"
    }

    params.base_url overrides the origin used for relative topic links.
    """

    kind = "discourse"
    listing_selectors = ("a.title.raw-link", "a.title")
    content_selector = ".cooked"
