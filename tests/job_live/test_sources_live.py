# tests/job_live/test_sources_live.py
from __future__ import annotations

import os

import pytest

from modules.job_hunter.lib.browser import open_browser
from modules.job_hunter.lib.config import SourceConfig
from modules.job_hunter.lib.http_client import HttpClient
from modules.job_hunter.lib.models import ScrapeOptions
from modules.job_hunter.lib.scrapers.discourse import DiscourseScraper
from modules.job_hunter.lib.scrapers.hn import HackerNewsScraper
from modules.job_hunter.lib.scrapers.reddit_hiring import RedditHiringScraper

OPTIONS = ScrapeOptions(request_delay_ms=2000, max_postings_per_site=5)


def _print_postings(label: str, postings) -> None:
    print(f"\n[{label}] items: {len(postings)}")
    for p in postings:
        print(f"      • {p.title}  [{p.url}]")


@pytest.mark.live
def test_reddit_hiring_rust_live():
    """
    Live smoke test against Reddit's JSON API (no browser needed).
    Zero items is tolerated (threads rotate); shape is checked when present.
    """
    spec = SourceConfig(
        id="rust-hiring",
        kind="reddit_hiring",
        url="https://old.reddit.com/r/rust",
        params={"hiring_pattern": "who's hiring"},
    )

    postings = RedditHiringScraper().scrape(None, spec, OPTIONS)

    _print_postings("reddit-hiring", postings)
    assert len(postings) <= OPTIONS.max_postings_per_site
    for p in postings:
        assert p.title.strip()
        assert p.url.startswith("http")
        assert "This is the top-level comment for" not in p.body[:40]


@pytest.mark.live
def test_last_modified_probe_live():
    value = HttpClient(timeout=5).head_header("https://news.ycombinator.com/", "Last-Modified")
    assert value is None or isinstance(value, str)


@pytest.mark.live
def test_hn_thread_in_browser_live():
    """Needs `playwright install chromium`. Thread id via HN_THREAD_URL."""
    url = os.getenv("HN_THREAD_URL", "https://news.ycombinator.com/item?id=41709301")
    spec = SourceConfig(id="hn", kind="hn", url=url, name="HN Who's Hiring")

    with open_browser(headless=True) as session:
        postings = HackerNewsScraper().scrape(session, spec, OPTIONS)

    _print_postings("hn", postings)
    assert postings, "expected at least one top-level comment"
    assert all(p.source == "hn" for p in postings)


@pytest.mark.live
def test_discourse_forum_in_browser_live():
    url = os.getenv("DISCOURSE_JOBS_URL", "https://elixirforum.com/c/work/jobs/16")
    spec = SourceConfig(id="elixir-forum", kind="discourse", url=url, name="Elixir Forum Jobs")

    with open_browser(headless=True) as session:
        postings = DiscourseScraper().scrape(session, spec, OPTIONS)

    _print_postings("discourse", postings)
    for p in postings:
        assert p.url.startswith("https://")
        assert p.body.strip()
