# tests/conftest.py
import os
import pathlib
import tempfile
import types
from contextlib import contextmanager

import pytest

from modules.job_hunter.lib import config as jh_config
from modules.job_hunter.lib import models
from modules.job_hunter.lib.scrapers.base import BaseScraper


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls or a real browser).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or launch a browser (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write structured logs to a throwaway dir so real logs stay clean (per test)
    tmp_logs = tempfile.mkdtemp(prefix="jh-pytest-logs-")
    monkeypatch.setenv("LOG_DIR", tmp_logs)
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    monkeypatch.delenv("JOB_HUNTER_CONFIG", raising=False)
    yield


@pytest.fixture(autouse=True)
def _no_real_sleep(monkeypatch):
    """Politeness pauses are real sleeps; tests never wait."""
    monkeypatch.setattr("modules.job_hunter.lib.ratelimit.time.sleep", lambda s: None)


# ---------------------------------------------------------------------
# Browser session fake
# ---------------------------------------------------------------------
class FakeSession:
    """
    Stands in for BrowserSession.

    pages:  url -> html served after goto(url)
    more:   html pages served, in order, by successive click() calls
    fail:   urls whose navigation raises
    """

    def __init__(self, pages=None, more=None, fail=()):
        self.pages = dict(pages or {})
        self.more = list(more or [])
        self.fail = set(fail)
        self.current = "<html></html>"
        self.visited: list[str] = []
        self.clicks = 0

    def goto(self, url):
        self.visited.append(url)
        if url in self.fail:
            raise RuntimeError(f"navigation blocked: {url}")
        self.current = self.pages.get(url, "<html><body></body></html>")

    def wait_visible(self, selector, timeout_ms=0):
        return None

    def wait(self, ms):
        return None

    def content(self):
        return self.current

    def click(self, selector):
        if not self.more:
            return False
        self.clicks += 1
        self.current = self.more.pop(0)
        return True


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def session_factory():
    """Factory recording how often a session was opened and closed."""
    state = types.SimpleNamespace(opened=0, closed=0, session=FakeSession())

    @contextmanager
    def factory(headless):
        state.opened += 1
        try:
            yield state.session
        finally:
            state.closed += 1

    state.factory = factory
    return state


# ---------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------
def _hn_row(text, indent=0, item_id=None):
    age = ""
    if item_id is not None:
        age = f'<span class="age"><a href="item?id={item_id}">1 hour ago</a></span>'
    return (
        f'<tr class="athing comtr" id="{item_id}"><td><table><tr>'
        f'<td class="ind" indent="{indent}"><img src="s.gif" height="1" width="{indent * 40}"></td>'
        f'<td class="default"><div class="comhead">{age}</div>'
        f'<div class="comment"><div class="commtext c00">{text}</div></div></td>'
        "</tr></table></td></tr>"
    )


def _hn_page(rows, more=True):
    more_link = '<a href="item?id=1&amp;p=2" class="morelink" rel="next">More</a>' if more else ""
    return f'<html><body><table class="comment-tree">{"".join(rows)}</table>{more_link}</body></html>'


@pytest.fixture
def hn_html():
    return types.SimpleNamespace(row=_hn_row, page=_hn_page)


# ---------------------------------------------------------------------
# Settings + collaborators
# ---------------------------------------------------------------------
@pytest.fixture
def make_settings(tmp_path: pathlib.Path):
    def _make(sources, **overrides):
        values = {
            "config_path": str(tmp_path / "config.json"),
            "sources": list(sources),
            "include_keywords": [],
            "request_delay_ms": 0,
            "max_postings_per_site": 50,
            "tracker_path": str(tmp_path / "applied.json"),
            "site_state_path": str(tmp_path / "site-state.json"),
            "output_dir": str(tmp_path / "output"),
            "resume_path": str(tmp_path / "resume.md"),
            "goals_path": str(tmp_path / "goals.md"),
        }
        values.update(overrides)
        return jh_config.Settings(**values)

    return _make


@pytest.fixture
def source():
    def _source(sid, kind="static", url=None, **params):
        return jh_config.SourceConfig(
            id=sid,
            kind=kind,
            url=url or f"https://{sid}.example.com/jobs",
            name=sid.title(),
            params=params,
        )

    return _source


@pytest.fixture
def static_scraper():
    """
    Build a scraper class that returns canned postings per source id.
    A value that is an Exception is raised instead.
    """

    def _build(by_source):
        class Static(BaseScraper):
            kind = "static"

            def scrape(self, session, spec, options):
                items = by_source.get(spec.id, [])
                if isinstance(items, Exception):
                    raise items
                return list(items)

        return Static

    return _build


def posting(url, title="Engineer", body="", source="static"):
    return models.Posting(url=url, title=title, body=body or title, source=source)


@pytest.fixture
def make_posting():
    return posting


class FakeAnalyst:
    """Records calls; suitability and failures keyed by posting URL."""

    def __init__(self, suitable=(), fail_classify=(), fail_draft=(), location=None):
        self.suitable = set(suitable)
        self.fail_classify = set(fail_classify)
        self.fail_draft = set(fail_draft)
        self.location = location
        self.classified: list[str] = []
        self.drafted: list[str] = []
        self.location_batches: list[list[str]] = []

    def classify_location_batch(self, titles):
        self.location_batches.append(list(titles))
        if self.location is None:
            return [True] * len(titles)
        return self.location(titles)

    def analyze_suitability(self, posting, resume, goals):
        self.classified.append(posting.url)
        if posting.url in self.fail_classify:
            return None
        return models.Assessment(
            posting=posting,
            suitable=posting.url in self.suitable,
            reasoning="SUITABLE: test",
        )

    def draft_cover_letter(self, assessment, resume, goals):
        self.drafted.append(assessment.posting.url)
        if assessment.posting.url in self.fail_draft:
            raise RuntimeError("draft service down")
        return f"Dear {assessment.posting.title} team"


class FakeWriter:
    def __init__(self):
        self.postings: list[tuple[str, object]] = []
        self.summaries: list[tuple[int, int, int]] = []

    def write_posting(self, assessment, cover_letter):
        self.postings.append((assessment.posting.url, cover_letter))
        return f"/tmp/{len(self.postings)}.md"

    def write_summary(self, suitable, new_count, scraped_count):
        self.summaries.append((len(suitable), new_count, scraped_count))
        return "/tmp/_summary.md"


@pytest.fixture
def fake_analyst():
    return FakeAnalyst


@pytest.fixture
def fake_writer():
    return FakeWriter()
