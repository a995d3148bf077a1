# tests/test_browser_http.py
import json
import sys
import types

import pytest

from modules.job_hunter.lib import browser, logging_bridge
from modules.job_hunter.lib.http_client import HttpClient, HttpStatusError
from service import logging_utils


# ----------------------------------------------------------------------
# Browser session over a fake Playwright
# ----------------------------------------------------------------------
class _FakePage:
    def __init__(self):
        self.calls = []

    def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url, wait_until))

    def wait_for_selector(self, selector, state=None, timeout=None):
        self.calls.append(("wait_for_selector", selector, state))

    def wait_for_timeout(self, ms):
        self.calls.append(("wait_for_timeout", ms))

    def content(self):
        return "<html>snapshot</html>"

    def query_selector(self, selector):
        if selector != "a.morelink":
            return None
        return types.SimpleNamespace(click=lambda: self.calls.append(("click", selector)))


def _install_fake_playwright(monkeypatch, page, state):
    class _Browser:
        def new_page(self):
            return page

        def close(self):
            state["closed"] = True

    class _Chromium:
        def launch(self, headless):
            state["headless"] = headless
            return _Browser()

    class _Playwright:
        chromium = _Chromium()

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    fake = type(sys)("playwright.sync_api")
    fake.sync_playwright = _Playwright
    monkeypatch.setitem(sys.modules, "playwright.sync_api", fake)


def test_open_browser_yields_session_and_closes(monkeypatch):
    page, state = _FakePage(), {}
    _install_fake_playwright(monkeypatch, page, state)

    with pytest.raises(RuntimeError):
        with browser.open_browser(headless=False) as session:
            session.goto("https://example.com")
            session.wait(0)
            session.wait(1500)
            assert session.content() == "<html>snapshot</html>"
            assert session.click("a.morelink") is True
            assert session.click("a.missing") is False
            raise RuntimeError("scraper crashed")

    assert state == {"headless": False, "closed": True}
    assert page.calls == [
        ("goto", "https://example.com", "domcontentloaded"),
        ("wait_for_timeout", 1500),
        ("click", "a.morelink"),
    ]


# ----------------------------------------------------------------------
# HttpClient
# ----------------------------------------------------------------------
class _Resp:
    def __init__(self, status, body="", headers=None):
        self.status_code = status
        self.text = body
        self.encoding = "utf-8"
        self.apparent_encoding = "utf-8"
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)


def test_http_client_status_and_json(monkeypatch):
    client = HttpClient(timeout=3)
    responses = {
        "https://api.example.com/ok": _Resp(200, '{"data": {"children": []}}'),
        "https://api.example.com/limited": _Resp(429, "slow down"),
    }
    seen = []

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.append((url, params, timeout))
        return responses[url]

    monkeypatch.setattr(client.session, "get", fake_get)

    assert client.get_json("https://api.example.com/ok", params={"q": "x"}) == {"data": {"children": []}}
    with pytest.raises(HttpStatusError) as exc:
        client.get_json("https://api.example.com/limited")
    assert exc.value.status == 429
    assert seen[0] == ("https://api.example.com/ok", {"q": "x"}, 3.0)
    assert client.session.headers["User-Agent"].startswith("job-hunter/")


def test_http_client_head_header(monkeypatch):
    client = HttpClient()
    resp = _Resp(200, headers={"Last-Modified": "Mon, 07 Oct 2024 09:00:00 GMT"})
    monkeypatch.setattr(client.session, "head", lambda url, timeout=None, allow_redirects=False: resp)

    assert client.head_header("https://x.io", "Last-Modified") == "Mon, 07 Oct 2024 09:00:00 GMT"
    assert client.head_header("https://x.io", "ETag") is None


# ----------------------------------------------------------------------
# Structured logs
# ----------------------------------------------------------------------
def test_activity_records_are_redacted_jsonl():
    logging_bridge.activity({
        "component": "test",
        "op": "probe",
        "change_token": "Mon, 07 Oct 2024",
        "api_key": "sk-secret",
        "headers": {"Authorization": "Bearer abc"},
    })

    with open(logging_utils.get_activity_log_path(), encoding="utf-8") as f:
        lines = [json.loads(line) for line in f]

    rec = lines[-1]
    assert rec["change_token"] == "Mon, 07 Oct 2024"
    assert rec["api_key"] == "***REDACTED***"
    assert rec["headers"]["Authorization"] == "***REDACTED***"
    assert set(rec["_meta"]) == {"host", "pid"}


def test_error_records_go_to_error_log(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))

    logging_bridge.error({"component": "test", "op": "scrape_source", "error": "TimeoutError()"})

    files = [p.name for p in tmp_path.iterdir()]
    assert len(files) == 1 and files[0].startswith("error-test-")
    assert "scrape_source" in caplog.text
