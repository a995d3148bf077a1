# modules/job_hunter/lib/http_client.py
"""
requests-based client for the sources that need no browser (Reddit's JSON
API) and for the Last-Modified probe.

Every call is a single attempt: urllib3 retries are switched off, and any
status other than 200 raises HttpStatusError so the caller can decide.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOG = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "job-hunter/1.0 (python)"


class HttpStatusError(RuntimeError):
    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status} for {url!r}")
        self.url = url
        self.status = status


class HttpClient:
    def __init__(self, timeout: float = 15.0, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = float(timeout)
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        for scheme in ("http://", "https://"):
            self.session.mount(scheme, adapter)

    def _get(self, url: str, params: Mapping[str, Any] | None, timeout: float | None) -> requests.Response:
        resp = self.session.get(url, params=params, headers=None, timeout=timeout or self.timeout)
        LOG.debug("GET %s -> %s", url, resp.status_code)
        if resp.status_code != 200:
            raise HttpStatusError(url, resp.status_code)
        return resp

    def get_json(self, url: str, *, params: Mapping[str, Any] | None = None, timeout: float | None = None) -> Any:
        """Decoded JSON body; ValueError (with a body preview) when it is not JSON."""
        resp = self._get(url, params, timeout)
        try:
            return resp.json()
        except ValueError:
            pass
        # Some endpoints answer JSON with a text/html content type
        try:
            return json.loads(resp.text)
        except ValueError as e:
            snippet = " ".join(resp.text[:200].split())
            raise ValueError(f"{url!r} did not return JSON; body starts: {snippet!r}") from e

    def head_header(self, url: str, name: str, *, timeout: float = 5.0) -> str | None:
        """One response header of a HEAD request (redirects followed); None if absent."""
        resp = self.session.head(url, timeout=timeout, allow_redirects=True)
        return resp.headers.get(name)

    def close(self) -> None:
        self.session.close()
