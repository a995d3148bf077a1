from __future__ import annotations

import contextlib
import json
import os
import re
from typing import Any

TITLE_MAX_LEN = 120

_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_URL_RE = re.compile(r"https?://[^\s\)\]>\"']+")

_QUOTES = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
}


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def atomic_write_json(path: str, data: Any) -> None:
    """Write JSON to a temp file next to `path`, then rename over it."""
    d = os.path.dirname(os.path.abspath(path)) or "."
    os.makedirs(d, exist_ok=True)
    tmp = f"{path}.tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        # Atomic rename on POSIX
        os.replace(tmp, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp)


# -----------------------------------------------------------------------------
# URL helpers
# -----------------------------------------------------------------------------
def resolve_url(href: str | None, base_url: str) -> str | None:
    """
    Make an href absolute.

      - absolute hrefs pass through
      - protocol-relative ("//host/x") get "https:"
      - anything else is appended to base_url (one trailing slash trimmed)

    No RFC 3986 normalization; "../" segments are kept as given.
    """
    if href is None:
        return None
    href = href.strip()
    if href.startswith("http"):
        return href
    if href.startswith("//"):
        return "https:" + href
    base = re.sub(r"/$", "", base_url or "")
    return base + href


def first_external_url(text: str, host: str) -> str | None:
    """Return the first http(s) URL in `text` that does not mention `host`."""
    for url in _URL_RE.findall(text or ""):
        if host not in url:
            return url
    return None


# -----------------------------------------------------------------------------
# Text helpers
# -----------------------------------------------------------------------------
def truncate(s: str, max_len: int) -> str:
    if len(s) > max_len:
        return s[:max_len] + "..."
    return s


def truncate_words(text: str, max_words: int) -> str:
    """Keep the first `max_words` words; used to bound LLM prompt sizes."""
    words = (text or "").split()
    if len(words) <= max_words:
        return text or ""
    return " ".join(words[:max_words]) + "\n\n[...truncated]"


def strip_markdown(s: str) -> str:
    """Remove **bold**, *italic* and [text](url) markup."""
    s = _BOLD_RE.sub(r"\1", s)
    s = _ITALIC_RE.sub(r"\1", s)
    s = _LINK_RE.sub(r"\1", s)
    return s.strip()


def extract_title(text: str) -> str:
    """
    Title heuristic for sources without a title field.

    Who's-hiring replies usually open with "Company | Role | Location", so
    the first line makes a reasonable title.
    """
    lines = (text or "").splitlines()
    first_line = lines[0].strip() if lines else ""
    return truncate(strip_markdown(first_line or "Untitled"), TITLE_MAX_LEN)


def normalize_quotes(s: str) -> str:
    """Replace typographic quotes with their ASCII equivalents."""
    for fancy, plain in _QUOTES.items():
        s = s.replace(fancy, plain)
    return s


def inner_text(el) -> str:
    """
    Visible text of a BeautifulSoup element, with <br> and <p> rendered as
    line breaks (close to what a browser's innerText gives).

    Mutates the element; callers pass elements from a throwaway snapshot.
    """
    for br in el.find_all("br"):
        br.replace_with("\n")
    for p in el.find_all("p"):
        p.insert_before("\n\n")
    text = el.get_text()
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
