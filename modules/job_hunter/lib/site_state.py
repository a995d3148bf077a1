from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping

from .utils import atomic_write_json

log = logging.getLogger(__name__)


class SiteStateStore:
    """
    Per-source change tokens (Last-Modified values) keyed by source id.

    Pure key/value persistence in a JSON object. Tokens are opaque and only
    recorded for operator visibility; nothing skips a source because of them.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> dict[str, str]:
        """Return {source_id: token}; missing or malformed state gives {}."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Failed to read site state %s - ignoring: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Site state %s is not an object - ignoring", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def save(self, state: Mapping[str, str]) -> None:
        atomic_write_json(self.path, dict(sorted(state.items())))
        log.info("Saved site state for %d sites", len(state))
