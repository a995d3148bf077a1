from __future__ import annotations

import time


def pause(delay_ms: int | float) -> None:
    """Sleep for delay_ms between requests to the same source; <= 0 is a no-op."""
    if delay_ms and delay_ms > 0:
        time.sleep(delay_ms / 1000.0)
