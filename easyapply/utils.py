"""
Shared utility helpers: delays, bounded waits, log truncation.
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


def human_delay(base_seconds: float, multiplier: float = 1.0):
    """Sleep for a randomized human-like duration around base * multiplier."""
    base = base_seconds * multiplier
    if base <= 0:
        return
    jitter = base * 0.3
    delay = base + random.uniform(-jitter, jitter)
    time.sleep(max(0.0, delay))


def pause(seconds: float):
    """Fixed sleep used where asynchronous page loading needs time to settle."""
    if seconds > 0:
        time.sleep(seconds)


def wait_for(
    probe: Callable[[], Optional[T]],
    timeout: float,
    poll_interval: float = 0.5,
) -> Optional[T]:
    """Poll `probe` until it returns something truthy or `timeout` elapses.

    Returns the first truthy value, or None on timeout. Exceptions raised by
    the probe propagate, so a probe can abort the wait early.
    """
    deadline = time.monotonic() + max(0.0, timeout)
    while True:
        value = probe()
        if value:
            return value
        if time.monotonic() >= deadline:
            return None
        time.sleep(max(0.01, poll_interval))


def safe_click(locator) -> bool:
    """Click a located element if there is one; return True on success."""
    if locator is None:
        return False
    try:
        locator.click()
        return True
    except Exception:
        return False


def truncate(text: str, max_len: int = 100) -> str:
    """Truncate text for logging."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."
