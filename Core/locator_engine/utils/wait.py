from __future__ import annotations

import time
from typing import Callable, TypeVar

T = TypeVar("T")

DEFAULT_POLL_INTERVAL_MS = 200


def wait_until(
    predicate: Callable[[], T],
    timeout_ms: float,
    interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
) -> T:
    """Polls a predicate until it returns a truthy value or the timeout elapses.

    The predicate always runs at least once, and once more after the deadline,
    so the returned value reflects the latest page state either way.
    """

    deadline = time.monotonic() + max(timeout_ms, 0) / 1000
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        time.sleep(interval_ms / 1000)
    return predicate()
