from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, TypeVar

from locator_engine.core.exceptions import ConfigurationError, InvalidSelectorError, WebActionError
from locator_engine.core.metadata import RetryOptions, merge_retry_options

log = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE: tuple[type[BaseException], ...] = (ConfigurationError, InvalidSelectorError)


def retry(
    operation: Callable[[], T],
    options: RetryOptions | Mapping[str, Any] | None = None,
    error_type: type[WebActionError] = WebActionError,
    message: str = "Operation failed",
    *,
    selector: str | None = None,
    fatal: tuple[type[BaseException], ...] = NON_RETRYABLE,
) -> T:
    """Runs operation up to max_retries times, sleeping delay_ms between failures.

    Errors listed in ``fatal`` are caller mistakes and propagate on the first
    attempt. Any other failure counts as an attempt; once attempts run out an
    ``error_type`` is raised with the last failure chained as its cause.
    """

    retry_options = merge_retry_options(options)
    attempts = retry_options.max_retries
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except fatal:
            raise
        except Exception as exc:
            last_error = exc
            log.warning("%s: attempt %d/%d failed: %s", message, attempt, attempts, exc)
            if attempt < attempts:
                time.sleep(retry_options.delay_ms / 1000)
    raise error_type(
        f"{message} (after {attempts} attempts)",
        selector=selector,
        cause=last_error,
        attempts=attempts,
    ) from last_error
