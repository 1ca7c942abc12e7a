from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    ACTION_FAILED = "ACTION_FAILED"
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    INVALID_SELECTOR = "INVALID_SELECTOR"
    SELF_HEALING_FAILED = "SELF_HEALING_FAILED"
    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    TIMEOUT = "TIMEOUT"
    ASSERTION_FAILED = "ASSERTION_FAILED"
    CONFIGURATION = "CONFIGURATION"


class WebActionError(RuntimeError):
    """Base error for every failure raised by the resolution engine."""

    kind = ErrorKind.ACTION_FAILED

    def __init__(
        self,
        message: str,
        selector: str | None = None,
        cause: BaseException | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.selector = selector
        self.cause = cause
        self.attempts = attempts

    def __str__(self) -> str:
        if self.selector:
            return f"[{self.kind.value}] {self.message} (selector: {self.selector})"
        return f"[{self.kind.value}] {self.message}"


class ElementNotFoundError(WebActionError):
    """Raised when a query resolves to no candidate."""

    kind = ErrorKind.ELEMENT_NOT_FOUND


class InvalidSelectorError(WebActionError):
    """Raised for malformed selectors and unknown logical keys."""

    kind = ErrorKind.INVALID_SELECTOR


class HealingError(WebActionError):
    """Raised when every selector recorded for a logical key misses."""

    kind = ErrorKind.SELF_HEALING_FAILED


class NavigationError(WebActionError):
    kind = ErrorKind.NAVIGATION_FAILED


class WaitTimeoutError(WebActionError):
    kind = ErrorKind.TIMEOUT


class AssertionFailedError(WebActionError, AssertionError):
    """Raised by the expect_* helpers when a condition never holds."""

    kind = ErrorKind.ASSERTION_FAILED


class ConfigurationError(WebActionError):
    """Raised for caller misconfiguration; never retried."""

    kind = ErrorKind.CONFIGURATION
