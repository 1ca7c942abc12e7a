from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence, TypeVar

from locator_engine.core.catalog import SelfHealingCatalog
from locator_engine.core.exceptions import (
    AssertionFailedError,
    ElementNotFoundError,
    HealingError,
    NavigationError,
    WaitTimeoutError,
)
from locator_engine.core.finder import Options, Query, Resolver, describe_query, is_candidate
from locator_engine.core.healer import SelfHealingProber
from locator_engine.core.metadata import (
    DEFAULT_RESOLUTION_OPTIONS,
    DEFAULT_RETRY_OPTIONS,
    LogicalKey,
    ResolutionOptions,
    RetryOptions,
    SelfHealingEntry,
)
from locator_engine.core.retry import retry
from locator_engine.core.source import Candidate, CandidateSource
from locator_engine.utils.wait import DEFAULT_POLL_INTERVAL_MS, wait_until

if TYPE_CHECKING:
    from locator_engine.config.schema import SuiteConfig

T = TypeVar("T")

Expected = str | re.Pattern[str]


class WebActions:
    """High-level element actions routed through retry, self-healing and resolution.

    Every action resolves its query to exactly one candidate and then invokes a
    single primitive on it. When resolution runs with ``throw_on_not_found``
    disabled and nothing matches, the action is a no-op and getters return
    ``None``/``False``; callers in that mode must check results themselves.
    """

    def __init__(
        self,
        source: CandidateSource,
        catalog: SelfHealingCatalog | None = None,
        *,
        defaults: ResolutionOptions | None = None,
        retry_options: RetryOptions | None = None,
        use_self_healing: bool = False,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        self.source = source
        self.catalog = catalog if catalog is not None else SelfHealingCatalog()
        self.retry_options = retry_options or DEFAULT_RETRY_OPTIONS
        self.poll_interval_ms = poll_interval_ms
        self.prober = SelfHealingProber(source, self.catalog)
        self.resolver = Resolver(
            source,
            self.prober,
            defaults=defaults or DEFAULT_RESOLUTION_OPTIONS,
            use_self_healing=use_self_healing,
            poll_interval_ms=poll_interval_ms,
        )

    @classmethod
    def from_config(cls, source: CandidateSource, suite_config: SuiteConfig) -> WebActions:
        return cls(
            source,
            suite_config.build_catalog(),
            defaults=suite_config.resolver.to_options(),
            retry_options=suite_config.retry.to_options(),
            use_self_healing=suite_config.use_self_healing,
        )

    # Resolution

    def effective_options(self, options: Options = None) -> ResolutionOptions:
        return self.resolver.effective_options(options)

    def locate(self, query: Query, options: Options = None) -> str | Candidate:
        effective = self.effective_options(options)
        if not self.resolver.needs_healing(query, effective):
            return self.resolver.locate(query, effective)
        label = describe_query(query)
        return retry(
            lambda: self.resolver.locate(query, effective),
            self.retry_options,
            HealingError,
            f"Self-healing failed for: {label}",
            selector=label,
        )

    def resolve(self, query: Query, options: Options = None) -> Candidate | None:
        return self._perform(query, options, lambda element: element, "Element not found")

    def exists(self, query: Query) -> bool:
        if is_candidate(query):
            return True
        if isinstance(query, (LogicalKey, SelfHealingEntry)) and self.resolver.needs_healing(query):
            return self.prober.first_match(self.prober.entry(query)) is not None
        return self.source.count(self.resolver.locate(query)) > 0

    def navigate(self, url: str) -> None:
        retry(
            lambda: self.source.navigate(url),
            self.retry_options,
            NavigationError,
            f"Navigation failed for: {url}",
            selector=url,
        )

    # Primitive actions

    def click(self, query: Query, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.click(), "Click failed")

    def double_click(self, query: Query, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.double_click(), "Double click failed")

    def fill(self, query: Query, value: str, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.fill(value), "Fill failed")

    def hover(self, query: Query, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.hover(), "Hover failed")

    def check(self, query: Query, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.check(), "Check failed")

    def uncheck(self, query: Query, options: Options = None) -> None:
        self._perform(query, options, lambda element: element.uncheck(), "Uncheck failed")

    def select_option(self, query: Query, value: str | Sequence[str], options: Options = None) -> None:
        self._perform(query, options, lambda element: element.select_option(value), "Select option failed")

    def set_input_files(
        self,
        query: Query,
        paths: str | Path | Sequence[str | Path],
        options: Options = None,
    ) -> None:
        files = _file_paths(paths)
        self._perform(query, options, lambda element: element.set_input_files(files), "Setting input files failed")

    # State and content

    def is_visible(self, query: Query, options: Options = None) -> bool:
        """False for a missing element, whatever the not-found policy says."""

        effective = replace(self.effective_options(options), throw_on_not_found=False)
        return bool(self._perform(query, effective, lambda element: element.visible, "Element not found"))

    def is_enabled(self, query: Query, options: Options = None) -> bool:
        return bool(self._perform(query, options, lambda element: element.is_enabled(), "Element not found"))

    def get_text(self, query: Query, options: Options = None) -> str | None:
        return self._perform(query, options, lambda element: element.text_content(), "Element not found")

    def get_input_value(self, query: Query, options: Options = None) -> str | None:
        return self._perform(query, options, lambda element: element.input_value(), "Element not found")

    def get_attribute(self, query: Query, name: str, options: Options = None) -> str | None:
        return self._perform(query, options, lambda element: element.get_attribute(name), "Element not found")

    # Assertions

    def expect_visible(self, query: Query, options: Options = None) -> None:
        self._expect(query, options, lambda element: element is not None and element.visible, "to be visible")

    def expect_hidden(self, query: Query, options: Options = None) -> None:
        self._expect(query, options, lambda element: element is None or not element.visible, "to be hidden")

    def expect_enabled(self, query: Query, options: Options = None) -> None:
        self._expect(query, options, lambda element: element is not None and element.is_enabled(), "to be enabled")

    def expect_disabled(self, query: Query, options: Options = None) -> None:
        self._expect(
            query,
            options,
            lambda element: element is not None and not element.is_enabled(),
            "to be disabled",
        )

    def expect_text(self, query: Query, expected: Expected, options: Options = None) -> None:
        self._expect(
            query,
            options,
            lambda element: element is not None and _text_matches(element.text_content(), expected),
            f"to have text {_describe_expected(expected)}",
        )

    def expect_value(self, query: Query, expected: Expected, options: Options = None) -> None:
        self._expect(
            query,
            options,
            lambda element: element is not None and _value_matches(element.input_value(), expected),
            f"to have value {_describe_expected(expected)}",
        )

    # Waiting

    def wait_for_element(
        self,
        query: Query,
        visible: bool = True,
        timeout_ms: float | None = None,
        options: Options = None,
    ) -> Candidate:
        effective = self.effective_options(options)
        timeout = effective.timeout_ms if timeout_ms is None else timeout_ms
        target = self.locate(query, effective)
        snapshot = replace(effective, throw_on_not_found=False, timeout_ms=0)

        def ready() -> Candidate | None:
            element = self.resolver.resolve(target, snapshot)
            if element is not None and (not visible or element.visible):
                return element
            return None

        element = wait_until(ready, timeout, self.poll_interval_ms)
        if element is None:
            label = describe_query(query)
            state = "visible" if visible else "attached"
            raise WaitTimeoutError(f"Timed out after {timeout} ms waiting for {label} to be {state}", selector=label)
        return element

    def _perform(
        self,
        query: Query,
        options: Options,
        action: Callable[[Candidate], T],
        message: str,
    ) -> T | None:
        effective = self.effective_options(options)
        target = self.locate(query, effective)
        label = describe_query(query)

        def attempt() -> T | None:
            element = self.resolver.resolve(target, effective)
            if element is None:
                return None
            return action(element)

        return retry(attempt, self.retry_options, ElementNotFoundError, f"{message}: {label}", selector=label)

    def _expect(
        self,
        query: Query,
        options: Options,
        condition: Callable[[Candidate | None], bool],
        description: str,
    ) -> None:
        effective = self.effective_options(options)
        target = self.locate(query, effective)
        snapshot = replace(effective, throw_on_not_found=False, timeout_ms=0)
        if not wait_until(
            lambda: condition(self.resolver.resolve(target, snapshot)),
            effective.timeout_ms,
            self.poll_interval_ms,
        ):
            label = describe_query(query)
            raise AssertionFailedError(f"Expected {label} {description}", selector=label)


def _file_paths(paths: str | Path | Sequence[str | Path]) -> list[str]:
    if isinstance(paths, (str, Path)):
        paths = [paths]
    return [str(Path(item).resolve()) for item in paths]


def _normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def _text_matches(actual: str | None, expected: Expected) -> bool:
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return _normalize_whitespace(actual) == _normalize_whitespace(expected)


def _value_matches(actual: str | None, expected: Expected) -> bool:
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return actual == expected


def _describe_expected(expected: Expected) -> str:
    if isinstance(expected, re.Pattern):
        return f"matching /{expected.pattern}/"
    return repr(expected)
