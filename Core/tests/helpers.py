from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Sequence
from urllib.parse import quote

import pytest
from selenium.common.exceptions import WebDriverException

from locator_engine.core.browser import BrowserSession
from locator_engine.core.exceptions import InvalidSelectorError
from locator_engine.core.selenium_source import SeleniumCandidateSource
from locator_engine.utils.geometry import BoundingBox, Viewport


def box(x: float, y: float, width: float, height: float) -> BoundingBox:
    return BoundingBox(x=x, y=y, width=width, height=height)


@dataclass
class FakeCandidate:
    """In-memory stand-in for a live element handle."""

    name: str = ""
    visible: bool = True
    box: BoundingBox | None = None
    text: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    value: str | None = None
    enabled: bool = True
    checked: bool = False
    calls: list[tuple] = field(default_factory=list)
    failures: list[Exception] = field(default_factory=list)

    def bounding_box(self) -> BoundingBox | None:
        return self.box

    def text_content(self) -> str | None:
        return self.text

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def input_value(self) -> str | None:
        return self.value

    def is_enabled(self) -> bool:
        return self.enabled

    def click(self) -> None:
        self._record("click")

    def double_click(self) -> None:
        self._record("double_click")

    def fill(self, value: str) -> None:
        self._record("fill", value)
        self.value = value

    def hover(self) -> None:
        self._record("hover")

    def check(self) -> None:
        self._record("check")
        self.checked = True

    def uncheck(self) -> None:
        self._record("uncheck")
        self.checked = False

    def select_option(self, value: str | Sequence[str]) -> None:
        self._record("select_option", value)

    def set_input_files(self, paths: Sequence[str]) -> None:
        self._record("set_input_files", list(paths))

    def _record(self, name: str, *args) -> None:
        if self.failures:
            raise self.failures.pop(0)
        self.calls.append((name, *args))


class FakeCandidateSource:
    """Candidate source over a fixed selector -> candidates table."""

    def __init__(
        self,
        elements: dict[str, list[FakeCandidate]] | None = None,
        viewport: Viewport | None = Viewport(800, 600),
        invalid: Sequence[str] = (),
    ) -> None:
        self.elements = elements or {}
        self.viewport = viewport
        self.invalid = set(invalid)
        self.queries: list[str] = []
        self.counts: list[str] = []
        self.visited: list[str] = []
        self.navigation_failures: list[Exception] = []

    def query(self, selector: str) -> list[FakeCandidate]:
        self.queries.append(selector)
        self._reject_invalid(selector)
        return list(self.elements.get(selector, []))

    def count(self, selector: str) -> int:
        self.counts.append(selector)
        self._reject_invalid(selector)
        return len(self.elements.get(selector, []))

    def viewport_size(self) -> Viewport | None:
        return self.viewport

    def navigate(self, url: str) -> None:
        if self.navigation_failures:
            raise self.navigation_failures.pop(0)
        self.visited.append(url)

    def _reject_invalid(self, selector: str) -> None:
        if selector in self.invalid:
            raise InvalidSelectorError(f"Invalid selector: {selector}", selector=selector)


class DelayedCandidateSource(FakeCandidateSource):
    """Returns nothing for the first few queries, like a page still rendering."""

    def __init__(self, elements: dict[str, list[FakeCandidate]], empty_queries: int) -> None:
        super().__init__(elements)
        self.empty_queries = empty_queries

    def query(self, selector: str) -> list[FakeCandidate]:
        candidates = super().query(selector)
        if len(self.queries) <= self.empty_queries:
            return []
        return candidates


def reference_layout() -> list[FakeCandidate]:
    """Three visible candidates inside an 800x600 viewport."""

    return [
        FakeCandidate("small", box=box(0, 0, 50, 20)),
        FakeCandidate("large", box=box(100, 100, 200, 100)),
        FakeCandidate("tiny", box=box(500, 500, 10, 10)),
    ]


def data_url(html: str) -> str:
    return "data:text/html;charset=utf-8," + quote(html)


@contextmanager
def managed_source(suite_config, browser_name: str = "chrome") -> Iterator[SeleniumCandidateSource]:
    session = BrowserSession(suite_config.environment)
    try:
        driver = session.start(browser_name)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    try:
        yield SeleniumCandidateSource(driver)
    finally:
        driver.quit()
