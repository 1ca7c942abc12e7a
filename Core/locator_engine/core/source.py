from __future__ import annotations

from typing import Protocol, Sequence

from locator_engine.utils.geometry import BoundingBox, Viewport


class Candidate(Protocol):
    """One live element matched by a query, valid for a single resolution."""

    @property
    def visible(self) -> bool: ...

    def bounding_box(self) -> BoundingBox | None: ...

    def text_content(self) -> str | None: ...

    def get_attribute(self, name: str) -> str | None: ...

    def input_value(self) -> str | None: ...

    def is_enabled(self) -> bool: ...

    def click(self) -> None: ...

    def double_click(self) -> None: ...

    def fill(self, value: str) -> None: ...

    def hover(self) -> None: ...

    def check(self) -> None: ...

    def uncheck(self) -> None: ...

    def select_option(self, value: str | Sequence[str]) -> None: ...

    def set_input_files(self, paths: Sequence[str]) -> None: ...


class CandidateSource(Protocol):
    """Driver-side element lookup consumed by the resolver and prober."""

    def query(self, selector: str) -> list[Candidate]: ...

    def count(self, selector: str) -> int: ...

    def viewport_size(self) -> Viewport | None: ...

    def navigate(self, url: str) -> None: ...
