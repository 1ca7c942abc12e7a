from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from locator_engine.core.exceptions import ConfigurationError, ElementNotFoundError
from locator_engine.core.metadata import Strategy, StrategyContext, StrategyOptions
from locator_engine.core.source import Candidate
from locator_engine.utils.geometry import closest_index

log = logging.getLogger(__name__)

StrategyFn = Callable[[Sequence[Candidate], StrategyOptions, StrategyContext], "int | None"]


def pick_first(candidates: Sequence[Candidate], options: StrategyOptions, context: StrategyContext) -> int:
    return 0


def pick_last(candidates: Sequence[Candidate], options: StrategyOptions, context: StrategyContext) -> int:
    return len(candidates) - 1


def pick_index(candidates: Sequence[Candidate], options: StrategyOptions, context: StrategyContext) -> int | None:
    if options.index is None:
        raise ConfigurationError("INDEX strategy requires strategy_options.index")
    if options.index < 0:
        raise ConfigurationError(f"INDEX strategy requires a non-negative index, got {options.index}")
    if options.index >= len(candidates):
        return None
    return options.index


def pick_containing_text(
    candidates: Sequence[Candidate],
    options: StrategyOptions,
    context: StrategyContext,
) -> int | None:
    if options.text is None:
        raise ConfigurationError("CONTAINS_TEXT strategy requires strategy_options.text")
    for index, candidate in enumerate(candidates):
        if options.text in (candidate.text_content() or ""):
            return index
    return None


def pick_matching_attribute(
    candidates: Sequence[Candidate],
    options: StrategyOptions,
    context: StrategyContext,
) -> int | None:
    if not options.attribute_name or options.attribute_value is None:
        raise ConfigurationError(
            "MATCHES_ATTRIBUTE strategy requires strategy_options.attribute_name and attribute_value"
        )
    for index, candidate in enumerate(candidates):
        if _attribute_matches(candidate.get_attribute(options.attribute_name), options.attribute_value):
            return index
    return None


def pick_most_visible(candidates: Sequence[Candidate], options: StrategyOptions, context: StrategyContext) -> int:
    """Largest fully on-screen visible candidate; index 0 when none qualifies."""

    viewport = context.viewport
    best_index: int | None = None
    best_area = 0.0
    for index, candidate in enumerate(candidates):
        if viewport is None or not candidate.visible:
            continue
        box = candidate.bounding_box()
        if box is None or not box.within(viewport):
            continue
        if box.area > best_area:
            best_area = box.area
            best_index = index
    if best_index is None:
        log.warning("No candidate is visible inside the viewport; falling back to index 0")
        return 0
    return best_index


def pick_closest_to_center(
    candidates: Sequence[Candidate],
    options: StrategyOptions,
    context: StrategyContext,
) -> int:
    if context.viewport is None:
        raise ConfigurationError("CLOSEST_TO_CENTER strategy requires a known viewport size")
    return _closest(candidates, context.viewport.center)


def pick_closest_to_element(
    candidates: Sequence[Candidate],
    options: StrategyOptions,
    context: StrategyContext,
) -> int:
    if options.reference_locator is None:
        raise ConfigurationError("CLOSEST_TO_ELEMENT strategy requires strategy_options.reference_locator")
    if context.reference_box is None:
        raise ElementNotFoundError(
            "Reference element has no bounding box",
            selector=str(options.reference_locator),
        )
    return _closest(candidates, context.reference_box.center)


STRATEGIES: Mapping[Strategy, StrategyFn] = MappingProxyType(
    {
        Strategy.FIRST: pick_first,
        Strategy.LAST: pick_last,
        Strategy.INDEX: pick_index,
        Strategy.CONTAINS_TEXT: pick_containing_text,
        Strategy.MATCHES_ATTRIBUTE: pick_matching_attribute,
        Strategy.MOST_VISIBLE: pick_most_visible,
        Strategy.CLOSEST_TO_CENTER: pick_closest_to_center,
        Strategy.CLOSEST_TO_ELEMENT: pick_closest_to_element,
    }
)


def select_index(
    strategy: Strategy,
    candidates: Sequence[Candidate],
    options: StrategyOptions,
    context: StrategyContext | None = None,
) -> int | None:
    """Applies one strategy to a fixed candidate set; None means no match."""

    return STRATEGIES[strategy](candidates, options, context or StrategyContext())


def _attribute_matches(actual: str | None, expected: str | re.Pattern[str]) -> bool:
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return actual == expected


def _centers(candidates: Sequence[Candidate]) -> list[tuple[int, tuple[float, float]]]:
    centers: list[tuple[int, tuple[float, float]]] = []
    for index, candidate in enumerate(candidates):
        box = candidate.bounding_box()
        if box is not None:
            centers.append((index, box.center))
    return centers


def _closest(candidates: Sequence[Candidate], origin: tuple[float, float]) -> int:
    index = closest_index(_centers(candidates), origin)
    if index is None:
        log.warning("No candidate has a bounding box; falling back to index 0")
        return 0
    return index
