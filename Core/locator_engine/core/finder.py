from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from locator_engine.core.exceptions import (
    ConfigurationError,
    ElementNotFoundError,
    HealingError,
    InvalidSelectorError,
)
from locator_engine.core.healer import SelfHealingProber
from locator_engine.core.metadata import (
    DEFAULT_RESOLUTION_OPTIONS,
    LogicalKey,
    ResolutionOptions,
    SelfHealingEntry,
    Strategy,
    StrategyContext,
    merge_options,
)
from locator_engine.core.source import Candidate, CandidateSource
from locator_engine.core.strategies import select_index
from locator_engine.utils.geometry import BoundingBox
from locator_engine.utils.selectors import normalize_selector
from locator_engine.utils.wait import DEFAULT_POLL_INTERVAL_MS, wait_until

log = logging.getLogger(__name__)

Query = Union[str, LogicalKey, SelfHealingEntry, Candidate]
Options = Union[ResolutionOptions, Mapping[str, Any], None]

_VIEWPORT_STRATEGIES = frozenset({Strategy.MOST_VISIBLE, Strategy.CLOSEST_TO_CENTER})


class Resolver:
    """Turns a query into exactly one live candidate, or a not-found signal."""

    def __init__(
        self,
        source: CandidateSource,
        prober: SelfHealingProber | None = None,
        *,
        defaults: ResolutionOptions = DEFAULT_RESOLUTION_OPTIONS,
        use_self_healing: bool = False,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        self.source = source
        self.prober = prober
        self.defaults = defaults
        self.use_self_healing = use_self_healing
        self.poll_interval_ms = poll_interval_ms

    def effective_options(self, options: Options = None) -> ResolutionOptions:
        return merge_options(options, self.defaults)

    def resolve(self, query: Query, options: Options = None) -> Candidate | None:
        effective = self.effective_options(options)
        target = self.locate(query, effective)
        candidates = self.candidates(target, effective.timeout_ms)
        if not candidates:
            return self._not_found(query, effective, "no candidates matched")
        if len(candidates) == 1:
            return candidates[0]
        index = self.select_index(candidates, effective)
        if index is None:
            return self._not_found(query, effective, f"{effective.strategy.value} selected none of {len(candidates)}")
        log.debug(
            "Resolved %s to candidate %d of %d using %s",
            describe_query(query),
            index,
            len(candidates),
            effective.strategy.value,
        )
        return candidates[index]

    def locate(self, query: Query, options: Options = None) -> str | Candidate:
        """Returns the selector (or live handle) the query will be executed as."""

        effective = self.effective_options(options)
        if isinstance(query, str):
            return normalize_selector(query)[0]
        if isinstance(query, (LogicalKey, SelfHealingEntry)):
            if self.healing_enabled(effective):
                if self.prober is None:
                    raise HealingError(
                        f"Self-healing failed for: {describe_query(query)} (no catalog configured)",
                        selector=describe_query(query),
                    )
                return self.prober.probe(query)
            return self._primary_selector(query)
        if is_candidate(query):
            return query
        raise InvalidSelectorError(f"Unsupported query type: {type(query).__name__}")

    def needs_healing(self, query: Query, options: Options = None) -> bool:
        return isinstance(query, (LogicalKey, SelfHealingEntry)) and self.healing_enabled(
            self.effective_options(options)
        )

    def healing_enabled(self, options: ResolutionOptions) -> bool:
        if options.self_healing is None:
            return self.use_self_healing
        return options.self_healing

    def candidates(self, target: str | Candidate, timeout_ms: float) -> list[Candidate]:
        """Queries the source, polling until something matches or the timeout elapses."""

        if not isinstance(target, str):
            return [target]
        return list(wait_until(lambda: self.source.query(target), timeout_ms, self.poll_interval_ms))

    def select_index(self, candidates: list[Candidate], options: Options = None) -> int | None:
        effective = self.effective_options(options)
        context = StrategyContext()
        if effective.strategy in _VIEWPORT_STRATEGIES:
            context.viewport = self.source.viewport_size()
        elif effective.strategy is Strategy.CLOSEST_TO_ELEMENT:
            context.reference_box = self._reference_box(effective)
        return select_index(effective.strategy, candidates, effective.strategy_options, context)

    def _reference_box(self, options: ResolutionOptions) -> BoundingBox:
        reference = options.strategy_options.reference_locator
        if reference is None:
            raise ConfigurationError("CLOSEST_TO_ELEMENT strategy requires strategy_options.reference_locator")
        element = self.resolve(
            reference,
            ResolutionOptions(timeout_ms=options.timeout_ms, throw_on_not_found=True, self_healing=False),
        )
        box = element.bounding_box()
        if box is None:
            raise ElementNotFoundError(
                "Reference element has no bounding box",
                selector=describe_query(reference),
            )
        return box

    def _primary_selector(self, query: LogicalKey | SelfHealingEntry) -> str:
        if isinstance(query, SelfHealingEntry):
            return query.primary
        if self.prober is None or query.name not in self.prober.catalog:
            raise InvalidSelectorError(f"Invalid selector: {query.name}", selector=query.name)
        return self.prober.catalog.primary(query)

    @staticmethod
    def _not_found(query: Query, options: ResolutionOptions, reason: str) -> None:
        if options.throw_on_not_found:
            label = describe_query(query)
            raise ElementNotFoundError(f"Element not found: {label} ({reason})", selector=label)
        return None


def is_candidate(value: Any) -> bool:
    return callable(getattr(value, "bounding_box", None)) and callable(getattr(value, "click", None))


def describe_query(query: Any) -> str:
    if isinstance(query, str):
        return query
    if isinstance(query, LogicalKey):
        return query.name
    if isinstance(query, SelfHealingEntry):
        return query.key
    return f"<{type(query).__name__}>"
