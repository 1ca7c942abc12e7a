from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping

from locator_engine.core.exceptions import ConfigurationError
from locator_engine.utils.geometry import BoundingBox, Viewport


class Strategy(str, Enum):
    """Policy used to pick one candidate when a query matches several."""

    FIRST = "first"
    LAST = "last"
    MOST_VISIBLE = "most-visible"
    CLOSEST_TO_CENTER = "closest-to-center"
    CLOSEST_TO_ELEMENT = "closest-to-element"
    CONTAINS_TEXT = "contains-text"
    MATCHES_ATTRIBUTE = "matches-attribute"
    INDEX = "index"


def coerce_strategy(value: Strategy | str) -> Strategy:
    """Accepts enum members, values ("most-visible") and names ("MOST_VISIBLE")."""

    if isinstance(value, Strategy):
        return value
    try:
        return Strategy(value)
    except ValueError:
        pass
    try:
        return Strategy[str(value).upper().replace("-", "_")]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown resolution strategy: {value}") from exc


def _strategy_options(payload: Mapping[str, Any]) -> StrategyOptions:
    allowed = {item.name for item in fields(StrategyOptions)}
    unknown = set(payload) - allowed
    if unknown:
        raise ConfigurationError(f"Unknown strategy options: {', '.join(sorted(unknown))}")
    return StrategyOptions(**dict(payload))


@dataclass(frozen=True, slots=True)
class LogicalKey:
    """Stable name of a UI element, looked up in the self-healing catalog."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class SelfHealingEntry:
    key: str
    selectors: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "selectors", tuple(self.selectors))
        if not self.selectors:
            raise ConfigurationError("Self-healing entry has no selectors", selector=self.key)

    @property
    def primary(self) -> str:
        return self.selectors[0]


@dataclass(frozen=True, slots=True)
class StrategyOptions:
    index: int | None = None
    text: str | None = None
    attribute_name: str | None = None
    attribute_value: str | re.Pattern[str] | None = None
    reference_locator: Any = None


@dataclass(frozen=True, slots=True)
class ResolutionOptions:
    strategy: Strategy = Strategy.FIRST
    strategy_options: StrategyOptions = field(default_factory=StrategyOptions)
    timeout_ms: float = 5000
    throw_on_not_found: bool = True
    self_healing: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy", coerce_strategy(self.strategy))
        if isinstance(self.strategy_options, Mapping):
            object.__setattr__(self, "strategy_options", _strategy_options(self.strategy_options))
        elif self.strategy_options is None:
            object.__setattr__(self, "strategy_options", StrategyOptions())
        if self.timeout_ms < 0:
            raise ConfigurationError("timeout_ms must not be negative")


@dataclass(frozen=True, slots=True)
class RetryOptions:
    max_retries: int = 2
    delay_ms: float = 1000

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")
        if self.delay_ms < 0:
            raise ConfigurationError("delay_ms must not be negative")


@dataclass(slots=True)
class StrategyContext:
    """Page facts a strategy may need, gathered once per resolution."""

    viewport: Viewport | None = None
    reference_box: BoundingBox | None = None


DEFAULT_RESOLUTION_OPTIONS = ResolutionOptions()
DEFAULT_RETRY_OPTIONS = RetryOptions()

_RESOLUTION_FIELDS = frozenset(item.name for item in fields(ResolutionOptions))
_RETRY_FIELDS = frozenset(item.name for item in fields(RetryOptions))


def merge_options(
    overrides: ResolutionOptions | Mapping[str, Any] | None = None,
    defaults: ResolutionOptions = DEFAULT_RESOLUTION_OPTIONS,
) -> ResolutionOptions:
    """Returns the effective options: overrides on top of defaults."""

    if overrides is None:
        return defaults
    if isinstance(overrides, ResolutionOptions):
        return overrides
    unknown = set(overrides) - _RESOLUTION_FIELDS
    if unknown:
        raise ConfigurationError(f"Unknown resolution options: {', '.join(sorted(unknown))}")
    return replace(defaults, **dict(overrides))


def merge_retry_options(
    overrides: RetryOptions | Mapping[str, Any] | None = None,
    defaults: RetryOptions = DEFAULT_RETRY_OPTIONS,
) -> RetryOptions:
    if overrides is None:
        return defaults
    if isinstance(overrides, RetryOptions):
        return overrides
    unknown = set(overrides) - _RETRY_FIELDS
    if unknown:
        raise ConfigurationError(f"Unknown retry options: {', '.join(sorted(unknown))}")
    return replace(defaults, **dict(overrides))
