from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterable, Iterator

from locator_engine.core.exceptions import ConfigurationError
from locator_engine.core.metadata import LogicalKey, SelfHealingEntry


class SelfHealingCatalog(Mapping):
    """Read-only map from logical element keys to ordered selector lists.

    Built once from a nested mapping such as::

        {"common": {"navigation": {"homeLink": {"selectors": ["a[href='/']", "#home"]}}}}

    Nested names are joined with dots, so the entry above is stored under
    ``common.navigation.homeLink``. A leaf may be a single selector string, a
    list of selectors, or a mapping with a ``selectors`` list.
    """

    def __init__(self, locators: Mapping[str, Any] | None = None) -> None:
        entries: dict[str, SelfHealingEntry] = {}
        _flatten(locators or {}, "", entries)
        self._entries = MappingProxyType(entries)

    @classmethod
    def from_entries(cls, entries: Iterable[SelfHealingEntry]) -> SelfHealingCatalog:
        return cls({entry.key: list(entry.selectors) for entry in entries})

    def __getitem__(self, key: str | LogicalKey) -> SelfHealingEntry:
        return self._entries[str(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, (str, LogicalKey)) and str(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def primary(self, key: str | LogicalKey) -> str:
        return self[key].primary


def _flatten(node: Mapping[str, Any], prefix: str, entries: dict[str, SelfHealingEntry]) -> None:
    for name, value in node.items():
        key = f"{prefix}.{name}" if prefix else str(name)
        if isinstance(value, str):
            entries[key] = SelfHealingEntry(key, (value,))
        elif isinstance(value, (list, tuple)):
            entries[key] = SelfHealingEntry(key, _selectors(key, value))
        elif isinstance(value, Mapping) and "selectors" in value:
            entries[key] = SelfHealingEntry(key, _selectors(key, value["selectors"]))
        elif isinstance(value, Mapping):
            _flatten(value, key, entries)
        else:
            raise ConfigurationError(
                f"Unsupported locator value of type {type(value).__name__}",
                selector=key,
            )


def _selectors(key: str, values: Any) -> tuple[str, ...]:
    if not isinstance(values, (list, tuple)) or not all(isinstance(item, str) for item in values):
        raise ConfigurationError("Locator selectors must be a list of strings", selector=key)
    return tuple(values)
