from __future__ import annotations

import logging

from locator_engine.core.catalog import SelfHealingCatalog
from locator_engine.core.exceptions import HealingError, InvalidSelectorError
from locator_engine.core.metadata import LogicalKey, SelfHealingEntry
from locator_engine.core.source import CandidateSource

log = logging.getLogger(__name__)


class SelfHealingProber:
    """Walks the recorded selectors of a logical element until one matches."""

    def __init__(self, source: CandidateSource, catalog: SelfHealingCatalog) -> None:
        self.source = source
        self.catalog = catalog

    def probe(self, key: str | LogicalKey | SelfHealingEntry) -> str:
        entry = self.entry(key)
        selector = self.first_match(entry)
        if selector is None:
            raise HealingError(f"Self-healing failed for: {entry.key}", selector=entry.key)
        if selector != entry.primary:
            log.info("Healed %s: primary %r missed, using %r", entry.key, entry.primary, selector)
        return selector

    def first_match(self, entry: SelfHealingEntry) -> str | None:
        """Returns the first selector with a live match; later ones are never queried."""

        return next((selector for selector in entry.selectors if self._exists(selector)), None)

    def entry(self, key: str | LogicalKey | SelfHealingEntry) -> SelfHealingEntry:
        if isinstance(key, SelfHealingEntry):
            return key
        entry = self.catalog.get(str(key))
        if entry is None:
            raise HealingError(f"Self-healing failed for: {key} (no catalog entry)", selector=str(key))
        return entry

    def _exists(self, selector: str) -> bool:
        try:
            count = self.source.count(selector)
        except InvalidSelectorError as exc:
            log.debug("Skipping rejected selector %r: %s", selector, exc)
            return False
        log.debug("Probe %r matched %d element(s)", selector, count)
        return count > 0
