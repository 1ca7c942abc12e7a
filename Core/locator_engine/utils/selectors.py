from __future__ import annotations

from locator_engine.core.exceptions import InvalidSelectorError


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def normalize_selector(selector: str) -> tuple[str, str]:
    """Strips a raw selector and returns it with its inferred type."""

    normalized = selector.strip()
    if not normalized:
        raise InvalidSelectorError("Selector is empty", selector=selector)
    if "\n" in normalized or "\r" in normalized:
        raise InvalidSelectorError("Selector spans multiple lines", selector=selector)
    return normalized, infer_selector_type(normalized)
