from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> BoundingBox | None:
        if not payload:
            return None
        return cls(
            x=float(payload.get("x", 0.0)),
            y=float(payload.get("y", 0.0)),
            width=float(payload.get("width", 0.0)),
            height=float(payload.get("height", 0.0)),
        )

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def within(self, viewport: Viewport) -> bool:
        """True when the whole box lies inside the viewport."""

        return (
            self.x >= 0
            and self.y >= 0
            and self.x + self.width <= viewport.width
            and self.y + self.height <= viewport.height
        )


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float
    height: float

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> Viewport | None:
        if not payload:
            return None
        return cls(width=float(payload["width"]), height=float(payload["height"]))

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2


def distance(left: tuple[float, float], right: tuple[float, float]) -> float:
    return math.hypot(left[0] - right[0], left[1] - right[1])


def closest_index(points: list[tuple[int, tuple[float, float]]], origin: tuple[float, float]) -> int | None:
    """Returns the index of the point nearest to origin, first one on ties."""

    best_index: int | None = None
    best_distance = math.inf
    for index, point in points:
        current = distance(point, origin)
        if current < best_distance:
            best_distance = current
            best_index = index
    return best_index
