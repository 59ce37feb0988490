"""Plain value types for viewport/content sizes and gesture locations."""
from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = ["Point", "Size"]


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> "Point":
        return Point(self.x / factor, self.y / factor)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class Size:
    """Width/height pair. Negative extents are rejected."""

    width: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            raise ValueError("size must be finite")
        if self.width < 0 or self.height < 0:
            raise ValueError("size must be non-negative")

    @property
    def center(self) -> Point:
        return Point(self.width / 2.0, self.height / 2.0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scaled(self, factor: float) -> "Size":
        return Size(self.width * factor, self.height * factor)

    def fitted_into(self, bounds: "Size") -> "Size":
        """Return this size scaled to fit ``bounds`` while keeping its aspect ratio."""
        if self.is_empty or bounds.is_empty:
            return Size()
        factor = min(bounds.width / self.width, bounds.height / self.height)
        return self.scaled(factor)

    def as_tuple(self) -> tuple[float, float]:
        return self.width, self.height
