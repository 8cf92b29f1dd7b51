"""Small geometric value types: sizes, points and axis-aligned rectangles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

Number = Union[int, float]


@dataclass(frozen=True)
class Size:
    """Width and height of an image or region."""

    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class Point:
    """A point in image coordinates."""

    x: Number = 0
    y: Number = 0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle given by its top-left corner and its extents."""

    x: Number = 0
    y: Number = 0
    width: Number = 0
    height: Number = 0

    def area(self) -> Number:
        """Width times height."""
        return self.width * self.height

    def __and__(self, other: "Rect") -> "Rect":
        """Intersection; an empty ``Rect()`` when the rectangles do not overlap."""
        if not isinstance(other, Rect):
            return NotImplemented
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        width = min(self.x + self.width, other.x + other.width) - x1
        height = min(self.y + self.height, other.y + other.height) - y1
        if width <= 0 or height <= 0:
            return Rect()
        return Rect(x1, y1, width, height)

    def __or__(self, other: "Rect") -> "Rect":
        """Smallest rectangle that contains both rectangles."""
        if not isinstance(other, Rect):
            return NotImplemented
        x1 = min(self.x, other.x)
        y1 = min(self.y, other.y)
        width = max(self.x + self.width, other.x + other.width) - x1
        height = max(self.y + self.height, other.y + other.height) - y1
        return Rect(x1, y1, width, height)