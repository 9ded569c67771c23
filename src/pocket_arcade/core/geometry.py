"""Axis-aligned geometry helpers shared by the game engines."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in screen coordinates (y grows downwards)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


def ranges_overlap(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Open-interval overlap test; touching edges do not overlap."""
    return a_start < b_end and a_end > b_start


def intersects(a: Rect, b: Rect) -> bool:
    """Check if two boxes overlap on both axes."""
    return (
        ranges_overlap(a.x, a.right, b.x, b.right)
        and ranges_overlap(a.y, a.bottom, b.y, b.bottom)
    )
