"""Plain geometry for hit-testing and wire routing.

The rendering layer hands us canvas-relative points and bounding boxes;
nothing here knows about a display surface.
"""
from __future__ import annotations
from typing import List, NamedTuple


class Point(NamedTuple):
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)


class Rect(NamedTuple):
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_corners(cls, a: Point, b: Point) -> "Rect":
        """Rectangle spanned by two drag corners, in either order."""
        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "Rect":
        return cls.from_corners(Point(x, y), Point(x + width, y + height))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def center(self) -> Point:
        return Point(self.left + self.width / 2, self.top + self.height / 2)

    def intersects(self, other: "Rect") -> bool:
        # Open test: rectangles that only share an edge do not intersect.
        return (
            self.left < other.right
            and self.right > other.left
            and self.top < other.bottom
            and self.bottom > other.top
        )


def port_center(port_box: Rect, canvas_origin: Point = Point(0.0, 0.0)) -> Point:
    """Center of a port's box, relative to the canvas origin."""
    c = port_box.center()
    return Point(c.x - canvas_origin.x, c.y - canvas_origin.y)


def wire_route(start: Point, end: Point) -> List[Point]:
    """Right-angled polyline from an output port to an input port.

    Horizontal out of the source, vertical at the midpoint, horizontal
    into the target. Used for committed wires and the dashed draft alike.
    """
    mid_x = (start.x + end.x) / 2
    return [start, Point(mid_x, start.y), Point(mid_x, end.y), end]
