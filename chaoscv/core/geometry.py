# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
2-D geometric value types.

Point, Size and Rect describe where a view sits inside a tensor slice.
They are immutable and carry no storage.
"""

from dataclasses import dataclass, field
from typing import Union

Number = Union[int, float]


@dataclass(frozen=True)
class Point:
    """A 2-D point; x is the column, y is the row."""

    x: Number = 0
    y: Number = 0

    @classmethod
    def from_size(cls, size: "Size") -> "Point":
        return cls(size.width, size.height)

    def inside(self, rect: "Rect") -> bool:
        """True if the point lies in rect, borders included."""
        return rect.contains(self)

    def to_size(self) -> "Size":
        return Size(self.x, self.y)

    def __add__(self, other):
        if isinstance(other, Point):
            return Point(self.x + other.x, self.y + other.y)
        if isinstance(other, Size):
            return Point(self.x + other.width, self.y + other.height)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Point):
            return Point(self.x - other.x, self.y - other.y)
        if isinstance(other, Size):
            return Point(self.x - other.width, self.y - other.height)
        return NotImplemented

    def __mul__(self, value: Number) -> "Point":
        return Point(self.x * value, self.y * value)

    def __truediv__(self, value: Number) -> "Point":
        return Point(self.x / value, self.y / value)

    def __floordiv__(self, value: Number) -> "Point":
        return Point(self.x // value, self.y // value)

    # Component-wise partial order: a <= b only if both coordinates are.
    def __le__(self, other: "Point") -> bool:
        return self.x <= other.x and self.y <= other.y

    def __lt__(self, other: "Point") -> bool:
        return self.x < other.x and self.y < other.y

    def __ge__(self, other: "Point") -> bool:
        return self.x >= other.x and self.y >= other.y

    def __gt__(self, other: "Point") -> bool:
        return self.x > other.x and self.y > other.y

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}]"


@dataclass(frozen=True)
class Size:
    """A 2-D extent. Negative components are stored as their magnitude."""

    width: Number = 0
    height: Number = 0

    def __post_init__(self):
        object.__setattr__(self, "width", abs(self.width))
        object.__setattr__(self, "height", abs(self.height))

    @property
    def area(self) -> Number:
        return self.width * self.height

    def to_point(self) -> Point:
        return Point(self.width, self.height)

    def __add__(self, other):
        if isinstance(other, Size):
            return Size(self.width + other.width, self.height + other.height)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Size):
            return Size(self.width - other.width, self.height - other.height)
        return NotImplemented

    def __mul__(self, value: Number) -> "Size":
        return Size(self.width * value, self.height * value)

    def __truediv__(self, value: Number) -> "Size":
        return Size(self.width / value, self.height / value)

    def __str__(self) -> str:
        return f"[{self.width}, {self.height}]"


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle given by its top-left and bottom-right corners.

    The corners are normalized per axis, so Rect(Point(3, 1), Point(1, 3))
    equals Rect(Point(1, 1), Point(3, 3)). The bottom-right corner is
    exclusive when the rectangle selects tensor elements.
    """

    tl: Point = field(default_factory=Point)
    br: Point = field(default_factory=Point)

    def __post_init__(self):
        a, b = self.tl, self.br
        object.__setattr__(self, "tl", Point(min(a.x, b.x), min(a.y, b.y)))
        object.__setattr__(self, "br", Point(max(a.x, b.x), max(a.y, b.y)))

    @classmethod
    def from_point_size(cls, tl: Point, size: Size) -> "Rect":
        return cls(tl, tl + size)

    @classmethod
    def from_xywh(cls, x: Number, y: Number, width: Number, height: Number) -> "Rect":
        return cls(Point(x, y), Point(x + width, y + height))

    @property
    def size(self) -> Size:
        return Size(self.br.x - self.tl.x, self.br.y - self.tl.y)

    @property
    def x(self) -> Number:
        return self.tl.x

    @property
    def y(self) -> Number:
        return self.tl.y

    @property
    def width(self) -> Number:
        return self.br.x - self.tl.x

    @property
    def height(self) -> Number:
        return self.br.y - self.tl.y

    def contains(self, point: Point) -> bool:
        return self.tl <= point and point <= self.br

    def __add__(self, other):
        if isinstance(other, Point):
            return Rect(self.tl + other, self.br + other)
        if isinstance(other, Size):
            return Rect.from_point_size(self.tl, self.size + other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Point):
            return Rect(self.tl - other, self.br - other)
        if isinstance(other, Size):
            return Rect.from_point_size(self.tl, self.size - other)
        return NotImplemented

    def __and__(self, other: "Rect") -> "Rect":
        """Intersection; empty intersections collapse to a zero-size rect."""
        tl = Point(max(self.tl.x, other.tl.x), max(self.tl.y, other.tl.y))
        br = Point(min(self.br.x, other.br.x), min(self.br.y, other.br.y))
        if br.x < tl.x or br.y < tl.y:
            return Rect(tl, tl)
        return Rect(tl, br)

    def __or__(self, other: "Rect") -> "Rect":
        """Smallest rectangle covering both."""
        tl = Point(min(self.tl.x, other.tl.x), min(self.tl.y, other.tl.y))
        br = Point(max(self.br.x, other.br.x), max(self.br.y, other.br.y))
        return Rect(tl, br)

    def __str__(self) -> str:
        return f"[{self.width} x {self.height} at ({self.tl.x}, {self.tl.y})]"
