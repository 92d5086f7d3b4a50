from __future__ import annotations

import math
from dataclasses import dataclass
from statistics import median
from typing import Any, Iterable


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def median_of(values: Iterable[float], default: float) -> float:
    vals = list(values)
    return float(median(vals)) if vals else float(default)


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@dataclass(frozen=True, slots=True)
class PixelBox:
    """
    Axis-aligned box in render-pixel space (top-left origin).

    (x, y) is the top-left corner; w and h must be non-negative.
    """

    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        if not (self.w >= 0 and self.h >= 0):
            raise ValueError(f"PixelBox dimensions must be >= 0, got w={self.w!r} h={self.h!r}")

    @property
    def x1(self) -> float:
        return self.x + self.w

    @property
    def y1(self) -> float:
        return self.y + self.h

    def center(self) -> Point:
        return Point(self.x + self.w / 2.0, self.y + self.h / 2.0)

    def area(self) -> float:
        return self.w * self.h

    def union(self, other: "PixelBox") -> "PixelBox":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        x1 = max(self.x1, other.x1)
        y1 = max(self.y1, other.y1)
        return PixelBox(x=x0, y=y0, w=x1 - x0, h=y1 - y0)

    def contains_point(self, p: Point) -> bool:
        return self.x <= p.x <= self.x1 and self.y <= p.y <= self.y1

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PixelBox":
        return PixelBox(x=float(d["x"]), y=float(d["y"]), w=float(d["w"]), h=float(d["h"]))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


def bbox_union_many(boxes: Iterable[PixelBox]) -> PixelBox:
    boxes = list(boxes)
    if not boxes:
        return PixelBox(0, 0, 0, 0)
    out = boxes[0]
    for b in boxes[1:]:
        out = out.union(b)
    return out
