"""Geometry primitives shared by the text model.

Coordinates are page space with a top-left origin and y growing downward,
the convention pdfplumber reports chars in.  ``Rect`` follows the
``(x, y, width, height)`` layout; :meth:`Rect.bbox` gives the
``(x0, y0, x1, y1)`` tuple the rest of the tooling uses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

MATRIX_EPSILON = 1e-12

BBox = Tuple[float, float, float, float]


class NonInvertibleTransformError(ArithmeticError):
    """Raised when inverting an affine transform with a zero determinant."""


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle ``(x, y, width, height)``."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height

    def bbox(self) -> BBox:
        """Bounding box as ``(x0, y0, x1, y1)``."""
        return (self.x, self.y, self.x1, self.y1)

    @classmethod
    def from_bbox(cls, x0: float, y0: float, x1: float, y1: float) -> "Rect":
        return cls(x0, y0, x1 - x0, y1 - y0)

    def union(self, other: "Rect") -> "Rect":
        """Smallest rectangle enclosing both; zero-area rects are not special."""
        return Rect.from_bbox(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.x1, other.x1),
            max(self.y1, other.y1),
        )

    def widened_to(self, x1: float) -> "Rect":
        """Return a copy whose right edge is moved out to *x1* (never in)."""
        if x1 <= self.x1:
            return self
        return Rect(self.x, self.y, x1 - self.x, self.height)

    def contains_point(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x1 and self.y <= py <= self.y1

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x <= other.x1
            and other.x <= self.x1
            and self.y <= other.y1
            and other.y <= self.y1
        )

    def rounded(self, digits: int = 0) -> BBox:
        """Rounded ``(x0, y0, x1, y1)``, used as a fuzzy identity key."""
        return tuple(round(v, digits) for v in self.bbox())  # type: ignore[return-value]


def union_all(rects: Iterable[Rect]) -> Optional[Rect]:
    """Union of *rects*, or ``None`` for an empty iterable."""
    result: Optional[Rect] = None
    for r in rects:
        result = r if result is None else result.union(r)
    return result


class Affine:
    """2D affine transform in PDF ``[a b c d e f]`` order.

    Maps ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``.  Internally a
    3x3 numpy matrix so inversion stays exact enough for
    repeated XObject placements.
    """

    __slots__ = ("_m",)

    def __init__(self, a=1.0, b=0.0, c=0.0, d=1.0, e=0.0, f=0.0):
        self._m = np.array(
            [[a, c, e], [b, d, f], [0.0, 0.0, 1.0]],
            dtype=float,
        )

    @classmethod
    def from_matrix(cls, m: np.ndarray) -> "Affine":
        return cls(m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Affine":
        if len(values) != 6:
            raise ValueError(f"affine transform needs 6 values, got {len(values)}")
        return cls(*(float(v) for v in values))

    @classmethod
    def rotation(cls, degrees: float) -> "Affine":
        """Rotation about the origin (no centering)."""
        rad = math.radians(degrees)
        cos_a, sin_a = math.cos(rad), math.sin(rad)
        return cls(a=cos_a, b=sin_a, c=-sin_a, d=cos_a)

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        m = self._m
        return (
            float(m[0, 0]),
            float(m[1, 0]),
            float(m[0, 1]),
            float(m[1, 1]),
            float(m[0, 2]),
            float(m[1, 2]),
        )

    @property
    def shear_x(self) -> float:
        return float(self._m[0, 1])

    @property
    def shear_y(self) -> float:
        return float(self._m[1, 0])

    def determinant(self) -> float:
        return float(np.linalg.det(self._m[:2, :2]))

    def inverse(self) -> "Affine":
        if abs(self.determinant()) < MATRIX_EPSILON:
            raise NonInvertibleTransformError(f"singular transform {self.as_tuple()}")
        return Affine.from_matrix(np.linalg.inv(self._m))

    def transform_rect(self, rect: Rect) -> Rect:
        """Bounding rectangle of the four transformed corners."""
        corners = np.array(
            [
                [rect.x, rect.x1, rect.x1, rect.x],
                [rect.y, rect.y, rect.y1, rect.y1],
                [1.0, 1.0, 1.0, 1.0],
            ]
        )
        out = self._m @ corners
        xs, ys = out[0], out[1]
        return Rect.from_bbox(
            float(xs.min()), float(ys.min()), float(xs.max()), float(ys.max())
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Affine):
            return NotImplemented
        return bool(np.allclose(self._m, other._m))

    def __repr__(self) -> str:
        a, b, c, d, e, f = self.as_tuple()
        return f"Affine({a:g}, {b:g}, {c:g}, {d:g}, {e:g}, {f:g})"
