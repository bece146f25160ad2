"""
Geometric Primitives for landmark analysis.

All coordinates are normalized to the photo's natural dimensions, so a point
at (0.5, 0.5) sits in the centre of the image. The y axis points down, as in
image space.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Union, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector in the image plane representing direction and magnitude.
    """
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0)
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector) -> float:
        """Z component of the 3D cross product (signed parallelogram area)."""
        return self.x * other.y - self.y * other.x

    def normal(self) -> Vector:
        """Left-hand normal, rotated +90 degrees."""
        return Vector(-self.y, self.x)


@dataclass(frozen=True)
class Point:
    """A location in normalized image coordinates."""
    x: float
    y: float

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Union[Vector, Point]) -> Union[Vector, Point]:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        # Point - Vector = Point (Inverse translation)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y)
        raise TypeError("Can only subtract a Vector or Point from a Point.")

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> Point:
        """Scale both axes by the same factor (e.g. to pixels)."""
        return Point(self.x * factor, self.y * factor)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Point:
        return Point(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class Line:
    """A straight segment between two points."""
    start: Point
    end: Point

    def to_vector(self) -> Vector:
        return self.end - self.start

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Line:
        return Line(start=Point.from_dict(data["start"]), end=Point.from_dict(data["end"]))
