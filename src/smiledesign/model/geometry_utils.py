from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

import math
import numpy as np

if TYPE_CHECKING:
    from numpy import typing as npt

from smiledesign.config import DEFAULT_SPLINE_SEGMENTS, VERTICAL_FIT_EPSILON
from smiledesign.model.geometry_primitives import Point, Line


def distance(a: Point, b: Point) -> float:
    return a.distance_to(b)

def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)

def line_from_points(a: Point, b: Point) -> Line:
    return Line(start=a, end=b)

def line_angle(line: Line) -> float:
    """Angle of a line relative to horizontal, in degrees (-180, 180]."""
    return math.degrees(math.atan2(line.end.y - line.start.y, line.end.x - line.start.x))

def angle_between_lines(l1: Line, l2: Line) -> float:
    """
    Angle between two undirected lines, folded into [0, 90] degrees.

    Direction of travel along either line is ignored, so swapping a line's
    endpoints or swapping the two arguments gives the same result.
    """
    diff = abs(math.radians(line_angle(l1)) - math.radians(line_angle(l2)))
    if diff > math.pi:
        diff = 2 * math.pi - diff
    if diff > math.pi / 2:
        diff = math.pi - diff
    return math.degrees(diff)

def perpendicular_distance(point: Point, line: Line) -> float:
    """
    Distance from a point to the infinite line through `line.start` and `line.end`.

    A zero-length line degrades to the point-to-point distance from its start.
    """
    direction = line.to_vector()
    length = direction.magnitude
    if length == 0:
        return distance(point, line.start)
    return abs(direction.cross(point - line.start)) / length

def least_squares_line(points: Sequence[Point]) -> Optional[Line]:
    """
    Ordinary least-squares fit y = m*x + b through a set of points.

    Args:
        points: Two or more points.

    Returns:
        A segment spanning the x-range of the input at the fitted y values, or a
        vertical segment at mean(x) spanning the y-range when the x values are
        (nearly) constant. None for fewer than two points.
    """
    if len(points) < 2:
        return None

    xy = np.array([[p.x, p.y] for p in points], dtype=float)
    x, y = xy[:, 0], xy[:, 1]
    n = len(points)

    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_xy = float((x * y).sum())
    sum_x2 = float((x * x).sum())

    denom = n * sum_x2 - sum_x * sum_x

    # Near-vertical: slope is undefined, fit x = const instead
    if abs(denom) < VERTICAL_FIT_EPSILON:
        avg_x = sum_x / n
        return Line(start=Point(avg_x, float(y.min())), end=Point(avg_x, float(y.max())))

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n

    min_x = float(x.min())
    max_x = float(x.max())
    return Line(
        start=Point(min_x, slope * min_x + intercept),
        end=Point(max_x, slope * max_x + intercept),
    )

def catmull_rom_spline(points: Sequence[Point], segments: int = DEFAULT_SPLINE_SEGMENTS) -> list[Point]:
    """
    Uniform Catmull-Rom interpolation through control points.

    The curve passes exactly through every control point. The sequence is
    padded with reflected phantom points (2*P0 - P1 and 2*Pn - Pn-1) so the
    first and last intervals are interpolated too.

    Args:
        points: Control points, in drawing order.
        segments: Subdivisions per interval; each interval emits segments + 1
            samples (t = 0 and t = 1 included).

    Returns:
        The sampled curve. With fewer than three control points the input is
        returned unchanged (as a new list).
    """
    if len(points) < 3:
        return list(points)

    ctrl = np.array([[p.x, p.y] for p in points], dtype=float)
    padded = np.vstack((2 * ctrl[0] - ctrl[1], ctrl, 2 * ctrl[-1] - ctrl[-2]))

    t = np.linspace(0.0, 1.0, segments + 1)[:, np.newaxis]
    t2 = t * t
    t3 = t2 * t

    samples: list[npt.NDArray[np.float64]] = []
    for i in range(1, len(padded) - 2):
        p0, p1, p2, p3 = padded[i - 1], padded[i], padded[i + 1], padded[i + 2]
        samples.append(0.5 * (
            2 * p1
            + (-p0 + p2) * t
            + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
            + (-p0 + 3 * p1 - 3 * p2 + p3) * t3
        ))

    return [Point(float(px), float(py)) for px, py in np.vstack(samples)]

def extend_line(line: Line, extension: float) -> Line:
    """Extend a segment beyond both endpoints along its direction (for drawing)."""
    direction = line.to_vector()
    if direction.magnitude == 0:
        return line
    offset = direction.normalize() * extension
    return Line(start=line.start - offset, end=line.end + offset)
