"""Vector math, Bezier evaluation and heading utilities for the path engine.

All headings in this module use the field convention: heading 0 points north
(+Y) and increases clockwise, in degrees ``[0, 360)``. Angles use the math
convention: 0 points east (+X) and increases counter-clockwise, in radians
``(-pi, pi]``.

Derivative and curvature helpers accept anything with a ``controls`` sequence
of 2 (linear) or 4 (cubic) points, which is how :class:`pathengine.models.Segment`
exposes its control polygon.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


@dataclass
class Vector:
    """A 2D point or direction.

    Arithmetic returns new vectors; the receiver is never modified.
    """

    x: float
    y: float

    def add(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def subtract(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def multiply(self, value: float) -> Vector:
        return Vector(self.x * value, self.y * value)

    def divide(self, value: float) -> Vector:
        return Vector(self.x / value, self.y / value)

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def distance(self, other: Vector) -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def interpolate(self, other: Vector, distance: float) -> Vector:
        """Move ``distance`` from this vector towards ``other``."""
        angle = math.atan2(other.y - self.y, other.x - self.x)
        return Vector(self.x + distance * math.cos(angle), self.y + distance * math.sin(angle))

    def mirror(self, other: Vector) -> Vector:
        """Reflect ``other`` through this vector."""
        return Vector(2 * self.x - other.x, 2 * self.y - other.y)

    def is_within_area(self, lower: Vector, upper: Vector) -> bool:
        return lower.x <= self.x <= upper.x and lower.y <= self.y <= upper.y

    def to_vector(self) -> Vector:
        return Vector(self.x, self.y)


# -------------------- Bezier Evaluation --------------------

def binomial(n: int, k: int) -> float:
    coeff = 1.0
    for i in range(n - k + 1, n + 1):
        coeff *= i
    for i in range(1, k + 1):
        coeff /= i
    return coeff


def bernstein(n: int, i: int, t: float) -> float:
    return binomial(n, i) * math.pow(t, i) * math.pow(1 - t, n - i)


def bezier_positions(controls: Sequence[Vector], ts: Sequence[float]) -> np.ndarray:
    """Evaluate a Bezier curve at many parameter values.

    Args:
        controls: Control polygon; the degree is ``len(controls) - 1``.
        ts: Parameter values in ``[0, 1]``.

    Returns:
        ``(N, 2)`` float64 array of positions.

    Note:
        Terms are accumulated one control at a time (no matrix product) so the
        position at ``t = 0`` is exactly the first control.
    """
    t = np.asarray(ts, dtype=np.float64)
    n = len(controls) - 1
    out = np.zeros((len(t), 2), dtype=np.float64)
    for i, control in enumerate(controls):
        basis = binomial(n, i) * np.power(t, i) * np.power(1 - t, n - i)
        out[:, 0] += control.x * basis
        out[:, 1] += control.y * basis
    return out


def bezier_arc_length(segment, interval: float = 0.05) -> float:
    """Approximate the arc length of a segment with a coarse polyline."""
    ts: List[float] = []
    t = 0.0
    while t <= 1:
        ts.append(t)
        t += interval
    pts = bezier_positions(segment.controls, ts)
    first = segment.controls[0]
    prev = np.vstack([[first.x, first.y], pts[:-1]])
    return float(np.sum(np.hypot(pts[:, 0] - prev[:, 0], pts[:, 1] - prev[:, 1])))


def first_derivative(segment, t: float) -> Vector:
    c = segment.controls
    if len(c) == 2:
        return Vector(c[1].x - c[0].x, c[1].y - c[0].y)
    elif len(c) == 4:
        x = (3 * (c[1].x - c[0].x) * (1 - t) * (1 - t)
             + 6 * (c[2].x - c[1].x) * (1 - t) * t
             + 3 * (c[3].x - c[2].x) * t * t)
        y = (3 * (c[1].y - c[0].y) * (1 - t) * (1 - t)
             + 6 * (c[2].y - c[1].y) * (1 - t) * t
             + 3 * (c[3].y - c[2].y) * t * t)
        return Vector(x, y)
    return Vector(0, 1)


def second_derivative(segment, t: float) -> Vector:
    c = segment.controls
    if len(c) == 4:
        x = (6 * (c[0].x - 2 * c[1].x + c[2].x) * (1 - t)
             + 6 * (c[1].x - 2 * c[2].x + c[3].x) * t)
        y = (6 * (c[0].y - 2 * c[1].y + c[2].y) * (1 - t)
             + 6 * (c[1].y - 2 * c[2].y + c[3].y) * t)
        return Vector(x, y)
    return Vector(0, 0)


def curvature(segment, t: float) -> float:
    """Signed curvature of a segment at parameter ``t``.

    Returns NaN for a degenerate (zero-speed, zero-bend) point and a signed
    infinity when the curve bends with zero speed, matching IEEE division.
    """
    first = first_derivative(segment, t)
    second = second_derivative(segment, t)

    cross = first.x * second.y - first.y * second.x
    magnitude = math.sqrt(first.x * first.x + first.y * first.y) ** 3

    if magnitude == 0:
        if cross == 0:
            return math.nan
        return math.copysign(math.inf, cross)
    return cross / magnitude


# -------------------- Headings & Angles --------------------

def bound_heading(num: float) -> float:
    """Bound a heading into ``[0, 360)`` degrees."""
    return num % 360


def bound_angle(num: float) -> float:
    """Bound an angle into ``(-pi, pi]`` radians."""
    while num > math.pi:
        num -= 2 * math.pi
    while num <= -math.pi:
        num += 2 * math.pi
    return num


def to_heading(vec: Vector) -> float:
    return bound_heading(90 - math.degrees(math.atan2(vec.y, vec.x)))


def to_derivative_heading(original: float, target: float) -> float:
    """Shortest signed turn from ``original`` to ``target``, in ``(-180, 180]``.

    Example:
        >>> to_derivative_heading(0, 270)
        -90
        >>> to_derivative_heading(270, 0)
        90
    """
    high = 360
    half = high / 2

    target_heading = target % high
    delta = (original - target_heading + high) % high

    return high - delta if delta > half else -delta


def from_degree_to_radian(degree: float) -> float:
    return degree * math.pi / 180


def from_radian_to_degree(radian: float) -> float:
    return radian * 180 / math.pi


def from_heading_in_degree_to_angle_in_radian(heading: float) -> float:
    return bound_angle(from_degree_to_radian(90 - heading))


def from_angle_in_radian_to_heading_in_degree(angle: float) -> float:
    return bound_heading(90 - from_radian_to_degree(angle))


# -------------------- Lines --------------------

def _is_vertical(theta: float) -> bool:
    return abs(math.cos(theta)) < 1e-12


def find_closest_point_on_line(a: Vector, heading: float, c: Vector) -> Vector:
    """Project ``c`` onto the infinite line through ``a`` with ``heading``.

    The line is ``y = tan(theta) * x + (a.y - tan(theta) * a.x)`` and the
    projection lies on the perpendicular through ``c``. A north/south line has
    no finite slope and is projected directly.

    Args:
        a: A point on the line.
        heading: Line bearing in degrees.
        c: The point to project.

    Returns:
        The point on the line closest to ``c``.

    Example:
        >>> find_closest_point_on_line(Vector(0, 0), 45, Vector(2, 0))
        Vector(x=1.0..., y=1.0...)
    """
    theta = from_heading_in_degree_to_angle_in_radian(heading)
    if _is_vertical(theta):
        return Vector(a.x, c.y)

    tan = math.tan(theta)
    tan_pow2 = tan ** 2

    e_x = (tan_pow2 * a.x - tan * a.y + c.x + tan * c.y) / (tan_pow2 + 1)
    e_y = (-tan * a.x + a.y + tan * c.x + tan_pow2 * c.y) / (tan_pow2 + 1)

    return Vector(e_x, e_y)


def find_lines_intersection(
    a: Vector,
    heading_b: float,
    c: Vector,
    heading_d: float
) -> Optional[Vector]:
    """Intersect the line through ``a`` (``heading_b``) with the line through ``c`` (``heading_d``).

    Headings are compared modulo 180 with Python's floored ``%``, so
    unbounded headings such as ``-90`` and ``90`` count as parallel.

    Returns:
        The intersection point, or ``None`` when the lines are parallel.
    """
    if heading_b % 180 == heading_d % 180:
        return None

    theta_b = from_heading_in_degree_to_angle_in_radian(heading_b)
    theta_d = from_heading_in_degree_to_angle_in_radian(heading_d)

    if _is_vertical(theta_b):
        tan_d = math.tan(theta_d)
        return Vector(a.x, tan_d * (a.x - c.x) + c.y)
    if _is_vertical(theta_d):
        tan_b = math.tan(theta_b)
        return Vector(c.x, tan_b * (c.x - a.x) + a.y)

    tan_b = math.tan(theta_b)
    tan_d = math.tan(theta_d)

    x = (tan_b * a.x - a.y - tan_d * c.x + c.y) / (tan_b - tan_d)
    y = (tan_b * tan_d * (a.x - c.x) - tan_d * a.y + tan_b * c.y) / (tan_b - tan_d)
    return Vector(x, y)


def find_central_point(vectors: Sequence[Vector]) -> Optional[Vector]:
    """Centre of the bounding box of ``vectors``, ``None`` if empty."""
    if not vectors:
        return None

    min_x = max_x = vectors[0].x
    min_y = max_y = vectors[0].y
    for v in vectors[1:]:
        min_x = min(min_x, v.x)
        max_x = max(max_x, v.x)
        min_y = min(min_y, v.y)
        max_y = max(max_y, v.y)

    return Vector((min_x + max_x) / 2, (min_y + max_y) / 2)
