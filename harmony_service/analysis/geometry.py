"""
Geometry primitives over 2D landmark points.

Pure, stateless functions. Functions that need a non-zero baseline raise
DegenerateGeometryError / DivisionByZeroError instead of returning
NaN or a fudged epsilon result.
"""

from typing import Iterable

import numpy as np

from ..errors import DegenerateGeometryError, DivisionByZeroError
from .models import Point


def _vec(p: Point) -> np.ndarray:
    return np.array([p.x, p.y], dtype=np.float64)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return float(np.hypot(a.x - b.x, a.y - b.y))


def angle(a: Point, vertex: Point, b: Point) -> float:
    """
    Angle a-vertex-b in degrees, in range [0, 180].

    Raises:
        DegenerateGeometryError: If either arm has zero length
    """
    va = _vec(a) - _vec(vertex)
    vb = _vec(b) - _vec(vertex)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        raise DegenerateGeometryError('angle arm has zero length')

    cosine = float(np.dot(va, vb) / (norm_a * norm_b))
    cosine = float(np.clip(cosine, -1.0, 1.0))
    return float(np.degrees(np.arccos(cosine)))


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def centroid(points: Iterable[Point]) -> Point:
    """Mean of a non-empty collection of points."""
    pts = list(points)
    if not pts:
        raise DegenerateGeometryError('centroid of an empty point set')
    arr = np.array([(p.x, p.y) for p in pts], dtype=np.float64)
    cx, cy = arr.mean(axis=0)
    return Point(float(cx), float(cy))


def ratio(numerator: float, denominator: float) -> float:
    """
    Divide two measurements.

    Raises:
        DivisionByZeroError: If denominator is 0
    """
    if denominator == 0:
        raise DivisionByZeroError(f'ratio {numerator!r} / 0')
    return float(numerator) / float(denominator)


def line_angle(a: Point, b: Point) -> float:
    """
    Signed angle of segment a->b against horizontal, in degrees.

    Image y grows downward, so a positive angle is a clockwise rotation
    as seen on screen.

    Raises:
        DegenerateGeometryError: If a and b coincide
    """
    dx = b.x - a.x
    dy = b.y - a.y
    if dx == 0 and dy == 0:
        raise DegenerateGeometryError('line through coincident points')
    return float(np.degrees(np.arctan2(dy, dx)))


def _unit(a: Point, b: Point) -> np.ndarray:
    direction = _vec(b) - _vec(a)
    length = np.linalg.norm(direction)
    if length == 0:
        raise DegenerateGeometryError('line through coincident points')
    return direction / length


def project(p: Point, a: Point, b: Point) -> float:
    """
    Signed length of the projection of p - a onto the direction a->b.

    Raises:
        DegenerateGeometryError: If a and b coincide
    """
    return float(np.dot(_vec(p) - _vec(a), _unit(a, b)))


def distance_to_line(p: Point, a: Point, b: Point) -> float:
    """
    Perpendicular distance from p to the infinite line through a and b.

    Raises:
        DegenerateGeometryError: If a and b coincide
    """
    direction = _vec(b) - _vec(a)
    length = float(np.hypot(direction[0], direction[1]))
    if length == 0:
        raise DegenerateGeometryError('line through coincident points')
    offset = _vec(p) - _vec(a)
    cross = direction[0] * offset[1] - direction[1] * offset[0]
    return float(abs(cross) / length)
