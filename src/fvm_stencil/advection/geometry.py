# -*- coding: utf-8 -*-
"""
Geometry kernels on the unit sphere and on the plane.

All points are 3-component sequences (x, y, z). On the sphere the routines
expect points on a sphere centred at the origin; `sphere_angle` additionally
expects unit vectors.

Functions:
    sphere_angle: Signed angle at A between the great-circle arcs AB and AC.
    arc_length: Great-circle distance between two points.
    arc_bisect: Midpoint of the great-circle arc between two points.
    plane_angle: Signed angle at A between the segments AB and AC.
    plane_distance: Euclidean distance between two points.
"""

import math
from typing import Sequence, Tuple

import numpy as np

from .errors import GeometryError

Point = Sequence[float]


def _clamp(value: float, lower: float = -1.0, upper: float = 1.0) -> float:
    return max(min(value, upper), lower)


def sphere_angle(a: Point, b: Point, c: Point) -> float:
    """
    Computes the angle at A between the arcs AB and AC on the unit sphere.

    The magnitude follows from the half-angle formula of spherical
    trigonometry applied to the three side arcs. The sign is positive when
    B -> C turns counter-clockwise around A seen from outside the sphere.

    Args:
        a: Vertex of the angle (unit vector).
        b: End point of the first arc (unit vector).
        c: End point of the second arc (unit vector).

    Returns:
        The signed angle in radians, in [-pi, pi].
    """
    ax, ay, az = a
    bx, by, bz = b
    cx, cy, cz = c

    side_a = math.acos(_clamp(bx * cx + by * cy + bz * cz))
    side_b = math.acos(_clamp(ax * cx + ay * cy + az * cz))
    side_c = math.acos(_clamp(ax * bx + ay * by + az * bz))

    abx, aby, abz = bx - ax, by - ay, bz - az
    acx, acy, acz = cx - ax, cy - ay, cz - az

    dx = (aby * acz) - (abz * acy)
    dy = -((abx * acz) - (abz * acx))
    dz = (abx * acy) - (aby * acx)

    s = 0.5 * (side_a + side_b + side_c)
    denom = math.sin(side_b) * math.sin(side_c)
    if denom == 0.0:
        ratio = 0.0
    else:
        ratio = (math.sin(s - side_b) * math.sin(s - side_c)) / denom
    sin_angle = math.sqrt(min(1.0, max(0.0, ratio)))

    angle = 2.0 * math.asin(_clamp(sin_angle))
    if (dx * ax + dy * ay + dz * az) >= 0.0:
        return angle
    return -angle


def arc_length(a: Point, b: Point) -> float:
    """
    Computes the great-circle distance between two points on a sphere.

    The sphere radius is taken from |a|, so the points do not have to be unit
    vectors.
    """
    ax, ay, az = a
    bx, by, bz = b
    r = math.sqrt(ax * ax + ay * ay + az * az)
    chord = math.sqrt((bx - ax) ** 2 + (by - ay) ** 2 + (bz - az) ** 2)
    return r * 2.0 * math.asin(_clamp(chord / (2.0 * r)))


def arc_bisect(a: Point, b: Point) -> Tuple[float, float, float]:
    """
    Returns the point halfway along the great-circle arc from A to B.

    Args:
        a: First end point.
        b: Second end point, on the same sphere as `a`.

    Returns:
        The arc midpoint, on the sphere of radius |a|.

    Raises:
        GeometryError: If A and B are diametrically opposite.
    """
    ax, ay, az = a
    bx, by, bz = b
    r = math.sqrt(ax * ax + ay * ay + az * az)

    cx = 0.5 * (ax + bx)
    cy = 0.5 * (ay + by)
    cz = 0.5 * (az + bz)

    if cx == 0.0 and cy == 0.0 and cz == 0.0:
        raise GeometryError("Arc end points are diametrically opposite.")

    d = math.sqrt(cx * cx + cy * cy + cz * cz)
    return r * cx / d, r * cy / d, r * cz / d


def plane_angle(
    a: Point, b: Point, c: Point, normal: Point = (0.0, 0.0, 1.0)
) -> float:
    """
    Computes the signed angle at A between the segments AB and AC.

    Args:
        a: Vertex of the angle.
        b: End point of the first segment.
        c: End point of the second segment.
        normal: Plane normal; the angle is positive when AB x AC points along it.

    Returns:
        The signed angle in radians, in [-pi, pi].
    """
    ab = np.asarray(b, dtype=float) - np.asarray(a, dtype=float)
    ac = np.asarray(c, dtype=float) - np.asarray(a, dtype=float)
    norms = np.linalg.norm(ab) * np.linalg.norm(ac)
    if norms == 0.0:
        raise GeometryError("Plane angle is undefined for a zero-length segment.")

    angle = math.acos(_clamp(float(np.dot(ab, ac)) / norms))
    if float(np.dot(np.cross(ab, ac), np.asarray(normal, dtype=float))) < 0.0:
        return -angle
    return angle


def plane_distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(b, dtype=float) - np.asarray(a, dtype=float)))
