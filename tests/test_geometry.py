import math
import unittest

import numpy as np

from fvm_stencil.advection.errors import ErrorKind, GeometryError
from fvm_stencil.advection.geometry import (
    arc_bisect,
    arc_length,
    plane_angle,
    plane_distance,
    sphere_angle,
)


class TestSphereAngle(unittest.TestCase):
    def setUp(self):
        self.north = (0.0, 0.0, 1.0)
        self.x_axis = (1.0, 0.0, 0.0)
        self.y_axis = (0.0, 1.0, 0.0)

    def test_right_angle_at_pole(self):
        """Arcs from the pole to two orthogonal meridians meet at a right angle."""
        angle = sphere_angle(self.north, self.x_axis, self.y_axis)
        self.assertAlmostEqual(angle, math.pi / 2.0, places=12)

    def test_sign_follows_orientation(self):
        """Swapping the arcs flips the sign of the angle."""
        ccw = sphere_angle(self.north, self.x_axis, self.y_axis)
        cw = sphere_angle(self.north, self.y_axis, self.x_axis)
        self.assertAlmostEqual(ccw, -cw, places=12)
        self.assertGreater(ccw, 0.0)

    def test_coincident_points_give_zero(self):
        """A zero-length arc yields a zero angle instead of a domain error."""
        self.assertEqual(sphere_angle(self.north, self.north, self.x_axis), 0.0)

    def test_small_triangle_matches_planar_angle(self):
        """For a tiny triangle the spherical angle approaches the planar one."""
        eps = 1e-4
        a = np.array([1.0, 0.0, 0.0])
        b = np.array([1.0, eps, 0.0])
        c = np.array([1.0, eps, eps])
        b /= np.linalg.norm(b)
        c /= np.linalg.norm(c)
        self.assertAlmostEqual(sphere_angle(a, b, c), math.pi / 4.0, places=4)


class TestArcs(unittest.TestCase):
    def test_arc_length_quarter_circle(self):
        self.assertAlmostEqual(arc_length((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)), math.pi / 2.0)

    def test_arc_length_scales_with_radius(self):
        self.assertAlmostEqual(arc_length((2.0, 0.0, 0.0), (0.0, 2.0, 0.0)), math.pi)

    def test_arc_bisect_midpoint(self):
        mid = arc_bisect((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        np.testing.assert_allclose(mid, (math.sqrt(0.5), math.sqrt(0.5), 0.0))

    def test_arc_bisect_keeps_radius(self):
        mid = arc_bisect((0.0, 0.0, 3.0), (3.0, 0.0, 0.0))
        self.assertAlmostEqual(np.linalg.norm(mid), 3.0)

    def test_arc_bisect_antipodal_raises(self):
        with self.assertRaises(GeometryError) as ctx:
            arc_bisect((1.0, 0.0, 0.0), (-1.0, 0.0, 0.0))
        self.assertEqual(ctx.exception.kind, ErrorKind.GEOMETRY)


class TestPlaneGeometry(unittest.TestCase):
    def test_plane_angle_signed(self):
        origin = (0.0, 0.0, 0.0)
        self.assertAlmostEqual(
            plane_angle(origin, (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)), math.pi / 2.0
        )
        self.assertAlmostEqual(
            plane_angle(origin, (0.0, 1.0, 0.0), (1.0, 0.0, 0.0)), -math.pi / 2.0
        )

    def test_plane_angle_zero_length_raises(self):
        with self.assertRaises(GeometryError):
            plane_angle((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))

    def test_plane_distance(self):
        self.assertEqual(plane_distance((0.0, 0.0, 0.0), (3.0, 4.0, 0.0)), 5.0)


if __name__ == "__main__":
    unittest.main()
