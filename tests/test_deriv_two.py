import math
import unittest

import numpy as np

from fvm_stencil.advection.deriv_two import (
    apply_deriv_two,
    gather_stencil_cells,
    initialize_deriv_two,
    local_tangent_coordinates,
    reference_angle,
)
from fvm_stencil.advection.errors import (
    DegenerateStencilError,
    ErrorKind,
    UnsupportedOrderError,
)
from common_meshes import (
    cell_edges,
    cell_ring,
    create_hex_fixture,
    create_quad_fixture,
    create_sphere_fixture,
    side_of,
)


class TestPlanarDerivTwo(unittest.TestCase):
    def setUp(self):
        """Sets up an 8x8 periodic hexagon mesh."""
        self.mesh, self.cell = create_hex_fixture(8, 8, dc=0.5)
        self.stencils = initialize_deriv_two(self.mesh)

    def test_shape_and_all_cells_fitted(self):
        self.assertEqual(
            self.stencils.deriv_two.shape, (self.mesh.n_edges, 2, self.mesh.max_edges + 1)
        )
        self.assertTrue(np.all(self.stencils.fitted_cells))

    def test_quadratic_fields_are_exact(self):
        """Second derivatives of x^2, xy and y^2 match their closed forms."""
        x = self.mesh.cell_coords[:, 0]
        y = self.mesh.cell_coords[:, 1]
        for edge in cell_edges(self.mesh, self.cell):
            side = side_of(self.mesh, edge, self.cell)
            theta = self.mesh.angle_edge[edge]
            cases = [
                (x**2, 2.0 * math.cos(theta) ** 2),
                (x * y, 2.0 * math.cos(theta) * math.sin(theta)),
                (y**2, 2.0 * math.sin(theta) ** 2),
            ]
            for field, expected in cases:
                value = apply_deriv_two(self.stencils, self.mesh, field, edge, side)
                self.assertAlmostEqual(value, expected, places=9)

    def test_linear_field_has_zero_second_derivative(self):
        field = 3.0 + 2.0 * self.mesh.cell_coords[:, 0] - self.mesh.cell_coords[:, 1]
        for edge in cell_edges(self.mesh, self.cell):
            side = side_of(self.mesh, edge, self.cell)
            value = apply_deriv_two(self.stencils, self.mesh, field, edge, side)
            self.assertAlmostEqual(value, 0.0, places=9)

    def test_local_coordinates_follow_edge_angles(self):
        stencil = gather_stencil_cells(self.mesh, self.cell)
        xp, yp, thetat = local_tangent_coordinates(self.mesh, self.cell, stencil)
        np.testing.assert_allclose(np.hypot(xp, yp), 0.5)
        expected = np.arange(6) * math.pi / 3.0
        np.testing.assert_allclose(np.mod(thetat, 2 * math.pi), expected, atol=1e-12)

    def test_unsupported_order_raises(self):
        for order in (3, 4):
            with self.assertRaises(UnsupportedOrderError) as ctx:
                initialize_deriv_two(self.mesh, polynomial_order=order)
            self.assertEqual(ctx.exception.kind, ErrorKind.UNSUPPORTED_ORDER)

    def test_second_ring_is_gathered_without_duplicates(self):
        stencil = gather_stencil_cells(self.mesh, self.cell, polynomial_order=3)
        self.assertEqual(len(stencil), 19)
        self.assertEqual(len(set(stencil)), 19)
        self.assertEqual(stencil[:7], [self.cell] + cell_ring(self.mesh, self.cell))


class TestIncompleteStencils(unittest.TestCase):
    def test_invalid_cell_skips_its_ring(self):
        """Cells whose ring reaches an invalid cell are skipped and leave zeros."""
        mesh, cell = create_hex_fixture(8, 8)
        mesh.cell_valid[cell] = False
        stencils = initialize_deriv_two(mesh)

        skipped = [cell] + cell_ring(mesh, cell)
        self.assertFalse(np.any(stencils.fitted_cells[skipped]))
        self.assertEqual(stencils.n_fitted_cells, mesh.n_cells - 7)
        for c in skipped:
            self.assertIsNone(gather_stencil_cells(mesh, c))
            for edge in cell_edges(mesh, c):
                np.testing.assert_array_equal(
                    stencils.deriv_two[edge, side_of(mesh, edge, c)], 0.0
                )

    def test_four_neighbor_ring_is_degenerate(self):
        """A complete ring of four neighbors cannot carry a quadratic fit."""
        mesh = create_quad_fixture(4, 4, first_global_id=1000)
        with self.assertRaises(DegenerateStencilError) as ctx:
            initialize_deriv_two(mesh)
        self.assertEqual(ctx.exception.kind, ErrorKind.DEGENERATE_STENCIL)
        self.assertEqual(ctx.exception.entity_id, 1000)
        self.assertIn("(entity 1000)", str(ctx.exception))


class TestSphericalDerivTwo(unittest.TestCase):
    def setUp(self):
        self.mesh = create_sphere_fixture(subdivisions=2)
        self.stencils = initialize_deriv_two(self.mesh)

    def test_pole_cell_exists(self):
        self.assertEqual(self.mesh.cell_coords[0, 2] / self.mesh.sphere_radius, 1.0)

    def test_reference_angle_at_pole(self):
        """The reference angle at the pole is fixed to pi/2."""
        center = self.mesh.cell_coords[0]
        first = self.mesh.cell_coords[self.mesh.cells_on_cell[0, 0]]
        self.assertEqual(reference_angle(center, first), math.pi / 2.0)

    def test_reference_angle_towards_north(self):
        first = np.array([1.0, 0.0, 0.1])
        first /= np.linalg.norm(first)
        self.assertAlmostEqual(
            reference_angle((1.0, 0.0, 0.0), first), math.pi / 2.0, places=6
        )

    def test_all_cells_fitted_and_finite(self):
        self.assertTrue(np.all(self.stencils.fitted_cells))
        self.assertTrue(np.all(np.isfinite(self.stencils.deriv_two)))

    def test_constant_field_has_zero_second_derivative(self):
        sums = np.sum(self.stencils.deriv_two, axis=2)
        scale = np.max(np.abs(self.stencils.deriv_two))
        self.assertLess(np.max(np.abs(sums)), 1e-10 * scale)

    def test_pentagon_slots_beyond_ring_are_zero(self):
        pentagons = np.where(self.mesh.n_edges_on_cell == 5)[0]
        self.assertEqual(pentagons.size, 12)
        for cell in pentagons:
            for edge in cell_edges(self.mesh, cell):
                side = side_of(self.mesh, edge, cell)
                self.assertEqual(self.stencils.deriv_two[edge, side, 6], 0.0)

    def test_larger_radius_scales_weights(self):
        """Weights are second derivatives, so they scale with 1 / R^2."""
        scaled = initialize_deriv_two(create_sphere_fixture(subdivisions=2, radius=2.0))
        np.testing.assert_allclose(
            scaled.deriv_two, self.stencils.deriv_two / 4.0, rtol=1e-8, atol=1e-12
        )


if __name__ == "__main__":
    unittest.main()
