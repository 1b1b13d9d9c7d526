import io
import math
import os
import tempfile
import unittest
from contextlib import redirect_stdout

import matplotlib

matplotlib.use("Agg")

import numpy as np

from fvm_stencil.polymesh import VoronoiMesh
from fvm_stencil.polymesh.quality import MeshQuality
from common_meshes import cell_ring, create_hex_fixture, create_sphere_fixture


class TestPlanarHexMesh(unittest.TestCase):
    def setUp(self):
        self.mesh, self.cell = create_hex_fixture(8, 6, dc=1.5)

    def test_counts(self):
        self.assertEqual(self.mesh.n_cells, 48)
        self.assertEqual(self.mesh.n_edges, 144)
        self.assertEqual(self.mesh.n_vertices, 96)
        self.assertEqual(self.mesh.max_edges, 6)
        self.assertTrue(np.all(self.mesh.n_edges_on_cell == 6))

    def test_edge_geometry(self):
        np.testing.assert_allclose(self.mesh.dc_edge, 1.5)
        np.testing.assert_allclose(self.mesh.dv_edge, 1.5 / math.sqrt(3.0))
        angles = np.round(self.mesh.angle_edge / (math.pi / 3.0)).astype(int)
        self.assertEqual(set(angles.tolist()), {0, 1, 2})

    def test_cells_on_cell_is_reciprocal(self):
        for cell in range(self.mesh.n_cells):
            for nb in cell_ring(self.mesh, cell):
                self.assertIn(cell, cell_ring(self.mesh, nb))

    def test_defaults(self):
        np.testing.assert_array_equal(self.mesh.cell_global_ids, np.arange(48))
        self.assertTrue(np.all(self.mesh.cell_valid))
        self.assertTrue(self.mesh.is_resident(0))
        self.assertFalse(self.mesh.is_resident(-1))
        self.assertFalse(self.mesh.is_resident(48))

    def test_quality_has_no_issues(self):
        quality = MeshQuality.from_mesh(self.mesh)
        self.assertEqual(quality.connectivity_issues, [])
        self.assertAlmostEqual(quality.min_max_dc_ratio, 1.0)

    def test_periodic_displacement(self):
        d = self.mesh.displacement(self.mesh.cell_coords[7], self.mesh.cell_coords[0])
        np.testing.assert_allclose(d, [1.5, 0.0, 0.0], atol=1e-12)

    def test_invalid_sizes_raise(self):
        from fvm_stencil.meshgen import create_planar_hex_mesh

        with self.assertRaises(ValueError):
            create_planar_hex_mesh(4, 5)
        with self.assertRaises(ValueError):
            create_planar_hex_mesh(2, 4)


class TestIcosahedralMesh(unittest.TestCase):
    def setUp(self):
        self.mesh = create_sphere_fixture(subdivisions=2)

    def test_counts(self):
        self.assertEqual(self.mesh.n_cells, 162)
        self.assertEqual(self.mesh.n_vertices - self.mesh.n_edges + self.mesh.n_cells, 2)
        self.assertEqual(int(np.sum(self.mesh.n_edges_on_cell == 5)), 12)
        self.assertEqual(self.mesh.max_edges, 6)

    def test_every_edge_has_two_cells(self):
        self.assertTrue(np.all(self.mesh.cells_on_edge >= 0))
        self.assertTrue(np.all(self.mesh.dc_edge > 0.0))
        self.assertTrue(np.all(self.mesh.dv_edge > 0.0))

    def test_quality_has_no_issues(self):
        quality = MeshQuality.from_mesh(self.mesh)
        self.assertEqual(quality.connectivity_issues, [])
        self.assertGreater(quality.min_max_dc_ratio, 0.5)

    def test_points_on_sphere(self):
        mesh = create_sphere_fixture(subdivisions=1, radius=3.0)
        np.testing.assert_allclose(np.linalg.norm(mesh.cell_coords, axis=1), 3.0)
        np.testing.assert_allclose(np.linalg.norm(mesh.vertex_coords, axis=1), 3.0)


class TestVoronoiMeshContainer(unittest.TestCase):
    def test_analyze_empty_mesh_raises(self):
        with self.assertRaises(RuntimeError):
            VoronoiMesh().analyze_mesh()

    def test_quality_requires_analysis(self):
        with self.assertRaises(RuntimeError):
            MeshQuality.from_mesh(VoronoiMesh())

    def test_inconsistent_edge_raises(self):
        """An edge listed on a cell must reference that cell."""
        mesh, _ = create_hex_fixture(6, 4)
        cells_on_edge = mesh.cells_on_edge.copy()
        cells_on_edge[0] = cells_on_edge[5]
        with self.assertRaises(ValueError):
            VoronoiMesh.from_arrays(
                mesh.cell_coords,
                mesh.vertex_coords,
                mesh.edges_on_cell,
                cells_on_edge,
                mesh.vertices_on_edge,
                x_period=mesh.x_period,
                y_period=mesh.y_period,
            )

    def test_from_arrays_accepts_jagged_tables(self):
        mesh, _ = create_hex_fixture(6, 4)
        jagged = [list(row) for row in mesh.edges_on_cell]
        rebuilt = VoronoiMesh.from_arrays(
            mesh.cell_coords,
            mesh.vertex_coords,
            jagged,
            mesh.cells_on_edge,
            mesh.vertices_on_edge,
            x_period=mesh.x_period,
            y_period=mesh.y_period,
        )
        np.testing.assert_array_equal(rebuilt.cells_on_cell, mesh.cells_on_cell)
        np.testing.assert_allclose(rebuilt.angle_edge, mesh.angle_edge)

    def test_print_summary(self):
        mesh = create_sphere_fixture(subdivisions=1)
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            mesh.print_summary()
        output = buffer.getvalue()
        self.assertIn("Voronoi Mesh Report", output)
        self.assertIn("Number of Cells:", output)
        self.assertIn("No connectivity issues found.", output)

    def test_plot_writes_file(self):
        mesh, cell = create_hex_fixture(8, 8)
        sphere = create_sphere_fixture(subdivisions=1)
        with tempfile.TemporaryDirectory() as tmp_dir:
            planar_path = os.path.join(tmp_dir, "hex.png")
            with redirect_stdout(io.StringIO()):
                mesh.plot(planar_path, parts=np.arange(mesh.n_cells) % 2, highlight=[cell])
                sphere.plot(os.path.join(tmp_dir, "sphere.png"))
            self.assertTrue(os.path.exists(planar_path))
            self.assertTrue(os.path.exists(os.path.join(tmp_dir, "sphere.png")))


if __name__ == "__main__":
    unittest.main()
