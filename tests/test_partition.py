import io
import unittest
from contextlib import redirect_stdout

import numpy as np

from fvm_stencil.polymesh import partition as partition_module
from fvm_stencil.polymesh.partition import partition_mesh, print_partition_summary
from common_meshes import create_hex_fixture, create_sphere_fixture


class TestPartition(unittest.TestCase):
    def setUp(self):
        self.mesh = create_sphere_fixture(subdivisions=2)

    def test_single_part_is_all_zeros(self):
        parts = partition_mesh(self.mesh, 1)
        np.testing.assert_array_equal(parts, np.zeros(self.mesh.n_cells, dtype=int))

    def test_hierarchical_balances_cells(self):
        parts = partition_mesh(self.mesh, 4, method="hierarchical")
        self.assertEqual(parts.shape, (self.mesh.n_cells,))
        counts = np.bincount(parts, minlength=4)
        self.assertEqual(set(parts.tolist()), {0, 1, 2, 3})
        self.assertLessEqual(counts.max() - counts.min(), 4)

    def test_hierarchical_warns_for_non_power_of_two(self):
        mesh, _ = create_hex_fixture(8, 8)
        with self.assertWarns(UserWarning):
            parts = partition_mesh(mesh, 3, method="hierarchical")
        self.assertEqual(set(parts.tolist()), {0, 1, 2})

    def test_cell_weights_shift_the_split(self):
        mesh, _ = create_hex_fixture(8, 8)
        weights = np.ones(mesh.n_cells)
        weights[mesh.cell_coords[:, 0] < 2.0] = 10.0
        parts = partition_mesh(mesh, 2, method="hierarchical", cell_weights=weights)
        unweighted = partition_mesh(mesh, 2, method="hierarchical")
        self.assertNotEqual(np.sum(parts == 0), np.sum(unweighted == 0))

    def test_unknown_method_raises(self):
        with self.assertRaises(NotImplementedError):
            partition_mesh(self.mesh, 2, method="random")

    @unittest.skipIf(partition_module.metis is None, "METIS binding not installed")
    def test_metis_covers_all_cells(self):
        parts = partition_mesh(self.mesh, 4, method="metis")
        self.assertEqual(parts.shape, (self.mesh.n_cells,))
        self.assertEqual(set(parts.tolist()), {0, 1, 2, 3})

    @unittest.skipIf(partition_module.metis is not None, "METIS binding installed")
    def test_metis_missing_raises_import_error(self):
        with self.assertRaises(ImportError):
            partition_mesh(self.mesh, 2, method="metis")

    def test_print_partition_summary(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_partition_summary(np.array([0, 0, 1, 2, 2, 2]))
            print_partition_summary(np.array([], dtype=int))
        output = buffer.getvalue()
        self.assertIn("Number of partitions: 3", output)
        self.assertIn("Partition 2: 3 cells", output)
        self.assertIn("No partitions found.", output)


if __name__ == "__main__":
    unittest.main()
