# -*- coding: utf-8 -*-
"""
Computes and stores quality metrics for a VoronoiMesh object.

The metrics target what the least-squares stencil fit relies on: reasonably
uniform edge lengths, rings with enough neighbors for a quadratic fit and a
consistent counter-clockwise ordering of each cell's edges.

Classes:
    MeshQuality: A class for computing and storing mesh quality metrics.
"""
from __future__ import annotations
from typing import List, TYPE_CHECKING
from dataclasses import dataclass
import numpy as np

from ..advection.geometry import sphere_angle

if TYPE_CHECKING:
    from .voronoi_mesh import VoronoiMesh

# --- Constants for magic numbers ---
GEOMETRY_TOLERANCE = 1e-12
MIN_RING_DEGREE = 5  # cell + 5 neighbors = 6 samples for 6 quadratic terms


@dataclass(frozen=True)
class MeshQuality:
    """
    Stores mesh quality metrics for a VoronoiMesh object.

    Instances of this class are created via the `from_mesh` class method.

    Attributes:
        min_max_dc_ratio (float): Ratio of the shortest to the longest
            cell-center distance.
        dc_edge_values (np.ndarray): Cell-center distance of each interior edge.
        dv_edge_values (np.ndarray): Voronoi edge length of each edge.
        cell_degree_values (np.ndarray): Number of edges on each cell.
        connectivity_issues (List[str]): Descriptions of any topological
            issues found in the mesh.
    """

    min_max_dc_ratio: float
    dc_edge_values: np.ndarray
    dv_edge_values: np.ndarray
    cell_degree_values: np.ndarray
    connectivity_issues: List[str]

    @classmethod
    def from_mesh(cls, mesh: "VoronoiMesh") -> "MeshQuality":
        """
        Computes all mesh quality metrics from a VoronoiMesh and returns a new instance.
        """
        if not mesh._is_analyzed:
            raise RuntimeError("Mesh must be analyzed before computing quality.")

        interior = np.all(mesh.cells_on_edge >= 0, axis=1)
        dc_values = mesh.dc_edge[interior]
        max_dc = np.max(dc_values) if dc_values.size else 0.0
        ratio = np.min(dc_values) / max_dc if max_dc > GEOMETRY_TOLERANCE else 0.0

        return cls(
            min_max_dc_ratio=float(ratio),
            dc_edge_values=dc_values,
            dv_edge_values=mesh.dv_edge.copy(),
            cell_degree_values=mesh.n_edges_on_cell.astype(float),
            connectivity_issues=cls._check_connectivity(mesh),
        )

    @staticmethod
    def _check_connectivity(mesh: "VoronoiMesh") -> List[str]:
        """Checks neighbor reciprocity, ring sizes and ring orientation."""
        issues = []
        n_low_degree = int(np.sum(mesh.n_edges_on_cell < MIN_RING_DEGREE))
        if n_low_degree:
            issues.append(
                f"Found {n_low_degree} cells with fewer than {MIN_RING_DEGREE} neighbors."
            )

        non_reciprocal = 0
        duplicated = 0
        clockwise = 0
        for cell in range(mesh.n_cells):
            ring = mesh.cells_on_cell[cell, : mesh.n_edges_on_cell[cell]]
            known = ring[ring >= 0]
            if len(set(known.tolist())) < known.size:
                duplicated += 1
            for nb in known:
                if cell not in mesh.cells_on_cell[nb, : mesh.n_edges_on_cell[nb]]:
                    non_reciprocal += 1
                    break
            if known.size == ring.size and not MeshQuality._is_counter_clockwise(
                mesh, cell, ring
            ):
                clockwise += 1

        if non_reciprocal:
            issues.append(f"Found {non_reciprocal} cells with non-reciprocal neighbors.")
        if duplicated:
            issues.append(f"Found {duplicated} cells listing the same neighbor twice.")
        if clockwise:
            issues.append(f"Found {clockwise} cells whose ring is not counter-clockwise.")
        return issues

    @staticmethod
    def _is_counter_clockwise(
        mesh: "VoronoiMesh", cell: int, ring: np.ndarray
    ) -> bool:
        """True if every consecutive neighbor pair turns counter-clockwise."""
        n = ring.size
        if mesh.on_a_sphere:
            center = mesh.cell_coords[cell] / mesh.sphere_radius
            points = mesh.cell_coords[ring] / mesh.sphere_radius
            return all(
                sphere_angle(center, points[i], points[(i + 1) % n]) > 0.0
                for i in range(n)
            )

        center = mesh.cell_coords[cell]
        vectors = [mesh.displacement(center, mesh.cell_coords[nb]) for nb in ring]
        return all(
            vectors[i][0] * vectors[(i + 1) % n][1]
            - vectors[i][1] * vectors[(i + 1) % n][0]
            > 0.0
            for i in range(n)
        )
