# -*- coding: utf-8 -*-
"""
This module defines the VoronoiMesh class, a data structure for representing
unstructured Voronoi meshes on a sphere or on a (optionally periodic) plane.

The layout follows the cell/edge/vertex tables used by finite-volume ocean
and atmosphere models: each cell lists its edges counter-clockwise, each edge
knows its two owning cells and its two end vertices. From this topology the
class derives the cell-to-cell adjacency and the edge geometry (distance
between cell centers, Voronoi edge length and edge normal angle) that the
advection stencil precompute consumes.
"""

import math
from collections import Counter
from typing import List, Optional, Sequence, Union

import numpy as np
import numpy.typing as npt
import matplotlib.pyplot as plt

from ..advection.geometry import arc_length
from ..common.utility import plot_mesh
from .quality import MeshQuality
from .reporting import format_quality_summary

EdgeTable = Union[npt.NDArray[np.int_], Sequence[Sequence[int]]]


class VoronoiMesh:
    """
    A data-centric class for storing unstructured Voronoi meshes.

    Index value -1 marks a missing entity: padding in per-cell tables, or a
    cell that is not part of the locally known mesh.

    Attributes:
        on_a_sphere (bool): True for a spherical mesh, False for a planar one.
        sphere_radius (float): Sphere radius. Unused on a plane.
        x_period (Optional[float]): Period in x of a periodic planar mesh.
        y_period (Optional[float]): Period in y of a periodic planar mesh.
        n_cells (int): Number of cells known to this mesh.
        n_edges (int): Number of edges.
        n_vertices (int): Number of vertices.
        cell_coords (np.ndarray): Cell centers.
            - Shape: `(n_cells, 3)`
        vertex_coords (np.ndarray): Voronoi vertex positions.
            - Shape: `(n_vertices, 3)`
        n_edges_on_cell (np.ndarray): Number of edges of each cell.
            - Shape: `(n_cells,)`
        edges_on_cell (np.ndarray): Edges of each cell, counter-clockwise.
            - Shape: `(n_cells, max_edges)`
        cells_on_cell (np.ndarray): Neighbor across `edges_on_cell[c, i]`.
            - Shape: `(n_cells, max_edges)`
        cells_on_edge (np.ndarray): The two cells sharing each edge.
            - Shape: `(n_edges, 2)`
        vertices_on_edge (np.ndarray): The two end vertices of each edge.
            - Shape: `(n_edges, 2)`
        dc_edge (np.ndarray): Distance between the two cell centers of an edge.
            - Shape: `(n_edges,)`
        dv_edge (np.ndarray): Length of the Voronoi edge between its vertices.
            - Shape: `(n_edges,)`
        angle_edge (np.ndarray): Angle between the cell1 -> cell2 normal and the
            local east (sphere) or x (plane) direction.
            - Shape: `(n_edges,)`
        cell_global_ids (np.ndarray): Partition-independent cell identifiers.
            - Shape: `(n_cells,)`
        cell_valid (np.ndarray): Whether each cell's data is resident locally.
            - Shape: `(n_cells,)`, `dtype`: `bool`
        quality (MeshQuality): Mesh diagnostics, computed on demand.
    """

    def __init__(self) -> None:
        """Initializes the VoronoiMesh instance with empty attributes."""
        # Core Mesh Properties
        self.on_a_sphere: bool = False
        self.sphere_radius: float = 1.0
        self.x_period: Optional[float] = None
        self.y_period: Optional[float] = None
        self.n_cells: int = 0
        self.n_edges: int = 0
        self.n_vertices: int = 0
        self._is_analyzed: bool = False

        # Topology Data (defined)
        self.cell_coords: np.ndarray = np.array([])
        self.vertex_coords: np.ndarray = np.array([])
        self.n_edges_on_cell: np.ndarray = np.array([], dtype=int)
        self.edges_on_cell: np.ndarray = np.array([], dtype=int)
        self.cells_on_edge: np.ndarray = np.array([], dtype=int)
        self.vertices_on_edge: np.ndarray = np.array([], dtype=int)

        # Topology Data (derived)
        self.cells_on_cell: np.ndarray = np.array([], dtype=int)

        # Computed Geometric Properties
        self.dc_edge: np.ndarray = np.array([])
        self.dv_edge: np.ndarray = np.array([])
        self.angle_edge: np.ndarray = np.array([])

        # Decomposition Data
        self.cell_global_ids: np.ndarray = np.array([], dtype=int)
        self.cell_valid: np.ndarray = np.array([], dtype=bool)

        # Quality Metrics
        self.quality: MeshQuality | None = None

    # =========================================================================
    # Public API
    # =========================================================================

    @classmethod
    def from_arrays(
        cls,
        cell_coords: npt.ArrayLike,
        vertex_coords: npt.ArrayLike,
        edges_on_cell: EdgeTable,
        cells_on_edge: npt.ArrayLike,
        vertices_on_edge: npt.ArrayLike,
        on_a_sphere: bool = False,
        sphere_radius: float = 1.0,
        x_period: Optional[float] = None,
        y_period: Optional[float] = None,
    ) -> "VoronoiMesh":
        """
        Creates and analyzes a VoronoiMesh from raw topology tables.

        Args:
            cell_coords: Cell centers, shape `(n_cells, 3)`.
            vertex_coords: Vertex positions, shape `(n_vertices, 3)`.
            edges_on_cell: Per-cell edge lists, either jagged or padded with -1.
                Each list must be ordered counter-clockwise.
            cells_on_edge: Owning cells of each edge, shape `(n_edges, 2)`.
            vertices_on_edge: End vertices of each edge, shape `(n_edges, 2)`.
            on_a_sphere: Whether the mesh lives on a sphere.
            sphere_radius: Sphere radius.
            x_period: Period in x for a periodic planar mesh.
            y_period: Period in y for a periodic planar mesh.

        Returns:
            A new, analyzed VoronoiMesh instance.
        """
        mesh = cls()
        mesh.on_a_sphere = on_a_sphere
        mesh.sphere_radius = float(sphere_radius)
        mesh.x_period = x_period
        mesh.y_period = y_period
        mesh.cell_coords = np.asarray(cell_coords, dtype=float).reshape(-1, 3)
        mesh.vertex_coords = np.asarray(vertex_coords, dtype=float).reshape(-1, 3)
        mesh.edges_on_cell, mesh.n_edges_on_cell = _pad_edge_table(edges_on_cell)
        mesh.cells_on_edge = np.asarray(cells_on_edge, dtype=int).reshape(-1, 2)
        mesh.vertices_on_edge = np.asarray(vertices_on_edge, dtype=int).reshape(-1, 2)
        mesh.n_cells = mesh.cell_coords.shape[0]
        mesh.n_edges = mesh.cells_on_edge.shape[0]
        mesh.n_vertices = mesh.vertex_coords.shape[0]
        mesh.analyze_mesh()
        return mesh

    @property
    def max_edges(self) -> int:
        """Largest number of edges on any cell."""
        return int(self.edges_on_cell.shape[1]) if self.edges_on_cell.ndim == 2 else 0

    def is_resident(self, cell: int) -> bool:
        """True if `cell` is a local index whose data is available locally."""
        return 0 <= cell < self.n_cells and bool(self.cell_valid[cell])

    def edge_global_id(self, edge: int) -> int:
        """Partition-independent identifier of `edge`; the index itself on a global mesh."""
        return int(edge)

    def analyze_mesh(self) -> None:
        """
        Computes all derived topological and geometric properties for the mesh.

        Geometry arrays that were already provided with the right length (for
        example copied from a global mesh into a local one) are kept as is.
        """
        if self.n_cells == 0 or self.n_edges == 0:
            raise RuntimeError(
                "Mesh has no cells or edges. Populate the topology before analyzing."
            )
        if self._is_analyzed:
            return

        # 1. Validate and complete topology
        self._validate_topology()
        self._compute_cells_on_cell()

        # 2. Compute geometric properties
        if self.dc_edge.size != self.n_edges:
            self._compute_dc_edge()
        if self.dv_edge.size != self.n_edges:
            self._compute_dv_edge()
        if self.angle_edge.size != self.n_edges:
            self._compute_angle_edge()

        # 3. Decomposition defaults
        if self.cell_global_ids.size != self.n_cells:
            self.cell_global_ids = np.arange(self.n_cells, dtype=int)
        if self.cell_valid.size != self.n_cells:
            self.cell_valid = np.ones(self.n_cells, dtype=bool)

        self._is_analyzed = True

    def print_summary(self) -> None:
        """Prints a formatted summary report of the mesh analysis."""
        if not self._is_analyzed:
            print("Mesh not analyzed. Run analyze_mesh() first.")
            return

        print("\n" + "=" * 80)
        print(f"{'Voronoi Mesh Report':^80}")
        print("=" * 80)
        self._print_general_info()

        if self.quality is None:
            self.quality = MeshQuality.from_mesh(self)

        print(format_quality_summary(self.quality))
        print("\n" + "=" * 80)

    def plot(
        self,
        filepath: str = "mesh_plot.png",
        parts: np.ndarray | None = None,
        highlight: Sequence[int] | None = None,
    ) -> None:
        """
        Plots the cell centers and cell-to-cell connections and saves the figure.

        Spherical meshes are drawn in longitude/latitude (degrees).

        Args:
            filepath (str): The path to save the plot image.
            parts (np.ndarray, optional): Partition id of each cell, used for
                coloring. Shape: (n_cells,), dtype: int.
            highlight (Sequence[int], optional): Local cell indices to outline,
                e.g. the neighbor list of one edge.
        """
        fig, ax = plt.subplots(figsize=(10, 8))
        plot_mesh(
            ax,
            self.projected_cell_coords(),
            self.cells_on_edge,
            parts=parts,
            highlight=highlight,
            title="Voronoi Mesh",
        )
        plt.savefig(filepath, dpi=150, bbox_inches="tight")
        plt.close(fig)
        print(f"Mesh plot saved to: {filepath}")

    def projected_cell_coords(self) -> npt.NDArray[np.float64]:
        """Cell centers in 2-D: (lon, lat) in degrees on a sphere, (x, y) on a plane."""
        if not self.on_a_sphere:
            return self.cell_coords[:, :2].copy()
        xyz = self.cell_coords / self.sphere_radius
        lat = np.degrees(np.arcsin(np.clip(xyz[:, 2], -1.0, 1.0)))
        lon = np.degrees(np.arctan2(xyz[:, 1], xyz[:, 0]))
        return np.column_stack((lon, lat))

    # =========================================================================
    # Topology and Connectivity Computations
    # =========================================================================

    def _validate_topology(self) -> None:
        """Checks table shapes and index ranges."""
        if self.edges_on_cell.shape[0] != self.n_cells:
            raise ValueError(
                f"edges_on_cell has {self.edges_on_cell.shape[0]} rows for {self.n_cells} cells."
            )
        if self.vertices_on_edge.shape[0] != self.n_edges:
            raise ValueError(
                f"vertices_on_edge has {self.vertices_on_edge.shape[0]} rows for {self.n_edges} edges."
            )
        if np.any(self.cells_on_edge < -1) or np.any(self.cells_on_edge >= self.n_cells):
            raise ValueError("cells_on_edge references cells outside the mesh.")
        if np.any(self.vertices_on_edge < 0) or np.any(
            self.vertices_on_edge >= self.n_vertices
        ):
            raise ValueError("vertices_on_edge references vertices outside the mesh.")
        for cell in range(self.n_cells):
            edges = self.edges_on_cell[cell, : self.n_edges_on_cell[cell]]
            if np.any(edges < 0) or np.any(edges >= self.n_edges):
                raise ValueError(f"Cell {cell} references edges outside the mesh.")

    def _compute_cells_on_cell(self) -> None:
        """Derives the neighbor across each edge of each cell."""
        self.cells_on_cell = -np.ones_like(self.edges_on_cell)
        for cell in range(self.n_cells):
            for i in range(self.n_edges_on_cell[cell]):
                c1, c2 = self.cells_on_edge[self.edges_on_cell[cell, i]]
                if c1 == cell:
                    self.cells_on_cell[cell, i] = c2
                elif c2 == cell:
                    self.cells_on_cell[cell, i] = c1
                else:
                    raise ValueError(
                        f"Edge {self.edges_on_cell[cell, i]} is listed on cell {cell} "
                        "but does not reference it."
                    )

    # =========================================================================
    # Geometric Property Computations
    # =========================================================================

    def displacement(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Planar vector from a to b, using the minimum image on periodic axes."""
        d = b - a
        for axis, period in enumerate((self.x_period, self.y_period)):
            if period:
                d[axis] -= period * round(d[axis] / period)
        return d

    def _compute_dc_edge(self) -> None:
        """Computes the distance between the two cell centers of each edge."""
        self.dc_edge = np.zeros(self.n_edges)
        for edge, (c1, c2) in enumerate(self.cells_on_edge):
            if c1 < 0 or c2 < 0:
                continue
            a, b = self.cell_coords[c1], self.cell_coords[c2]
            if self.on_a_sphere:
                self.dc_edge[edge] = arc_length(a, b)
            else:
                self.dc_edge[edge] = np.linalg.norm(self.displacement(a, b))

    def _compute_dv_edge(self) -> None:
        """Computes the length of each Voronoi edge."""
        self.dv_edge = np.zeros(self.n_edges)
        for edge, (v1, v2) in enumerate(self.vertices_on_edge):
            a, b = self.vertex_coords[v1], self.vertex_coords[v2]
            if self.on_a_sphere:
                self.dv_edge[edge] = arc_length(a, b)
            else:
                self.dv_edge[edge] = np.linalg.norm(self.displacement(a, b))

    def _compute_angle_edge(self) -> None:
        """
        Computes the angle of each edge normal (cell1 -> cell2).

        On a sphere the angle is measured from local east at the arc midpoint
        between the two cell centers, counter-clockwise towards north.
        """
        self.angle_edge = np.zeros(self.n_edges)
        for edge, (c1, c2) in enumerate(self.cells_on_edge):
            if c1 < 0 or c2 < 0:
                continue
            a, b = self.cell_coords[c1], self.cell_coords[c2]
            if not self.on_a_sphere:
                d = self.displacement(a, b)
                self.angle_edge[edge] = math.atan2(d[1], d[0])
                continue

            mid = (a + b) / np.linalg.norm(a + b)
            normal = b - a
            normal -= np.dot(normal, mid) * mid
            east = np.array([-mid[1], mid[0], 0.0])
            east_norm = np.linalg.norm(east)
            east = east / east_norm if east_norm > 1e-12 else np.array([1.0, 0.0, 0.0])
            north = np.cross(mid, east)
            self.angle_edge[edge] = math.atan2(
                float(np.dot(normal, north)), float(np.dot(normal, east))
            )

    # =========================================================================
    # Helper and Utility Methods
    # =========================================================================

    def _print_general_info(self) -> None:
        """Prints general information about the mesh."""
        print(f"\n{'--- General Information ---':^80}\n")
        print(f"  {'Geometry:':<25} {'sphere' if self.on_a_sphere else 'plane'}")
        if self.on_a_sphere:
            print(f"  {'Sphere Radius:':<25} {self.sphere_radius:.6e}")
        print(f"  {'Number of Cells:':<25} {self.n_cells}")
        print(f"  {'Number of Edges:':<25} {self.n_edges}")
        print(f"  {'Number of Vertices:':<25} {self.n_vertices}")
        print(f"  {'Max Edges per Cell:':<25} {self.max_edges}")
        degree_counts = Counter(int(n) for n in self.n_edges_on_cell)
        print("  Cell Degree Distribution:")
        for degree, count in sorted(degree_counts.items()):
            print(f"    - {str(degree) + ' edges:':<20} {count}")


def _pad_edge_table(edges_on_cell: EdgeTable) -> tuple[np.ndarray, np.ndarray]:
    """Converts a jagged or padded per-cell edge table into a padded array."""
    if isinstance(edges_on_cell, np.ndarray) and edges_on_cell.ndim == 2:
        table = edges_on_cell.astype(int)
        n_edges_on_cell = np.sum(table >= 0, axis=1).astype(int)
        return table, n_edges_on_cell

    rows: List[List[int]] = [[int(e) for e in row if e >= 0] for row in edges_on_cell]
    max_edges = max((len(r) for r in rows), default=0)
    table = -np.ones((len(rows), max_edges), dtype=int)
    for i, row in enumerate(rows):
        table[i, : len(row)] = row
    return table, np.array([len(r) for r in rows], dtype=int)
