# -*- coding: utf-8 -*-
"""
Tools for creating local meshes in a distributed environment.

A `LocalVoronoiMesh` is the portion of a global Voronoi mesh known to a
single process: the cells it owns followed by one or more layers of halo
cells. Every local cell keeps its global id, so that stencils built on any
partition can be ordered the same way.

Classes:
    LocalVoronoiMesh: Represents the mesh for a single partition.
"""

from typing import Any, Dict, List, Tuple

import numpy as np
import numpy.typing as npt

from .voronoi_mesh import VoronoiMesh


def _remap(global_table: npt.NDArray[np.int_], g2l_map: Dict[int, int]) -> np.ndarray:
    """
    Remaps a table of global indices to local ones.

    Entries equal to -1, or whose global index is not in `g2l_map`, become -1.
    """
    local_table = -np.ones_like(global_table)
    for idx, g in np.ndenumerate(global_table):
        if g >= 0:
            local_table[idx] = g2l_map.get(int(g), -1)
    return local_table


def _initialize_cell_maps(
    halo_info: Dict[str, List[int]],
) -> Tuple[npt.NDArray[np.int_], Dict[int, int]]:
    """
    Initializes local-to-global and global-to-local cell maps.

    Args:
        halo_info: A dictionary containing "owned_cells" and "halo_cells"
                   lists of global cell indices.

    Returns:
        A tuple containing:
        - l2g_cells: An array mapping local cell indices to global cell indices.
        - g2l_cells: A dictionary mapping global cell indices to local cell indices.
    """
    if not halo_info.get("owned_cells"):
        raise ValueError("halo_info must contain a non-empty 'owned_cells' list.")

    l2g_cells = np.array(
        list(halo_info["owned_cells"]) + list(halo_info.get("halo_cells", [])),
        dtype=int,
    )
    g2l_cells = {int(g): l for l, g in enumerate(l2g_cells)}
    if len(g2l_cells) != l2g_cells.size:
        raise ValueError("owned and halo cells must be disjoint and unique.")
    return l2g_cells, g2l_cells


def _collect_edges_and_vertices(
    global_mesh: VoronoiMesh, l2g_cells: npt.NDArray[np.int_]
) -> Tuple[npt.NDArray[np.int_], npt.NDArray[np.int_]]:
    """Returns the sorted global edges touching local cells and their vertices."""
    edges = set()
    for g in l2g_cells:
        edges.update(
            int(e) for e in global_mesh.edges_on_cell[g, : global_mesh.n_edges_on_cell[g]]
        )
    l2g_edges = np.array(sorted(edges), dtype=int)
    l2g_vertices = np.unique(global_mesh.vertices_on_edge[l2g_edges].ravel())
    return l2g_edges, l2g_vertices


class LocalVoronoiMesh(VoronoiMesh):
    """
    Represents the mesh for a single partition in a distributed setup.

    Local cells are ordered owned first, then halo cells layer by layer.
    Neighbors that fall outside the local cell set appear as -1 in
    `cells_on_cell` and `cells_on_edge`.

    Attributes:
        rank (int): The rank of the partition this mesh belongs to.
        num_owned_cells (int): The number of cells owned by this partition.
        num_halo_cells (int): The number of halo cells.
        halo_layer (npt.NDArray[np.int_]): Halo layer of each local cell
            (0 for owned cells).
        l2g_cells (npt.NDArray[np.int_]): Map from local to global cell indices.
        g2l_cells (Dict[int, int]): Map from global to local cell indices.
        l2g_edges (npt.NDArray[np.int_]): Map from local to global edge indices.
        l2g_vertices (npt.NDArray[np.int_]): Map from local to global vertex indices.
    """

    def __init__(
        self,
        rank: int,
        num_owned_cells: int,
        num_halo_cells: int,
        l2g_cells: npt.NDArray[np.int_],
        g2l_cells: Dict[int, int],
    ):
        super().__init__()
        if rank < 0:
            raise ValueError("Rank must be a non-negative integer.")
        if num_owned_cells <= 0:
            raise ValueError("Number of owned cells must be positive.")

        self.rank = rank
        self.num_owned_cells = num_owned_cells
        self.num_halo_cells = num_halo_cells
        self.l2g_cells = l2g_cells
        self.g2l_cells = g2l_cells
        self.halo_layer = np.zeros(l2g_cells.size, dtype=int)
        self.l2g_edges = np.array([], dtype=int)
        self.l2g_vertices = np.array([], dtype=int)

    def _build_voronoi_mesh_data(self, global_mesh: VoronoiMesh) -> None:
        """
        Populates the local topology and copies the global edge geometry.

        Args:
            global_mesh: The global VoronoiMesh from which to draw data.
        """
        self.l2g_edges, self.l2g_vertices = _collect_edges_and_vertices(
            global_mesh, self.l2g_cells
        )
        g2l_edges = {int(g): l for l, g in enumerate(self.l2g_edges)}
        g2l_vertices = {int(g): l for l, g in enumerate(self.l2g_vertices)}

        self.on_a_sphere = global_mesh.on_a_sphere
        self.sphere_radius = global_mesh.sphere_radius
        self.x_period = global_mesh.x_period
        self.y_period = global_mesh.y_period

        self.cell_coords = global_mesh.cell_coords[self.l2g_cells]
        self.vertex_coords = global_mesh.vertex_coords[self.l2g_vertices]
        self.n_edges_on_cell = global_mesh.n_edges_on_cell[self.l2g_cells]
        self.edges_on_cell = _remap(global_mesh.edges_on_cell[self.l2g_cells], g2l_edges)
        self.cells_on_edge = _remap(global_mesh.cells_on_edge[self.l2g_edges], self.g2l_cells)
        self.vertices_on_edge = _remap(
            global_mesh.vertices_on_edge[self.l2g_edges], g2l_vertices
        )

        # Edge geometry needs both cells, some of which are not local.
        self.dc_edge = global_mesh.dc_edge[self.l2g_edges]
        self.dv_edge = global_mesh.dv_edge[self.l2g_edges]
        self.angle_edge = global_mesh.angle_edge[self.l2g_edges]

        self.cell_global_ids = global_mesh.cell_global_ids[self.l2g_cells]
        self.cell_valid = np.ones(self.l2g_cells.size, dtype=bool)

        self.n_cells = self.l2g_cells.size
        self.n_edges = self.l2g_edges.size
        self.n_vertices = self.l2g_vertices.size

    @classmethod
    def from_global_mesh(
        cls,
        global_mesh: VoronoiMesh,
        halo_info: Dict[str, Any],
        rank: int,
    ) -> "LocalVoronoiMesh":
        """
        Factory method to construct a LocalVoronoiMesh for a specific partition.

        Args:
            global_mesh: The complete, analyzed mesh.
            halo_info: A dictionary with "owned_cells", "halo_cells" and
                "halo_layer" entries for this rank (global indices).
            rank: The ID of the partition for which to create the local mesh.

        Returns:
            A new, analyzed LocalVoronoiMesh instance for the specified rank.

        Raises:
            ValueError: If the global mesh has not been analyzed or if halo
                        information is incomplete.
        """
        if not global_mesh._is_analyzed:
            raise ValueError("Mesh must be analyzed before creating a LocalVoronoiMesh.")

        l2g_cells, g2l_cells = _initialize_cell_maps(halo_info)
        num_owned = len(halo_info["owned_cells"])
        local_mesh = cls(
            rank=rank,
            num_owned_cells=num_owned,
            num_halo_cells=l2g_cells.size - num_owned,
            l2g_cells=l2g_cells,
            g2l_cells=g2l_cells,
        )
        local_mesh.halo_layer[num_owned:] = halo_info.get(
            "halo_layer", np.ones(l2g_cells.size - num_owned, dtype=int)
        )

        local_mesh._build_voronoi_mesh_data(global_mesh)
        local_mesh.analyze_mesh()
        return local_mesh

    def edge_global_id(self, edge: int) -> int:
        """Global index of local `edge`."""
        return int(self.l2g_edges[edge])

    def owned_cell_mask(self) -> npt.NDArray[np.bool_]:
        """Boolean mask that is True for owned (non-halo) local cells."""
        mask = np.zeros(self.n_cells, dtype=bool)
        mask[: self.num_owned_cells] = True
        return mask

    def plot(self, filepath: str = "mesh_plot.png", parts=None, highlight=None) -> None:
        """Plots the local mesh, coloring owned cells and each halo layer apart."""
        super().plot(
            filepath,
            parts=self.halo_layer if parts is None else parts,
            highlight=highlight,
        )
