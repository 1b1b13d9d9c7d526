# -*- coding: utf-8 -*-
"""
Mesh partitioning tools.

This module splits the cells of a Voronoi mesh into subdomains, one per
process. Each subdomain is later extended by halo layers so that the
advection stencils of its owned cells can be built locally.

Key Features
------------
- METIS graph partitioning on the cell adjacency (optional dependency).
- A hierarchical coordinate bisection method that needs no extra library.
- Optional cell weights to balance the partitioning.

Functions
---------
:py:func:`partition_mesh`:
    Partitions a mesh into a specified number of parts.
:py:func:`print_partition_summary`:
    Prints a summary of the cell distribution across partitions.
"""

from __future__ import annotations

import warnings
from typing import List, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .voronoi_mesh import VoronoiMesh

try:
    import metis
except ImportError:
    metis = None


def partition_mesh(
    mesh: VoronoiMesh,
    n_parts: int,
    method: str = "metis",
    cell_weights: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Partitions mesh cells into a specified number of parts.

    Args:
        mesh: The analyzed mesh to partition.
        n_parts: The number of partitions.
        method: The partitioning method ('metis' or 'hierarchical').
        cell_weights: Optional weights for each cell.

    Returns:
        A numpy array of partition IDs for each cell.
    """
    if n_parts <= 1:
        return np.zeros(mesh.n_cells, dtype=int)

    if method == "metis":
        return _partition_with_metis(mesh, n_parts, cell_weights)
    elif method == "hierarchical":
        return _partition_with_hierarchical(mesh, n_parts, cell_weights)
    else:
        raise NotImplementedError(f"Partition method '{method}' not implemented")


def _get_adjacency(mesh: VoronoiMesh) -> List[List[int]]:
    """Builds the cell adjacency list from `cells_on_cell`."""
    adjacency: List[List[int]] = []
    for i in range(mesh.n_cells):
        ring = mesh.cells_on_cell[i, : mesh.n_edges_on_cell[i]]
        neighs = {int(nb) for nb in ring if nb != -1}
        neighs.discard(i)
        adjacency.append(sorted(neighs))
    return adjacency


def _partition_with_metis(
    mesh: VoronoiMesh, n_parts: int, cell_weights: Optional[np.ndarray]
) -> np.ndarray:
    """Partitions the mesh using the METIS library."""
    if metis is None:
        raise ImportError(
            "METIS python binding not available; install the 'metis' extra "
            "or use method='hierarchical'."
        )

    adjacency = _get_adjacency(mesh)
    try:
        graph = metis.adjlist_to_metis(
            adjacency,
            nodew=cell_weights.astype(int).tolist() if cell_weights is not None else None,
        )
        _, parts = metis.part_graph(graph, nparts=n_parts, recursive=True)
        return np.array(parts, dtype=int)
    except Exception as ex:
        raise RuntimeError(f"METIS partitioning failed: {ex}") from ex


def _partition_with_hierarchical(
    mesh: VoronoiMesh, n_parts: int, cell_weights: Optional[np.ndarray]
) -> np.ndarray:
    """Partitions the mesh using a sequential coordinate bisection method."""
    is_power_of_two = (n_parts > 0) and (n_parts & (n_parts - 1) == 0)
    if not is_power_of_two:
        warnings.warn(
            f"The 'hierarchical' method works best with a power-of-two number of partitions. "
            f"Provided n_parts={n_parts} may result in uneven partitions."
        )

    centers = mesh.cell_coords
    weights = cell_weights if cell_weights is not None else np.ones(mesh.n_cells)
    parts = np.zeros(mesh.n_cells, dtype=int)

    # Bisect the largest partition until n_parts is reached.
    for i in range(1, n_parts):
        part_counts = np.bincount(parts)
        p_to_split = np.argmax(part_counts)
        idxs_to_split = np.where(parts == p_to_split)[0]

        if idxs_to_split.size < 2:
            continue

        # Split along the longest side of the bounding box of the cell centers.
        pts = centers[idxs_to_split]
        axis = int(np.argmax(pts.max(axis=0) - pts.min(axis=0)))
        order = np.argsort(pts[:, axis], kind="stable")

        w = weights[idxs_to_split][order]
        cum_w = np.cumsum(w)
        total_w = cum_w[-1]

        split_idx = len(order) // 2
        if total_w > 0:
            split_idx = int(np.searchsorted(cum_w, total_w / 2.0))
        if split_idx == 0 or split_idx == len(order):
            split_idx = len(order) // 2

        right_indices = idxs_to_split[order[split_idx:]]
        parts[right_indices] = i

    return parts


def print_partition_summary(parts: np.ndarray) -> None:
    """Prints a summary of the cell distribution across partitions."""
    if parts.size == 0:
        print("--- Partition Summary ---")
        print("No partitions found.")
        return

    n_parts = int(np.max(parts) + 1)
    counts = np.bincount(parts, minlength=n_parts)

    print("--- Partition Summary ---")
    print(f"Number of partitions: {n_parts}")
    for p, count in enumerate(counts):
        print(f"  Partition {p}: {count} cells")
