# -*- coding: utf-8 -*-
"""
Per-edge neighbor lists: the set of cells whose values enter an edge flux.

The list of an edge is the union of its two owning cells and their rings,
without duplicates, ordered by global cell id. Ordering by global id makes
the list identical on every partition that can build it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ..polymesh.voronoi_mesh import VoronoiMesh


@dataclass(frozen=True)
class NeighborList:
    """
    Cells contributing to one edge flux.

    Attributes:
        global_ids (np.ndarray): Global cell ids, strictly ascending.
        local_ids (np.ndarray): Local cell indices, parallel to `global_ids`.
    """

    global_ids: np.ndarray
    local_ids: np.ndarray

    def __len__(self) -> int:
        return int(self.global_ids.size)

    def find_slot(self, global_id: int) -> Optional[int]:
        """Returns the position of `global_id` in the list, or None if absent."""
        slot = int(np.searchsorted(self.global_ids, global_id))
        if slot < len(self) and self.global_ids[slot] == global_id:
            return slot
        return None

    @classmethod
    def empty(cls) -> "NeighborList":
        return cls(global_ids=np.array([], dtype=int), local_ids=np.array([], dtype=int))


def build_neighbor_list(mesh: "VoronoiMesh", edge: int) -> NeighborList:
    """
    Builds the neighbor list of one edge.

    Returns an empty list when either owning cell is missing or not
    resident. Ring neighbors that are not resident are left out.
    """
    cell1, cell2 = (int(c) for c in mesh.cells_on_edge[edge])
    if not (mesh.is_resident(cell1) and mesh.is_resident(cell2)):
        return NeighborList.empty()

    cell_set = {cell1, cell2}
    for owner in (cell1, cell2):
        for nb in mesh.cells_on_cell[owner, : mesh.n_edges_on_cell[owner]]:
            if mesh.is_resident(int(nb)):
                cell_set.add(int(nb))

    pairs = sorted((int(mesh.cell_global_ids[c]), c) for c in cell_set)
    table = np.array(pairs, dtype=int).reshape(-1, 2)
    return NeighborList(global_ids=table[:, 0].copy(), local_ids=table[:, 1].copy())


def build_neighbor_lists(mesh: "VoronoiMesh") -> List[NeighborList]:
    """Builds the neighbor list of every edge of `mesh`."""
    return [build_neighbor_list(mesh, edge) for edge in range(mesh.n_edges)]
