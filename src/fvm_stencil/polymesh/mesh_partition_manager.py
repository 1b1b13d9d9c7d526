# -*- coding: utf-8 -*-
"""
A manager for partitioning meshes and creating local mesh instances.

This module provides the `MeshPartitionManager` class, which takes a global
`VoronoiMesh`, partitions it, grows halo layers around each part and creates
one `LocalVoronoiMesh` per part.
"""

from typing import Any, Dict, List, Optional

import numpy as np
import numpy.typing as npt

from .voronoi_mesh import VoronoiMesh
from .local_mesh import LocalVoronoiMesh
from .partition import partition_mesh, print_partition_summary


class MeshPartitionManager:
    """
    Manages the partitioning of a global mesh and creation of local meshes.
    This class is designed as a stateless manager, providing class methods
    to perform partitioning and mesh creation tasks.
    """

    @staticmethod
    def _compute_halo_layers(
        global_mesh: VoronoiMesh,
        cell_partitions: npt.NDArray[np.int_],
        n_halo_layers: int,
    ) -> Dict[int, Dict[str, Any]]:
        """
        Determines the owned and halo cells of every partition.

        Halo layer k holds the cells adjacent to layer k-1 (layer 0 being the
        owned cells) that are not already known. Cells within a layer are
        sorted by global index.

        Args:
            global_mesh: The global VoronoiMesh object.
            cell_partitions: An array mapping global cell indices to partition IDs.
            n_halo_layers: Number of halo layers to grow around each partition.

        Returns:
            A dictionary where keys are partition IDs. Each value is a dictionary
            containing "owned_cells", "halo_cells" and "halo_layer" lists.
        """
        if cell_partitions.size == 0:
            return {}

        n_parts = int(np.max(cell_partitions) + 1)
        halo_data: Dict[int, Dict[str, Any]] = {}
        for rank in range(n_parts):
            owned_cells_g = np.where(cell_partitions == rank)[0].tolist()
            known = set(owned_cells_g)
            frontier = owned_cells_g
            halo_cells_g: List[int] = []
            halo_layer: List[int] = []

            for layer in range(1, n_halo_layers + 1):
                candidates = set()
                for g in frontier:
                    ring = global_mesh.cells_on_cell[g, : global_mesh.n_edges_on_cell[g]]
                    candidates.update(int(nb) for nb in ring if nb != -1)
                frontier = sorted(candidates - known)
                if not frontier:
                    break
                known.update(frontier)
                halo_cells_g.extend(frontier)
                halo_layer.extend([layer] * len(frontier))

            halo_data[rank] = {
                "owned_cells": owned_cells_g,
                "halo_cells": halo_cells_g,
                "halo_layer": halo_layer,
            }
        return halo_data

    @classmethod
    def create_local_meshes(
        cls,
        global_mesh: VoronoiMesh,
        n_parts: Optional[int] = None,
        cell_partitions: Optional[npt.NDArray[np.int_]] = None,
        partition_method: str = "metis",
        n_halo_layers: int = 2,
    ) -> List[LocalVoronoiMesh]:
        """
        Partitions a global mesh and creates a list of local mesh objects.

        Args:
            global_mesh: The complete, unpartitioned VoronoiMesh object.
            n_parts: The desired number of partitions. Required if `cell_partitions`
                     is not provided.
            cell_partitions: An optional array specifying the partition ID for
                             each cell. If provided, `n_parts` is inferred.
            partition_method: The algorithm to use for partitioning if needed.
            n_halo_layers: Number of halo layers around each partition. Two
                           layers are needed for the edge stencils of every
                           owned cell to be complete.

        Returns:
            A list of LocalVoronoiMesh objects, one for each non-empty partition.
        """
        global_mesh.analyze_mesh()
        if n_halo_layers < 0:
            raise ValueError("n_halo_layers must be non-negative.")

        if cell_partitions is None:
            if n_parts is None or n_parts <= 0:
                raise ValueError(
                    "n_parts must be a positive integer or cell_partitions must be provided."
                )
            cell_partitions = partition_mesh(
                global_mesh, n_parts, method=partition_method
            )
            print_partition_summary(cell_partitions)
        else:
            cell_partitions = np.asarray(cell_partitions, dtype=int)
            if cell_partitions.shape != (global_mesh.n_cells,):
                raise ValueError("cell_partitions must have one entry per cell.")
            n_parts = (
                int(np.max(cell_partitions) + 1) if cell_partitions.size > 0 else 0
            )

        if n_parts == 0:
            return []

        halo_layers = cls._compute_halo_layers(
            global_mesh, cell_partitions, n_halo_layers
        )

        local_meshes = []
        for rank in range(n_parts):
            if rank not in halo_layers or not halo_layers[rank]["owned_cells"]:
                # Skip ranks that have no owned cells
                continue
            local_meshes.append(
                LocalVoronoiMesh.from_global_mesh(global_mesh, halo_layers[rank], rank)
            )

        return local_meshes
