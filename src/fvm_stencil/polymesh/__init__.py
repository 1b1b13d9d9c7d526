# -*- coding: utf-8 -*-
"""
This package provides the Voronoi mesh container used by the advection
precompute, together with partitioning tools that split a global mesh into
local meshes made of owned and halo cells.

Key modules:
- voronoi_mesh:  Cell/edge/vertex tables and derived edge geometry.
- local_mesh:    Represents a partitioned mesh for a single process.
- partition:     Functions for partitioning a global mesh.
- quality:       Mesh quality metrics relevant to stencil fitting.
"""

from .voronoi_mesh import VoronoiMesh
from .local_mesh import LocalVoronoiMesh
from .mesh_partition_manager import MeshPartitionManager
from .partition import partition_mesh

__all__ = [
    "VoronoiMesh",
    "LocalVoronoiMesh",
    "MeshPartitionManager",
    "partition_mesh",
]
