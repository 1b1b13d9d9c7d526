import numpy as np

from fvm_stencil.meshgen import create_icosahedral_mesh, create_planar_hex_mesh
from fvm_stencil.polymesh import MeshPartitionManager, VoronoiMesh


def create_hex_fixture(nx: int = 8, ny: int = 8, dc: float = 1.0):
    """
    Provides a doubly periodic hexagon mesh and an interior cell.

    Returns:
        tuple: A tuple containing:
            - VoronoiMesh: The mesh.
            - int: A cell whose two rings do not wrap around a period.
    """
    mesh = create_planar_hex_mesh(nx, ny, dc=dc)
    interior_cell = (ny // 2) * nx + nx // 2
    return mesh, interior_cell


def create_sphere_fixture(subdivisions: int = 2, radius: float = 1.0):
    """Provides an icosahedral Voronoi mesh on the sphere."""
    return create_icosahedral_mesh(subdivisions=subdivisions, radius=radius)


def create_local_meshes_fixture(global_mesh, n_parts: int, n_halo_layers: int = 2):
    """Partitions `global_mesh` by coordinate bisection and builds local meshes."""
    return MeshPartitionManager.create_local_meshes(
        global_mesh,
        n_parts=n_parts,
        partition_method="hierarchical",
        n_halo_layers=n_halo_layers,
    )


def cell_edges(mesh, cell: int):
    """Returns the edges of `cell` as a list of ints."""
    return [int(e) for e in mesh.edges_on_cell[cell, : mesh.n_edges_on_cell[cell]]]


def cell_ring(mesh, cell: int):
    """Returns the ring of `cell` as a list of ints."""
    return [int(c) for c in mesh.cells_on_cell[cell, : mesh.n_edges_on_cell[cell]]]


def side_of(mesh, edge: int, cell: int) -> int:
    """Side (0 or 1) that `cell` occupies on `edge`."""
    return 0 if mesh.cells_on_edge[edge, 0] == cell else 1


def relative_linear_field(mesh, origin: int, cells, a0=1.0, ax=2.0, ay=3.0):
    """
    Tracer that is linear in the displacement from `origin` on `cells`
    and zero elsewhere.
    """
    tracer = np.zeros(mesh.n_cells)
    for c in cells:
        d = mesh.displacement(mesh.cell_coords[origin], mesh.cell_coords[c])
        tracer[c] = a0 + ax * d[0] + ay * d[1]
    return tracer


def create_quad_fixture(nx: int = 4, ny: int = 4, first_global_id: int = 0):
    """
    Provides a doubly periodic mesh of unit squares.

    Each cell has only four neighbors, too few for a quadratic fit. Global
    cell ids start at `first_global_id`.
    """
    cell_coords = np.zeros((nx * ny, 3))
    vertex_coords = np.zeros((nx * ny, 3))
    cells_on_edge = np.zeros((2 * nx * ny, 2), dtype=int)
    vertices_on_edge = np.zeros((2 * nx * ny, 2), dtype=int)
    edges_on_cell = []
    for j in range(ny):
        for i in range(nx):
            cell = j * nx + i
            east = j * nx + (i + 1) % nx
            north = ((j + 1) % ny) * nx + i
            west = j * nx + (i - 1) % nx
            south = ((j - 1) % ny) * nx + i
            cell_coords[cell] = (i, j, 0.0)
            vertex_coords[cell] = (i + 0.5, j + 0.5, 0.0)
            cells_on_edge[2 * cell] = (cell, east)
            cells_on_edge[2 * cell + 1] = (cell, north)
            vertices_on_edge[2 * cell] = (south, cell)
            vertices_on_edge[2 * cell + 1] = (cell, west)
            edges_on_cell.append([2 * cell, 2 * cell + 1, 2 * west, 2 * south + 1])

    mesh = VoronoiMesh.from_arrays(
        cell_coords,
        vertex_coords,
        edges_on_cell,
        cells_on_edge,
        vertices_on_edge,
        x_period=float(nx),
        y_period=float(ny),
    )
    mesh.cell_global_ids = np.arange(nx * ny, dtype=int) + first_global_id
    return mesh
