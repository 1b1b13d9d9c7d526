import math
from typing import List

import numpy as np

from ..polymesh.voronoi_mesh import VoronoiMesh

# Neighbor offsets (di, dj) in ring order E, NE, NW, W, SW, SE.
# Odd rows are shifted half a cell to the right.
_NEIGHBOR_OFFSETS = {
    0: [(1, 0), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1)],
    1: [(1, 0), (1, 1), (0, 1), (-1, 0), (0, -1), (1, -1)],
}


def _neighbor(i: int, j: int, direction: int, nx: int, ny: int) -> int:
    di, dj = _NEIGHBOR_OFFSETS[j % 2][direction]
    return ((j + dj) % ny) * nx + (i + di) % nx


def create_planar_hex_mesh(nx: int, ny: int, dc: float = 1.0) -> VoronoiMesh:
    """
    Creates a doubly periodic mesh of regular hexagons.

    Cell (i, j) has index `j * nx + i` and center
    `(dc * (i + 0.5 * (j % 2)), dc * sqrt(3) / 2 * j)`. Each cell owns its
    E, NE and NW edges (edge `3 * cell + k`) and the two hexagon corners at
    30 and 90 degrees (vertices `2 * cell` and `2 * cell + 1`).

    Args:
        nx (int): Number of cells in x (at least 3).
        ny (int): Number of rows in y (even, at least 4).
        dc (float): Distance between neighboring cell centers.

    Returns:
        VoronoiMesh: An analyzed planar mesh with x/y periods set.
    """
    if nx < 3 or ny < 4 or ny % 2:
        raise ValueError("nx must be >= 3 and ny must be an even number >= 4.")
    if dc <= 0.0:
        raise ValueError("dc must be positive.")

    n_cells = nx * ny
    row_height = dc * math.sqrt(3.0) / 2.0
    corner = dc / math.sqrt(3.0)

    cell_coords = np.zeros((n_cells, 3))
    vertex_coords = np.zeros((2 * n_cells, 3))
    cells_on_edge = np.zeros((3 * n_cells, 2), dtype=int)
    vertices_on_edge = np.zeros((3 * n_cells, 2), dtype=int)
    edges_on_cell: List[List[int]] = []

    for j in range(ny):
        for i in range(nx):
            cell = j * nx + i
            x, y = dc * (i + 0.5 * (j % 2)), row_height * j
            cell_coords[cell] = (x, y, 0.0)
            vertex_coords[2 * cell] = (x + corner * math.cos(math.pi / 6), y + corner / 2, 0.0)
            vertex_coords[2 * cell + 1] = (x, y + corner, 0.0)

            ring = [_neighbor(i, j, d, nx, ny) for d in range(6)]
            _, _, _, west, south_west, south_east = ring
            for k in range(3):
                cells_on_edge[3 * cell + k] = (cell, ring[k])
            vertices_on_edge[3 * cell] = (2 * south_east + 1, 2 * cell)
            vertices_on_edge[3 * cell + 1] = (2 * cell, 2 * cell + 1)
            vertices_on_edge[3 * cell + 2] = (2 * cell + 1, 2 * west)

            edges_on_cell.append(
                [
                    3 * cell,
                    3 * cell + 1,
                    3 * cell + 2,
                    3 * west,
                    3 * south_west + 1,
                    3 * south_east + 2,
                ]
            )

    return VoronoiMesh.from_arrays(
        cell_coords,
        vertex_coords,
        edges_on_cell,
        cells_on_edge,
        vertices_on_edge,
        on_a_sphere=False,
        x_period=nx * dc,
        y_period=ny * row_height,
    )

