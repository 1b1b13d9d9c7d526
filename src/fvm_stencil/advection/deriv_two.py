# -*- coding: utf-8 -*-
"""
Second-derivative stencils of cell-centered fields along edge normals.

For every cell whose neighbor ring is fully resident, a quadratic polynomial
is fitted by least squares to the cell and its ring, in local tangent-plane
coordinates centered on the cell. The second derivative of that polynomial
along each of the cell's edge normals is a linear combination of the stencil
values; its weights are stored per edge, under the side (0 or 1) the cell
occupies on that edge.

Classes:
    SecondDerivativeStencils: The per-edge weight table.

Functions:
    gather_stencil_cells: Stencil (cell + ring) of one cell, or None.
    reference_angle: Angle of the first ring direction relative to north.
    local_tangent_coordinates: Local coordinates of the ring.
    edge_directions: Edge normal angles in the same local frame.
    initialize_deriv_two: Builds the weight table for a mesh.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from .errors import UnsupportedOrderError
from .geometry import arc_bisect, arc_length, sphere_angle
from .least_squares import XX_ROW, XY_ROW, YY_ROW, poly_fit_2, polynomial_basis

if TYPE_CHECKING:
    from ..polymesh.voronoi_mesh import VoronoiMesh

NORTH_POLE = (0.0, 0.0, 1.0)


@dataclass(frozen=True)
class SecondDerivativeStencils:
    """
    Second-derivative weights per edge and side.

    Attributes:
        deriv_two (np.ndarray): Weights, shape `(n_edges, 2, max_edges + 1)`.
            `deriv_two[e, s, 0]` multiplies the value of `cells_on_edge[e, s]`
            itself and `deriv_two[e, s, i + 1]` the value of its i-th ring
            neighbor. Entries of cells without a complete stencil are 0.0.
        fitted_cells (np.ndarray): True for cells whose fit was computed.
    """

    deriv_two: np.ndarray
    fitted_cells: np.ndarray

    @property
    def n_fitted_cells(self) -> int:
        return int(np.count_nonzero(self.fitted_cells))


def gather_stencil_cells(
    mesh: "VoronoiMesh", cell: int, polynomial_order: int = 2
) -> Optional[List[int]]:
    """
    Collects the stencil of `cell`: the cell, its ring and, above order 2,
    the deduplicated ring of each ring neighbor.

    Returns:
        The local cell indices of the stencil, or None if any of them is
        missing or not resident.
    """
    n = mesh.n_edges_on_cell[cell]
    cell_list = [cell] + [int(c) for c in mesh.cells_on_cell[cell, :n]]
    if not all(mesh.is_resident(c) for c in cell_list):
        return None

    if polynomial_order > 2:
        for nb in cell_list[1 : n + 1]:
            for cell_add in mesh.cells_on_cell[nb, : mesh.n_edges_on_cell[nb]]:
                cell_add = int(cell_add)
                if cell_add not in cell_list:
                    if not mesh.is_resident(cell_add):
                        return None
                    cell_list.append(cell_add)

    return cell_list


def reference_angle(center, first_neighbor) -> float:
    """
    Angle between the direction to the first ring neighbor and local east.

    At the north pole every direction points south, so the reference is
    fixed to pi/2 there.
    """
    if center[2] == 1.0:
        return math.pi / 2.0
    return math.pi / 2.0 - sphere_angle(center, first_neighbor, NORTH_POLE)


def local_tangent_coordinates(
    mesh: "VoronoiMesh", cell: int, stencil: List[int]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Projects the ring of `cell` into a local plane centered on the cell.

    Args:
        mesh: The analyzed mesh.
        cell: Local index of the fitted cell.
        stencil: Output of `gather_stencil_cells` for `cell`.

    Returns:
        `(xp, yp, thetat)`, one entry per ring neighbor. `thetat` is the
        direction of each neighbor in the local frame.
    """
    n_ring = len(stencil) - 1
    xp = np.zeros(n_ring)
    yp = np.zeros(n_ring)
    thetat = np.zeros(n_ring)

    if not mesh.on_a_sphere:
        for i in range(n_ring):
            edge = mesh.edges_on_cell[cell, i]
            angle_2d = mesh.angle_edge[edge]
            if cell != mesh.cells_on_edge[edge, 0]:
                angle_2d -= math.pi
            thetat[i] = angle_2d
            xp[i] = mesh.dc_edge[edge] * math.cos(angle_2d)
            yp[i] = mesh.dc_edge[edge] * math.sin(angle_2d)
        return xp, yp, thetat

    radius = mesh.sphere_radius
    points = mesh.cell_coords[stencil] / radius
    center = points[0]

    thetav = np.zeros(n_ring)
    dl = np.zeros(n_ring)
    for i in range(n_ring):
        ip2 = i + 2 if i + 2 <= n_ring else 1
        thetav[i] = sphere_angle(center, points[i + 1], points[ip2])
        dl[i] = radius * arc_length(center, points[i + 1])

    thetat[0] = reference_angle(center, points[1])
    for i in range(1, n_ring):
        thetat[i] = thetat[i - 1] + thetav[i - 1]

    xp[:] = np.cos(thetat) * dl
    yp[:] = np.sin(thetat) * dl
    return xp, yp, thetat


def edge_directions(
    mesh: "VoronoiMesh", cell: int, stencil: List[int], thetat: np.ndarray
) -> np.ndarray:
    """
    Direction of each edge normal of `cell` in the frame of `local_tangent_coordinates`.

    On a sphere the normal direction is taken towards the midpoint of the
    edge's vertices, relative to the direction of the neighbor across it.
    """
    if not mesh.on_a_sphere:
        return thetat.copy()

    radius = mesh.sphere_radius
    center = mesh.cell_coords[cell] / radius
    thetae = np.zeros(len(thetat))
    for i in range(len(thetat)):
        edge = mesh.edges_on_cell[cell, i]
        v1, v2 = mesh.vertices_on_edge[edge]
        mid = arc_bisect(mesh.vertex_coords[v1] / radius, mesh.vertex_coords[v2] / radius)
        neighbor = mesh.cell_coords[stencil[i + 1]] / radius
        thetae[i] = sphere_angle(center, neighbor, mid) + thetat[i]
    return thetae


def initialize_deriv_two(
    mesh: "VoronoiMesh", polynomial_order: int = 2
) -> SecondDerivativeStencils:
    """
    Computes the second-derivative weights for every edge of `mesh`.

    Cells whose stencil is not fully resident are skipped; their entries stay
    exactly 0.0.

    Args:
        mesh: An analyzed VoronoiMesh (global or local).
        polynomial_order: Order of the local fit. Only 2 is supported.

    Returns:
        SecondDerivativeStencils: The weight table and the fitted-cell mask.

    Raises:
        UnsupportedOrderError: If `polynomial_order` is not 2.
        DegenerateStencilError: If a complete stencil cannot be fitted.
    """
    if polynomial_order != 2:
        raise UnsupportedOrderError(
            f"Second-derivative stencils are only available for polynomial order 2, "
            f"got {polynomial_order}."
        )
    if not mesh._is_analyzed:
        raise RuntimeError("Mesh must be analyzed before building stencils.")

    deriv_two = np.zeros((mesh.n_edges, 2, mesh.max_edges + 1))
    fitted_cells = np.zeros(mesh.n_cells, dtype=bool)

    for cell in range(mesh.n_cells):
        stencil = gather_stencil_cells(mesh, cell, polynomial_order)
        if stencil is None:
            continue

        xp, yp, thetat = local_tangent_coordinates(mesh, cell, stencil)
        amatrix = polynomial_basis(xp, yp, polynomial_order)
        bmatrix = poly_fit_2(amatrix, cell_id=int(mesh.cell_global_ids[cell]))
        thetae = edge_directions(mesh, cell, stencil, thetat)

        n = len(stencil)
        for i in range(mesh.n_edges_on_cell[cell]):
            edge = mesh.edges_on_cell[cell, i]
            side = 0 if cell == mesh.cells_on_edge[edge, 0] else 1

            cos2t = math.cos(thetae[i]) ** 2
            sin2t = math.sin(thetae[i]) ** 2
            costsint = math.cos(thetae[i]) * math.sin(thetae[i])
            deriv_two[edge, side, :n] = (
                2.0 * cos2t * bmatrix[XX_ROW, :n]
                + 2.0 * costsint * bmatrix[XY_ROW, :n]
                + 2.0 * sin2t * bmatrix[YY_ROW, :n]
            )
        fitted_cells[cell] = True

    return SecondDerivativeStencils(deriv_two=deriv_two, fitted_cells=fitted_cells)


def apply_deriv_two(
    stencils: SecondDerivativeStencils,
    mesh: "VoronoiMesh",
    field: npt.ArrayLike,
    edge: int,
    side: int,
) -> float:
    """Evaluates the stored second derivative of `field` at one edge side."""
    values = np.asarray(field, dtype=float)
    owner = mesh.cells_on_edge[edge, side]
    if owner < 0:
        return 0.0
    n = mesh.n_edges_on_cell[owner]
    ring = mesh.cells_on_cell[owner, :n]
    if np.any(ring < 0):
        return 0.0
    weights = stencils.deriv_two[edge, side]
    return float(weights[0] * values[owner] + np.dot(weights[1 : n + 1], values[ring]))
