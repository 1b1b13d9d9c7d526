# -*- coding: utf-8 -*-
"""
Assembly of the per-edge advection coefficient tables.

For an edge with owning cells c1 and c2, the high-order tracer value on the
edge is the centered average of the two cell values corrected by the
second derivatives on either side. Written as weights over the edge's
neighbor list:

    adv_coefs[e, k]     = dv * (0.5 * [k is c1 or c2] - dc**2 / 12 * (d2_1[k] + d2_2[k]))
    adv_coefs_3rd[e, k] = dv * (-dc**2 / 12 * (d2_1[k] + d2_2[k]))

`adv_coefs_3rd` carries the derivative part only; a third-order scheme
scales it with the sign of the normal velocity.

Classes:
    AdvectionCoefficients: The per-edge tables.

Functions:
    compute_high_order_mask: Levels and edges allowed to use high order.
    compute_advection_coefficients: Builds the tables from deriv_two.
    precompute_advection: deriv_two + coefficient tables in one call.
    edge_tracer_flux: Applies one edge's weights to a tracer field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union, TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from .config import AdvectionConfig, ResolvedAdvectionConfig
from .deriv_two import SecondDerivativeStencils, initialize_deriv_two
from .errors import ErrorKind, StencilError
from .neighbor_lists import NeighborList, build_neighbor_list

if TYPE_CHECKING:
    from ..polymesh.voronoi_mesh import VoronoiMesh


@dataclass(frozen=True)
class AdvectionCoefficients:
    """
    Per-edge advection weights.

    Rows are padded to `2 * max_edges` entries; only the first
    `n_adv_cells_for_edge[e]` entries of row `e` are meaningful. Edges
    without a neighbor list have a count of 0 and all-zero weights.

    Attributes:
        n_adv_cells_for_edge (np.ndarray): Neighbor count per edge.
        adv_cells_for_edge (np.ndarray): Local cell indices, -1 padded.
        adv_cell_global_ids (np.ndarray): Global cell ids, -1 padded.
        adv_coefs (np.ndarray): Full high-order weights.
        adv_coefs_3rd (np.ndarray): Derivative-only weights.
        high_order_mask (Optional[np.ndarray]): 1 where an edge may use the
            high-order flux at a level, shape `(n_vert_levels, n_edges)`.
    """

    n_adv_cells_for_edge: np.ndarray
    adv_cells_for_edge: np.ndarray
    adv_cell_global_ids: np.ndarray
    adv_coefs: np.ndarray
    adv_coefs_3rd: np.ndarray
    high_order_mask: Optional[np.ndarray]

    def neighbor_list(self, edge: int) -> NeighborList:
        """Returns the neighbor list stored in row `edge`."""
        n = self.n_adv_cells_for_edge[edge]
        return NeighborList(
            global_ids=self.adv_cell_global_ids[edge, :n].copy(),
            local_ids=self.adv_cells_for_edge[edge, :n].copy(),
        )


def max_adv_cells_for_edge(mesh: "VoronoiMesh") -> int:
    """Upper bound on the length of any neighbor list of `mesh`."""
    return 2 * mesh.max_edges


def _edge_weights(
    mesh: "VoronoiMesh", edge: int, neighbors: NeighborList, deriv_two: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """Computes the two weight rows of one edge, parallel to `neighbors`."""
    coefs = np.zeros(len(neighbors))
    coefs_3rd = np.zeros(len(neighbors))
    owners = mesh.cells_on_edge[edge]

    for side, owner in enumerate(owners):
        slot = neighbors.find_slot(mesh.cell_global_ids[owner])
        if slot is not None:
            coefs[slot] += deriv_two[edge, side, 0]
            coefs_3rd[slot] += deriv_two[edge, side, 0]
        for i in range(mesh.n_edges_on_cell[owner]):
            nb = mesh.cells_on_cell[owner, i]
            if nb < 0:
                continue
            slot = neighbors.find_slot(mesh.cell_global_ids[nb])
            if slot is None:
                continue
            coefs[slot] += deriv_two[edge, side, i + 1]
            coefs_3rd[slot] += deriv_two[edge, side, i + 1]

    dc_edge = mesh.dc_edge[edge]
    coefs = -(dc_edge**2) * coefs / 12.0
    coefs_3rd = -(dc_edge**2) * coefs_3rd / 12.0

    for owner in owners:
        coefs[neighbors.find_slot(mesh.cell_global_ids[owner])] += 0.5

    coefs = mesh.dv_edge[edge] * coefs
    coefs_3rd = mesh.dv_edge[edge] * coefs_3rd
    return coefs, coefs_3rd


def compute_high_order_mask(
    mesh: "VoronoiMesh", config: ResolvedAdvectionConfig
) -> np.ndarray:
    """
    Computes which (level, edge) pairs may use the high-order flux.

    A pair is disabled when either owning cell is flagged as a boundary cell
    at that level or the level lies at or below the edge's valid depth, and
    everywhere when `horiz_adv_order` is 2.
    """
    n_levels = config.n_vert_levels
    if config.horiz_adv_order == 2:
        return np.zeros((n_levels, mesh.n_edges), dtype=np.int8)

    cells = mesh.cells_on_edge
    known = cells >= 0
    safe = np.where(known, cells, 0)

    boundary = config.boundary_cell[:, safe] & known[np.newaxis, :, :]
    blocked = np.any(boundary, axis=2)

    depth = np.min(np.where(known, config.max_level_cell[safe], n_levels), axis=1)
    levels = np.arange(n_levels)[:, np.newaxis]
    return ((~blocked) & (levels < depth[np.newaxis, :])).astype(np.int8)


def compute_advection_coefficients(
    mesh: "VoronoiMesh",
    deriv_two: Union[SecondDerivativeStencils, npt.ArrayLike],
    config: Optional[AdvectionConfig] = None,
) -> AdvectionCoefficients:
    """
    Builds the advection coefficient tables of every edge.

    Args:
        mesh: The analyzed mesh the stencils were built on.
        deriv_two: Output of `initialize_deriv_two`, or its raw weight array.
        config: Settings used for the high-order mask. Defaults to
            `AdvectionConfig()`.

    Returns:
        AdvectionCoefficients: The filled tables.

    Raises:
        ValueError: If `deriv_two` does not match the mesh.
        StencilError: If a neighbor list outgrows `2 * max_edges` entries.
    """
    resolved = (config or AdvectionConfig()).resolve(mesh)
    if isinstance(deriv_two, SecondDerivativeStencils):
        weights = deriv_two.deriv_two
    else:
        weights = np.asarray(deriv_two, dtype=float)
    expected = (mesh.n_edges, 2, mesh.max_edges + 1)
    if weights.shape != expected:
        raise ValueError(f"deriv_two must have shape {expected}, got {weights.shape}.")

    capacity = max_adv_cells_for_edge(mesh)
    n_adv_cells = np.zeros(mesh.n_edges, dtype=int)
    adv_cells = -np.ones((mesh.n_edges, capacity), dtype=int)
    adv_global_ids = -np.ones((mesh.n_edges, capacity), dtype=int)
    adv_coefs = np.zeros((mesh.n_edges, capacity))
    adv_coefs_3rd = np.zeros((mesh.n_edges, capacity))

    for edge in range(mesh.n_edges):
        neighbors = build_neighbor_list(mesh, edge)
        n = len(neighbors)
        if n == 0:
            continue
        if n > capacity:
            raise StencilError(
                f"Neighbor list holds {n} cells, more than the capacity {capacity}.",
                entity_id=mesh.edge_global_id(edge),
                kind=ErrorKind.CAPACITY_EXCEEDED,
            )

        coefs, coefs_3rd = _edge_weights(mesh, edge, neighbors, weights)
        n_adv_cells[edge] = n
        adv_cells[edge, :n] = neighbors.local_ids
        adv_global_ids[edge, :n] = neighbors.global_ids
        adv_coefs[edge, :n] = coefs
        adv_coefs_3rd[edge, :n] = coefs_3rd

    mask = compute_high_order_mask(mesh, resolved) if resolved.compute_high_order_mask else None

    return AdvectionCoefficients(
        n_adv_cells_for_edge=n_adv_cells,
        adv_cells_for_edge=adv_cells,
        adv_cell_global_ids=adv_global_ids,
        adv_coefs=adv_coefs,
        adv_coefs_3rd=adv_coefs_3rd,
        high_order_mask=mask,
    )


def precompute_advection(
    mesh: "VoronoiMesh", config: Optional[AdvectionConfig] = None
) -> Tuple[SecondDerivativeStencils, AdvectionCoefficients]:
    """
    Runs the whole precompute: second derivatives, then coefficient tables.

    The configuration is validated before any stencil is built.
    """
    config = config or AdvectionConfig()
    resolved = config.resolve(mesh)
    stencils = initialize_deriv_two(mesh, resolved.polynomial_order)
    return stencils, compute_advection_coefficients(mesh, stencils, config)


def edge_tracer_flux(
    coefs: AdvectionCoefficients, tracer: npt.ArrayLike, edge: int
) -> float:
    """
    Applies the weights of `edge` to a cell-centered tracer field.

    The result is the edge tracer value times `dv_edge`; multiplying by the
    normal velocity gives the horizontal flux through the edge.
    """
    values = np.asarray(tracer, dtype=float)
    n = coefs.n_adv_cells_for_edge[edge]
    cells = coefs.adv_cells_for_edge[edge, :n]
    return float(np.dot(coefs.adv_coefs[edge, :n], values[cells]))
