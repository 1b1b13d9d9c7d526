# -*- coding: utf-8 -*-
"""
Configuration of the advection stencil precompute.

`AdvectionConfig` holds the user-facing settings, most of them optional.
`AdvectionConfig.resolve` validates them against a mesh and returns a
`ResolvedAdvectionConfig` in which every array is populated, so the
coefficient assembly never has to branch on a missing input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from .errors import ConfigurationError, UnsupportedOrderError

if TYPE_CHECKING:
    from ..polymesh.voronoi_mesh import VoronoiMesh

SUPPORTED_ADVECTION_ORDERS = (2, 3, 4)
SUPPORTED_POLYNOMIAL_ORDERS = (2,)


@dataclass(frozen=True)
class AdvectionConfig:
    """
    User-facing settings of the advection precompute.

    Attributes:
        horiz_adv_order (int): Horizontal advection order (2, 3 or 4). At
            order 2 the high-order mask is all zero.
        polynomial_order (int): Order of the local least-squares fit. Only 2
            is supported.
        n_vert_levels (int): Number of vertical levels.
        max_level_cell (Optional[np.ndarray]): Number of valid levels of each
            cell, shape `(n_cells,)`. Defaults to all levels valid.
        boundary_cell (Optional[np.ndarray]): Per-level boundary flag of each
            cell, shape `(n_vert_levels, n_cells)`. Defaults to no boundaries.
        compute_high_order_mask (bool): Whether to build the high-order mask.
    """

    horiz_adv_order: int = 2
    polynomial_order: int = 2
    n_vert_levels: int = 1
    max_level_cell: Optional[npt.ArrayLike] = None
    boundary_cell: Optional[npt.ArrayLike] = None
    compute_high_order_mask: bool = True

    def resolve(self, mesh: "VoronoiMesh") -> "ResolvedAdvectionConfig":
        """
        Validates the settings against `mesh` and fills in the defaults.

        Raises:
            UnsupportedOrderError: If `polynomial_order` is not supported.
            ConfigurationError: For any other invalid setting.
        """
        if self.horiz_adv_order not in SUPPORTED_ADVECTION_ORDERS:
            raise ConfigurationError(
                f"horiz_adv_order must be one of {SUPPORTED_ADVECTION_ORDERS}, "
                f"got {self.horiz_adv_order}."
            )
        if self.polynomial_order not in SUPPORTED_POLYNOMIAL_ORDERS:
            raise UnsupportedOrderError(
                f"polynomial_order {self.polynomial_order} is not supported; "
                f"expected one of {SUPPORTED_POLYNOMIAL_ORDERS}."
            )
        if self.n_vert_levels < 1:
            raise ConfigurationError("n_vert_levels must be at least 1.")

        n_levels, n_cells = self.n_vert_levels, mesh.n_cells

        if self.max_level_cell is None:
            max_level_cell = np.full(n_cells, n_levels, dtype=int)
        else:
            max_level_cell = np.asarray(self.max_level_cell, dtype=int)
            if max_level_cell.shape != (n_cells,):
                raise ConfigurationError(
                    f"max_level_cell must have shape ({n_cells},), got {max_level_cell.shape}."
                )
            if np.any(max_level_cell < 0) or np.any(max_level_cell > n_levels):
                raise ConfigurationError(
                    f"max_level_cell values must lie in [0, {n_levels}]."
                )

        if self.boundary_cell is None:
            boundary_cell = np.zeros((n_levels, n_cells), dtype=bool)
        else:
            boundary_cell = np.asarray(self.boundary_cell) != 0
            if boundary_cell.shape != (n_levels, n_cells):
                raise ConfigurationError(
                    f"boundary_cell must have shape ({n_levels}, {n_cells}), "
                    f"got {boundary_cell.shape}."
                )

        return ResolvedAdvectionConfig(
            horiz_adv_order=self.horiz_adv_order,
            polynomial_order=self.polynomial_order,
            n_vert_levels=n_levels,
            max_level_cell=max_level_cell,
            boundary_cell=boundary_cell,
            compute_high_order_mask=self.compute_high_order_mask,
        )


@dataclass(frozen=True)
class ResolvedAdvectionConfig:
    """An `AdvectionConfig` validated against a mesh, with every array populated."""

    horiz_adv_order: int
    polynomial_order: int
    n_vert_levels: int
    max_level_cell: np.ndarray
    boundary_cell: np.ndarray
    compute_high_order_mask: bool
