# -*- coding: utf-8 -*-
"""
High-order horizontal advection stencils on Voronoi meshes.

Typical use::

    stencils, coefs = precompute_advection(mesh, AdvectionConfig(horiz_adv_order=3))

Key modules:
- deriv_two:      Second-derivative weights from local quadratic fits.
- neighbor_lists: Per-edge sets of contributing cells.
- coefficients:   Per-edge advection weight tables and high-order mask.
- vertical_flux:  Closed-form vertical flux stencils.
"""

from .config import AdvectionConfig, ResolvedAdvectionConfig
from .errors import (
    ConfigurationError,
    DegenerateStencilError,
    ErrorKind,
    GeometryError,
    StencilError,
    UnsupportedOrderError,
)
from .deriv_two import SecondDerivativeStencils, initialize_deriv_two
from .neighbor_lists import NeighborList, build_neighbor_list, build_neighbor_lists
from .coefficients import (
    AdvectionCoefficients,
    compute_advection_coefficients,
    edge_tracer_flux,
    precompute_advection,
)
from .vertical_flux import vflux3, vflux4
from .reporting import format_advection_summary, print_advection_summary

__all__ = [
    "AdvectionConfig",
    "ResolvedAdvectionConfig",
    "ErrorKind",
    "StencilError",
    "ConfigurationError",
    "UnsupportedOrderError",
    "DegenerateStencilError",
    "GeometryError",
    "SecondDerivativeStencils",
    "initialize_deriv_two",
    "NeighborList",
    "build_neighbor_list",
    "build_neighbor_lists",
    "AdvectionCoefficients",
    "compute_advection_coefficients",
    "precompute_advection",
    "edge_tracer_flux",
    "vflux3",
    "vflux4",
    "format_advection_summary",
    "print_advection_summary",
]
