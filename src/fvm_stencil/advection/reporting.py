# -*- coding: utf-8 -*-
"""
This module provides reporting functions for the advection precompute.
"""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .coefficients import AdvectionCoefficients
    from .deriv_two import SecondDerivativeStencils


def format_advection_summary(
    coefs: "AdvectionCoefficients",
    stencils: Optional["SecondDerivativeStencils"] = None,
) -> str:
    """
    Formats a summary of the computed advection coefficient tables.
    """
    n_edges = coefs.n_adv_cells_for_edge.size
    counts = coefs.n_adv_cells_for_edge
    built = counts[counts > 0]

    lines = [f"\n{'--- Advection Stencils ---':^80}"]
    if stencils is not None:
        n_cells = stencils.fitted_cells.size
        lines.append(
            f"  {'Fitted Cells:':<25} {stencils.n_fitted_cells} / {n_cells}"
        )
    lines.append(f"  {'Edges with Stencils:':<25} {built.size} / {n_edges}")
    if built.size > 0:
        lines.append(
            f"  {'Neighbors per Edge:':<25} min {built.min()}, max {built.max()}, "
            f"avg {built.mean():.2f}"
        )
        row_sums = np.sum(coefs.adv_coefs, axis=1)[counts > 0]
        lines.append(
            f"  {'Sum of Weights:':<25} min {row_sums.min():.4e}, max {row_sums.max():.4e}"
        )

    if coefs.high_order_mask is not None:
        n_levels = coefs.high_order_mask.shape[0]
        lines.append(f"\n{'--- High-Order Mask ---':^80}")
        lines.append(f"  {'Level':<10} {'Enabled Edges':>15}")
        lines.append(f"  {'-'*9} {'-'*15}")
        for level in range(n_levels):
            enabled = int(np.sum(coefs.high_order_mask[level]))
            lines.append(f"  {level:<10} {enabled:>15}")
    return "\n".join(lines)


def print_advection_summary(
    coefs: "AdvectionCoefficients",
    stencils: Optional["SecondDerivativeStencils"] = None,
) -> None:
    """Prints the summary built by `format_advection_summary`."""
    print(format_advection_summary(coefs, stencils))
