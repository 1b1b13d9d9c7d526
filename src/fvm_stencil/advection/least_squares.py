# -*- coding: utf-8 -*-
"""
Local least-squares polynomial fitting.

A cell's stencil (the cell itself plus its neighbor ring) is projected into
local tangent coordinates (xp, yp), one row per neighbor. The fit is anchored
at the cell centre: the first row of the design matrix is `[1, 0, ..., 0]`,
i.e. the cell value pins the constant term.

Functions:
    n_basis_terms: Number of polynomial terms for a given order.
    polynomial_basis: Builds the anchored design matrix.
    poly_fit_2: Solves the weighted normal equations for the fit operator.
"""

from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt
import scipy.linalg

from .errors import DegenerateStencilError

# Number of 2-D polynomial terms up to and including each supported order.
BASIS_SIZES = {2: 6, 3: 10, 4: 15}

# Rows of the order-2 fit operator holding the x^2, xy and y^2 coefficients.
XX_ROW, XY_ROW, YY_ROW = 3, 4, 5


def n_basis_terms(order: int) -> int:
    """Returns the number of basis terms for a polynomial of the given order."""
    try:
        return BASIS_SIZES[order]
    except KeyError:
        raise ValueError(
            f"Polynomial order {order} is not supported; expected one of "
            f"{sorted(BASIS_SIZES)}."
        ) from None


def polynomial_basis(
    xp: Sequence[float], yp: Sequence[float], order: int = 2
) -> npt.NDArray[np.float64]:
    """
    Builds the design matrix for an anchored polynomial fit.

    Column layout: 1, x, y, x^2, xy, y^2 for order 2; order 3 appends
    x^3, x^2 y, x y^2, y^3; order 4 further appends x^4, x^3 y, x^2 y^2,
    x y^3, y^4.

    Args:
        xp: Local x coordinates of the neighbors (cell centre excluded).
        yp: Local y coordinates of the neighbors.
        order: Polynomial order (2, 3 or 4).

    Returns:
        An array of shape `(len(xp) + 1, n_basis_terms(order))`. Row 0 is the
        anchor row for the cell itself.
    """
    na = n_basis_terms(order)
    x = np.asarray(xp, dtype=float)
    y = np.asarray(yp, dtype=float)
    if x.shape != y.shape:
        raise ValueError("xp and yp must have the same length.")

    amatrix = np.zeros((x.size + 1, na))
    amatrix[0, 0] = 1.0

    amatrix[1:, 0] = 1.0
    amatrix[1:, 1] = x
    amatrix[1:, 2] = y
    amatrix[1:, 3] = x**2
    amatrix[1:, 4] = x * y
    amatrix[1:, 5] = y**2

    if order >= 3:
        amatrix[1:, 6] = x**3
        amatrix[1:, 7] = y * (x**2)
        amatrix[1:, 8] = x * (y**2)
        amatrix[1:, 9] = y**3

    if order >= 4:
        amatrix[1:, 10] = x**4
        amatrix[1:, 11] = y * (x**3)
        amatrix[1:, 12] = (x**2) * (y**2)
        amatrix[1:, 13] = x * (y**3)
        amatrix[1:, 14] = y**4

    return amatrix


def poly_fit_2(
    amatrix: npt.NDArray[np.float64],
    weights: Optional[npt.NDArray[np.float64]] = None,
    cell_id: Optional[int] = None,
) -> npt.NDArray[np.float64]:
    """
    Computes the weighted least-squares fit operator `(A^T W A)^-1 A^T W`.

    Multiplying the returned operator by the vector of stencil values gives
    the polynomial coefficients.

    Args:
        amatrix: Design matrix of shape `(m, n)`.
        weights: Diagonal row weights of shape `(m,)`. Defaults to unit weights.
        cell_id: Global id of the fitted cell, attached to any raised error.

    Returns:
        The fit operator, shape `(n, m)`.

    Raises:
        DegenerateStencilError: If the system has fewer rows than unknowns or
            the design matrix is rank deficient.
    """
    m, n = amatrix.shape
    if m < n:
        raise DegenerateStencilError(
            f"Least-squares system is under-determined: {m} samples for {n} basis terms.",
            entity_id=cell_id,
        )

    w = np.ones(m) if weights is None else np.asarray(weights, dtype=float)
    if w.shape != (m,):
        raise ValueError(f"weights must have shape ({m},), got {w.shape}.")

    if np.linalg.matrix_rank(amatrix) < n:
        raise DegenerateStencilError(
            "Least-squares design matrix is rank deficient.", entity_id=cell_id
        )

    ath = amatrix.T * w
    atha = ath @ amatrix
    try:
        return scipy.linalg.solve(atha, ath)
    except scipy.linalg.LinAlgError as ex:
        raise DegenerateStencilError(
            f"Normal equations could not be solved: {ex}", entity_id=cell_id
        ) from ex
