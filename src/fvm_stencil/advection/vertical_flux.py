# -*- coding: utf-8 -*-
"""
Closed-form vertical tracer flux stencils.

Both functions take the four tracer values around interface `i`
(levels i-2, i-1, i, i+1) and the vertical velocity at the interface. They
broadcast over numpy arrays. The algebraic form is kept exactly as written so
that results are reproducible bit for bit.
"""


import numpy as np


def vflux4(q_im2, q_im1, q_i, q_ip1, w):
    """Centered 4th-order vertical flux."""
    return w * (7.0 * (q_i + q_im1) - (q_ip1 + q_im2)) / 12.0


def vflux3(q_im2, q_im1, q_i, q_ip1, w, coef):
    """
    Upwind-biased 3rd-order vertical flux.

    `coef` blends between the non-dissipative 4th-order flux (0.0) and the
    fully dissipative 3rd-order flux (1.0).
    """
    return (
        w * (7.0 * (q_i + q_im1) - (q_ip1 + q_im2))
        - coef * np.abs(w) * ((q_ip1 - q_im2) - 3.0 * (q_i - q_im1))
    ) / 12.0
