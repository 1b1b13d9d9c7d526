"""
FVM-Stencil

A Python package for precomputing high-order advection stencils on
unstructured Voronoi meshes, on the sphere or on a periodic plane.
"""

from . import advection
from . import meshgen
from . import polymesh

__all__ = [
    "advection",
    "meshgen",
    "polymesh",
]
