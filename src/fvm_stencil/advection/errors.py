# -*- coding: utf-8 -*-
"""
Structured error types raised by the advection stencil precompute.

Every error carries a machine-readable `kind` and, where one exists, the
global id of the offending cell or edge so that a caller running on a
partitioned mesh can report the failure without translating local indices.

Incomplete stencils (cells or edges whose neighbor ring reaches past the
locally known mesh) are not errors: they are skipped and leave zero
coefficients. The pole singularity on a sphere is handled by an explicit
branch. The remaining failure modes are configuration problems and
degenerate local fits.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of stencil precompute failures."""

    INCOMPLETE_STENCIL = "incomplete-stencil"
    POLE_SINGULARITY = "pole-singularity"
    UNSUPPORTED_ORDER = "unsupported-order"
    DEGENERATE_STENCIL = "degenerate-stencil"
    INVALID_CONFIGURATION = "invalid-configuration"
    GEOMETRY = "geometry"
    CAPACITY_EXCEEDED = "capacity-exceeded"


class StencilError(ValueError):
    """
    Base class for all structured stencil errors.

    Attributes:
        kind (ErrorKind): The failure classification.
        entity_id (Optional[int]): Global id of the offending cell or edge, if
            the failure is attached to one.
    """

    default_kind = ErrorKind.INVALID_CONFIGURATION

    def __init__(
        self,
        message: str,
        entity_id: Optional[int] = None,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        self.kind = kind if kind is not None else self.default_kind
        self.entity_id = entity_id
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.entity_id is None:
            return f"[{self.kind.value}] {base}"
        return f"[{self.kind.value}] {base} (entity {self.entity_id})"


class ConfigurationError(StencilError):
    """Raised when an `AdvectionConfig` cannot be resolved against a mesh."""

    default_kind = ErrorKind.INVALID_CONFIGURATION


class UnsupportedOrderError(ConfigurationError):
    """Raised when a polynomial order without a validated code path is requested."""

    default_kind = ErrorKind.UNSUPPORTED_ORDER


class DegenerateStencilError(StencilError):
    """Raised when a local least-squares system is under-determined or rank deficient."""

    default_kind = ErrorKind.DEGENERATE_STENCIL


class GeometryError(StencilError):
    """Raised when a geometric construction has no well-defined result."""

    default_kind = ErrorKind.GEOMETRY
