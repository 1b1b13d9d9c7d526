from .planar_hex import create_planar_hex_mesh
from .icosahedral import create_icosahedral_mesh

__all__ = [
    "create_planar_hex_mesh",
    "create_icosahedral_mesh",
]
