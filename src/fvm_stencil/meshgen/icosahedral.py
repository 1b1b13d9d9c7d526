"""
Quasi-uniform spherical Voronoi meshes built from a subdivided icosahedron.
"""

import math
from typing import Dict, List, Tuple

import numpy as np
from scipy.spatial import SphericalVoronoi

from ..polymesh.voronoi_mesh import VoronoiMesh


def _icosahedron() -> Tuple[List[np.ndarray], List[Tuple[int, int, int]]]:
    """Unit icosahedron with two vertices exactly on the poles."""
    z = 1.0 / math.sqrt(5.0)
    r = 2.0 / math.sqrt(5.0)
    points = [np.array([0.0, 0.0, 1.0])]
    for k in range(5):
        lon = 2.0 * math.pi * k / 5.0
        points.append(np.array([r * math.cos(lon), r * math.sin(lon), z]))
    for k in range(5):
        lon = 2.0 * math.pi * k / 5.0 + math.pi / 5.0
        points.append(np.array([r * math.cos(lon), r * math.sin(lon), -z]))
    points.append(np.array([0.0, 0.0, -1.0]))

    faces = []
    for k in range(5):
        k1 = (k + 1) % 5
        faces.append((0, 1 + k, 1 + k1))
        faces.append((1 + k, 6 + k, 1 + k1))
        faces.append((1 + k1, 6 + k, 6 + k1))
        faces.append((11, 6 + k1, 6 + k))
    return points, faces


def _subdivide(
    points: List[np.ndarray], faces: List[Tuple[int, int, int]]
) -> List[Tuple[int, int, int]]:
    """Splits every face in four, appending the normalized edge midpoints to `points`."""
    midpoints: Dict[Tuple[int, int], int] = {}

    def midpoint(a: int, b: int) -> int:
        key = (min(a, b), max(a, b))
        if key not in midpoints:
            m = points[a] + points[b]
            points.append(m / np.linalg.norm(m))
            midpoints[key] = len(points) - 1
        return midpoints[key]

    new_faces = []
    for a, b, c in faces:
        ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
        new_faces.extend([(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)])
    return new_faces


def icosahedral_points(subdivisions: int = 2) -> np.ndarray:
    """
    Returns the unit-sphere vertices of an icosahedron subdivided `subdivisions` times.

    The first point is the north pole (0, 0, 1).
    """
    if subdivisions < 0:
        raise ValueError("subdivisions must be non-negative.")
    points, faces = _icosahedron()
    for _ in range(subdivisions):
        faces = _subdivide(points, faces)
    return np.array(points)


def create_icosahedral_mesh(subdivisions: int = 2, radius: float = 1.0) -> VoronoiMesh:
    """
    Creates a spherical Voronoi mesh whose generators are icosahedral points.

    The mesh has `10 * 4**subdivisions + 2` cells: twelve pentagons and
    hexagons elsewhere. Cell 0 is centered exactly on the north pole.

    Args:
        subdivisions (int): Number of icosahedron refinement steps.
        radius (float): Sphere radius.

    Returns:
        VoronoiMesh: An analyzed spherical mesh.
    """
    if radius <= 0.0:
        raise ValueError("radius must be positive.")

    generators = icosahedral_points(subdivisions) * radius
    sv = SphericalVoronoi(generators, radius=radius, center=np.zeros(3))
    sv.sort_vertices_of_regions()

    edge_ids: Dict[Tuple[int, int], int] = {}
    cells_on_edge: List[List[int]] = []
    vertices_on_edge: List[Tuple[int, int]] = []
    edges_on_cell: List[List[int]] = []

    for cell, region in enumerate(sv.regions):
        region = list(region)
        if not _is_counter_clockwise(generators[cell], sv.vertices[region]):
            region.reverse()

        cell_edges = []
        for k, v1 in enumerate(region):
            v2 = region[(k + 1) % len(region)]
            key = (min(v1, v2), max(v1, v2))
            if key in edge_ids:
                edge = edge_ids[key]
                cells_on_edge[edge][1] = cell
            else:
                edge = len(cells_on_edge)
                edge_ids[key] = edge
                cells_on_edge.append([cell, -1])
                vertices_on_edge.append((v1, v2))
            cell_edges.append(edge)
        edges_on_cell.append(cell_edges)

    return VoronoiMesh.from_arrays(
        generators,
        sv.vertices,
        edges_on_cell,
        cells_on_edge,
        vertices_on_edge,
        on_a_sphere=True,
        sphere_radius=radius,
    )


def _is_counter_clockwise(center: np.ndarray, polygon: np.ndarray) -> bool:
    """True if the polygon winds counter-clockwise seen from outside the sphere."""
    rel = polygon - center
    winding = np.sum(np.cross(rel, np.roll(rel, -1, axis=0)), axis=0)
    return float(np.dot(winding, center)) > 0.0
