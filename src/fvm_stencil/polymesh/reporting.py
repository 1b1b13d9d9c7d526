# -*- coding: utf-8 -*-
"""
Text report of the metrics held by a MeshQuality instance.

The report has three parts: edge-length statistics, a histogram of ring
sizes (pentagons, hexagons, ...) and the list of connectivity issues.
"""
from __future__ import annotations
from typing import List, TYPE_CHECKING
import numpy as np

from .quality import MIN_RING_DEGREE

if TYPE_CHECKING:
    from .quality import MeshQuality


def format_quality_summary(quality: "MeshQuality") -> str:
    """
    Formats a summary of the computed mesh quality metrics.
    """
    if not quality:
        return "Quality metrics not computed."

    sections = [f"\n{'--- Mesh Quality Metrics ---':^80}"]
    sections += _edge_length_lines(quality)
    sections += _ring_size_lines(quality.cell_degree_values)
    sections += _issue_lines(quality.connectivity_issues)
    return "\n".join(sections)


def _edge_length_lines(quality: "MeshQuality") -> List[str]:
    lines = [
        f"  {'Edge Length':<25} {'Min':>12} {'Max':>12} {'Mean':>12} {'Std':>12}",
        f"  {'-'*24} {'-'*12} {'-'*12} {'-'*12} {'-'*12}",
    ]
    for label, values in (
        ("Cell Center Distance", quality.dc_edge_values),
        ("Voronoi Edge Length", quality.dv_edge_values),
    ):
        values = values[np.isfinite(values)]
        if values.size == 0:
            lines.append(f"  {label:<25} {'n/a':>12}")
            continue
        lines.append(
            f"  {label:<25} {values.min():>12.4e} {values.max():>12.4e} "
            f"{values.mean():>12.4e} {values.std():>12.4e}"
        )
    lines.append(f"  {'Min/Max dcEdge Ratio':<25} {quality.min_max_dc_ratio:>12.4f}")
    return lines


def _ring_size_lines(degrees: np.ndarray) -> List[str]:
    sizes, counts = np.unique(degrees.astype(int), return_counts=True)
    lines = [f"\n  {'Edges per Cell':<25} {'Cells':>12}"]
    for size, count in zip(sizes, counts):
        flag = "  (too few for a quadratic fit)" if size < MIN_RING_DEGREE else ""
        lines.append(f"  {size:<25} {count:>12}{flag}")
    return lines


def _issue_lines(issues: List[str]) -> List[str]:
    lines = [f"\n{'--- Connectivity Check ---':^80}"]
    if not issues:
        lines.append("  No connectivity issues found.")
        return lines
    lines.append("  Issues Found:")
    lines.extend(f"    - {issue}" for issue in issues)
    return lines
