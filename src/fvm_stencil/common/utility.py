import numpy as np
from matplotlib import colormaps
from matplotlib.collections import LineCollection
from matplotlib.patches import Rectangle

DEFAULT_CELL_COLOR = "#87CEEB"
HIGHLIGHT_COLOR = "#D62728"


def get_geometry_extent(points):
    """Computes the extent of each axis of the given 2-D coordinates."""
    extent = np.max(points, axis=0) - np.min(points, axis=0)
    return np.where(extent > 0, extent, 1.0)


def plot_mesh(ax, centers, cells_on_edge, parts=None, highlight=None, title="Mesh"):
    """
    Plots the cell centers of a mesh and the connections across its edges.

    Connections that wrap around a periodic axis (or the dateline on a sphere)
    span more than half of the plotted extent and are left out.

    Args:
        ax: Matplotlib axes object.
        centers (np.ndarray): Projected cell centers (num_cells, 2).
        cells_on_edge (np.ndarray): Pair of cells for each edge (num_edges, 2);
            -1 marks a missing cell.
        parts (np.ndarray, optional): Array of partition IDs for each cell.
        highlight (sequence, optional): Cell indices to outline.
        title (str, optional): The title for the plot.
    """
    centers = np.asarray(centers)[:, :2]
    extent = get_geometry_extent(centers)

    segments = []
    for c1, c2 in cells_on_edge:
        if c1 < 0 or c2 < 0:
            continue
        p1, p2 = centers[c1], centers[c2]
        if np.any(np.abs(p2 - p1) > 0.5 * extent):
            continue
        segments.append((p1, p2))
    ax.add_collection(LineCollection(segments, colors="0.6", linewidths=0.5))

    part_colors = None
    if parts is not None:
        parts = np.asarray(parts)
        unique_parts = np.unique(parts)
        cmap = colormaps["tab20"].resampled(max(len(unique_parts), 1))
        part_colors = {part_id: cmap(i) for i, part_id in enumerate(unique_parts)}
        colors = [part_colors[p] for p in parts]
    else:
        colors = DEFAULT_CELL_COLOR

    ax.scatter(centers[:, 0], centers[:, 1], c=colors, s=12, zorder=2)

    if highlight is not None and len(highlight) > 0:
        idx = np.asarray(highlight, dtype=int)
        ax.scatter(
            centers[idx, 0],
            centers[idx, 1],
            s=60,
            facecolors="none",
            edgecolors=HIGHLIGHT_COLOR,
            linewidths=1.5,
            zorder=3,
        )

    ax.set_title(title, fontsize=14)
    ax.set_aspect("equal", adjustable="box")
    ax.tick_params(axis="both", which="major", pad=2, labelsize=12)
    ax.autoscale_view()

    for spine in ax.spines.values():
        spine.set_visible(False)

    if part_colors is not None:
        legend_handles = [
            Rectangle(
                (0, 0),
                1,
                1,
                color=part_colors[part_id],
                label=f"Part {part_id} (#{int(np.sum(parts == part_id))})",
            )
            for part_id in part_colors
        ]
        ax.legend(
            handles=legend_handles,
            loc="upper left",
            bbox_to_anchor=(1.0, 1.0),
            fontsize=10,
            frameon=False,
        )
