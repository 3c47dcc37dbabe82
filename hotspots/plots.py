"""Optional plotting utilities for clustered partitions.

Scatter plots of incidents coloured by cluster with centroid markers, one
figure per partition.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402


def plot_partition_clusters(
    assignments: pd.DataFrame,
    centroids: pd.DataFrame,
    title: str,
    output_path: Path,
    lat_column: str = "lat",
    lng_column: str = "lng",
) -> None:
    """Scatter points coloured by cluster_id and overlay centroids."""

    if assignments.empty:
        return

    fig, ax = plt.subplots(figsize=(7, 7))
    ax.scatter(
        assignments[lng_column],
        assignments[lat_column],
        c=assignments["cluster_id"],
        cmap="tab20",
        s=8,
        alpha=0.6,
    )
    if not centroids.empty:
        ax.scatter(centroids["lng"], centroids["lat"], marker="x", c="black", s=40, label="centroid")
        ax.legend(loc="best")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(title)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
