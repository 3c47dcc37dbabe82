"""Per-partition clustering of incident frames.

Converts partition rows to core points, runs a ClusterSession, and attaches
the resulting cluster ids and centroids back to tabular output with the
partition labels.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, List, Sequence, Tuple

import pandas as pd

from clustering.evaluation import compute_internal_metrics
from clustering.models import ClusterResult, Point
from clustering.session import ClusterSession
from hotspots.partitioning import PARTITION_KEYS, iter_partitions


def points_from_frame(
    df: pd.DataFrame,
    id_column: str = "id",
    lat_column: str = "lat",
    lng_column: str = "lng",
) -> List[Point]:
    """Build core points from a frame.

    Point ids fall back to the row position when there is no id column or
    when ids repeat (one incident number with several offenses); every row
    stays a point and the original id column is left untouched in the frame.
    """

    if id_column in df.columns and not df[id_column].duplicated().any():
        ids = df[id_column].tolist()
    else:
        if id_column in df.columns:
            logging.warning(
                "Column %r has %d duplicate ids; using row positions as point ids",
                id_column,
                int(df[id_column].duplicated().sum()),
            )
        ids = list(range(len(df)))
    return [
        Point(id=pid, lat=float(lat), lng=float(lng))
        for pid, lat, lng in zip(ids, df[lat_column].to_numpy(), df[lng_column].to_numpy())
    ]


def centroids_frame(result: ClusterResult) -> pd.DataFrame:
    rows = [
        {**result.labels, "cluster_id": c.cluster_id, "lat": c.lat, "lng": c.lng, "n_points": c.size}
        for c in result.centroids
    ]
    return pd.DataFrame(rows)


def cluster_partition(
    df_part: pd.DataFrame,
    session: ClusterSession,
    labels: Dict[str, Hashable] | None = None,
    id_column: str = "id",
    lat_column: str = "lat",
    lng_column: str = "lng",
) -> Tuple[pd.DataFrame, pd.DataFrame, ClusterResult]:
    """
    Cluster a single partition.
    Returns (rows with 'cluster_id', centroids frame, raw result).
    """

    points = points_from_frame(df_part, id_column=id_column, lat_column=lat_column, lng_column=lng_column)
    result = session.run(points, labels=labels)

    labeled = df_part.copy()
    labeled["cluster_id"] = result.assignment
    return labeled, centroids_frame(result), result


def cluster_all_partitions(
    df: pd.DataFrame,
    threshold_m: float,
    keys: Sequence[str] = PARTITION_KEYS,
    id_column: str = "id",
    lat_column: str = "lat",
    lng_column: str = "lng",
    evaluate: bool = True,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Cluster every partition independently and concatenate the outputs.
    Returns (assignments, centroids, metrics) frames; metrics is empty when evaluate is False.
    """

    session = ClusterSession(threshold_m=threshold_m)
    assigned_parts: List[pd.DataFrame] = []
    centroid_parts: List[pd.DataFrame] = []
    metrics_rows: List[dict] = []

    for labels, part in iter_partitions(df, keys):
        if part.empty:
            continue
        labeled, centroids, result = cluster_partition(
            part, session, labels=labels, id_column=id_column, lat_column=lat_column, lng_column=lng_column
        )
        assigned_parts.append(labeled)
        centroid_parts.append(centroids)
        if evaluate:
            metrics = compute_internal_metrics(result.distance_matrix, result.assignment, linkage=result.linkage)
            metrics.update(labels)
            metrics["max_merge_height_m"] = result.max_height
            metrics_rows.append(metrics)

    if not assigned_parts:
        logging.warning("No partitions to cluster.")
        return pd.DataFrame(), pd.DataFrame(), pd.DataFrame()

    assignments = pd.concat(assigned_parts, ignore_index=True)
    centroids = pd.concat(centroid_parts, ignore_index=True)
    metrics_df = pd.DataFrame(metrics_rows)
    logging.info("Clustered %d partitions into %d clusters in total", len(assigned_parts), len(centroids))
    return assignments, centroids, metrics_df
