"""CLI entry point for the hotspot clustering pipeline.

Orchestrates loading, coordinate splitting, bounding-box filtering, time
partitioning, per-partition clustering, evaluation, and optional plotting.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict

from clustering.models import DEFAULT_THRESHOLD_M
from hotspots.config import get_nested, load_config
from hotspots.io import (
    DEFAULT_TIMESTAMP_FORMAT,
    ensure_required_columns,
    filter_bounds,
    load_incident_csvs,
    save_dataframe,
    split_coordinates,
)
from hotspots.partitioning import PARTITION_KEYS, add_time_partitions
from hotspots.pipeline import cluster_all_partitions


def configure_logging(log_cfg: Dict[str, object]) -> None:
    """Configure root logger with both file and console handlers."""

    log_dir = Path(log_cfg.get("dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    filename = log_cfg.get("filename", "hotspots.log")
    log_path = log_dir / filename
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s - %(levelname)s - %(message)s"
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt))
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.info("Logging to %s (level=%s)", log_path, level_name)


def main(config_path: str | None = "config/hotspots.yaml") -> None:
    cfg = load_config(config_path)
    configure_logging(cfg.get("logging", {}) or {})

    input_cfg = cfg.get("input", {}) or {}
    lat_col = input_cfg.get("lat_column", "lat")
    lng_col = input_cfg.get("lng_column", "lng")
    id_col = input_cfg.get("id_column", "id")
    ts_col = input_cfg.get("timestamp_column", "timestamp")
    ts_format = input_cfg.get("timestamp_format", DEFAULT_TIMESTAMP_FORMAT)
    coord_col = input_cfg.get("coordinate_column")
    keys = list(get_nested(cfg, ["partitioning", "keys"], list(PARTITION_KEYS)))

    df = load_incident_csvs(
        input_cfg.get("csv_glob", "data/incidents_*.csv"),
        parse_dates=[ts_col],
        timestamp_format=ts_format,
    )
    if coord_col:
        df = split_coordinates(df, coord_col, lat_column=lat_col, lng_column=lng_col)
    df = ensure_required_columns(df, [lat_col, lng_col])
    df = filter_bounds(df, get_nested(cfg, ["filter", "bounds"], None), lat_column=lat_col, lng_column=lng_col)
    if {"year", "quarter"} & set(keys):
        df = add_time_partitions(df, timestamp_column=ts_col, timestamp_format=ts_format)
    df = ensure_required_columns(df, keys)
    if df.empty:
        logging.warning("No incidents left after filtering; exiting.")
        return

    threshold_m = float(get_nested(cfg, ["clustering", "threshold_m"], DEFAULT_THRESHOLD_M))
    logging.info("Clustering %d incidents with threshold %.0f m by %s", len(df), threshold_m, keys)

    output_cfg = cfg.get("output", {}) or {}
    exp_name = str(output_cfg.get("experiment_name", "hotspots"))
    run_dir = Path(output_cfg.get("dir", "output")) / exp_name
    csv_dir = run_dir / "csv"
    plots_dir = run_dir / "figures"
    logging.info("Using run directory %s", run_dir)

    assignments, centroids, metrics = cluster_all_partitions(
        df,
        threshold_m=threshold_m,
        keys=keys,
        id_column=id_col,
        lat_column=lat_col,
        lng_column=lng_col,
        evaluate=bool(output_cfg.get("save_metrics", True)),
    )

    if output_cfg.get("save_assignments", True) and not assignments.empty:
        save_dataframe(assignments, csv_dir / f"assignments_{exp_name}.csv")
    if output_cfg.get("save_centroids", True) and not centroids.empty:
        save_dataframe(centroids, csv_dir / f"centroids_{exp_name}.csv")
    if output_cfg.get("save_metrics", True) and not metrics.empty:
        save_dataframe(metrics, csv_dir / f"metrics_{exp_name}.csv")

    if output_cfg.get("save_plots", False) and not assignments.empty:
        from hotspots.plots import plot_partition_clusters

        groups = assignments.groupby(keys) if keys else [((), assignments)]
        for values, subset in groups:
            if not isinstance(values, tuple):
                values = (values,)
            suffix = "_".join(str(v) for v in values) or "all"
            part_centroids = centroids
            for key, val in zip(keys, values):
                part_centroids = part_centroids[part_centroids[key] == val]
            plot_partition_clusters(
                subset,
                part_centroids,
                title=f"Hotspots {suffix}",
                output_path=plots_dir / f"clusters_{suffix}_{exp_name}.png",
                lat_column=lat_col,
                lng_column=lng_col,
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Incident hotspot clustering pipeline.")
    parser.add_argument(
        "-c",
        "--config",
        default="config/hotspots.yaml",
        help="Path to YAML config file.",
    )
    args = parser.parse_args()
    main(args.config)
