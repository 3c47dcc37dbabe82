"""Configuration for the hotspot pipeline.

Loads a YAML file on top of built-in defaults so every section the pipeline
reads is always present.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import yaml

from clustering.models import DEFAULT_THRESHOLD_M

DEFAULT_CONFIG: Dict[str, Any] = {
    "input": {
        "csv_glob": "data/incidents_*.csv",
        "id_column": "id",
        "coordinate_column": None,
        "lat_column": "lat",
        "lng_column": "lng",
        "timestamp_column": "timestamp",
        "timestamp_format": "mixed",
    },
    "filter": {"bounds": None},
    "partitioning": {"keys": ["year", "quarter"]},
    "clustering": {"threshold_m": DEFAULT_THRESHOLD_M},
    "output": {
        "dir": "output",
        "experiment_name": "hotspots",
        "save_assignments": True,
        "save_centroids": True,
        "save_metrics": True,
        "save_plots": False,
    },
    "logging": {"dir": "logs", "filename": "hotspots.log", "level": "INFO"},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, Any]:
    """Load a YAML configuration file merged over DEFAULT_CONFIG."""

    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    with Path(path).open("r", encoding="utf-8") as fh:
        user_cfg = yaml.safe_load(fh) or {}
    if not isinstance(user_cfg, dict):
        raise ValueError(f"Top-level config in {path} must be a mapping.")
    return _merge(DEFAULT_CONFIG, user_cfg)


def get_nested(config: Dict[str, Any], keys: list[str], default: Any) -> Any:
    """Retrieve a nested value from a config dict, or default when absent or null."""

    current: Any = config
    for key in keys:
        if not isinstance(current, dict) or current.get(key) is None:
            return default
        current = current[key]
    return current
