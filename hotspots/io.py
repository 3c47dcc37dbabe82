"""Input/output helpers for the hotspot pipeline.

Covers CSV loading, coordinate-string splitting, required-column checks,
bounding-box filtering of erroneous records, and CSV saving.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd

# Matches "(36.85, -76.29)" as well as bare "36.85,-76.29".
COORDINATE_PATTERN = r"(?P<lat>[-+]?\d+(?:\.\d+)?)\s*,\s*(?P<lng>[-+]?\d+(?:\.\d+)?)"


# Per-element format inference; without it pandas fixes the format from the
# first value and every differently formatted row becomes NaT.
DEFAULT_TIMESTAMP_FORMAT = "mixed"


def parse_timestamps(values: pd.Series, timestamp_format: str | None = DEFAULT_TIMESTAMP_FORMAT) -> pd.Series:
    """Parse a column to datetimes; unparsable values become NaT."""

    if pd.api.types.is_datetime64_any_dtype(values):
        return values
    return pd.to_datetime(values, format=timestamp_format, errors="coerce")


def load_incident_csvs(
    csv_glob: str,
    parse_dates: Iterable[str] = (),
    timestamp_format: str | None = DEFAULT_TIMESTAMP_FORMAT,
) -> pd.DataFrame:
    """Load and concatenate incident CSVs matching the glob.

    parse_dates columns are converted with parse_timestamps using
    timestamp_format. Requested columns that a file lacks are skipped with a
    warning instead of failing the load.
    """

    paths = sorted(glob.glob(csv_glob))
    if not paths:
        raise FileNotFoundError(f"No CSV files matched glob: {csv_glob}")

    frames: List[pd.DataFrame] = []
    for path in paths:
        logging.info("Reading %s", path)
        frame = pd.read_csv(path, low_memory=False)
        to_parse = [col for col in parse_dates if col in frame.columns]
        missing = [col for col in parse_dates if col not in frame.columns]
        if missing:
            logging.warning("Skipping parse_dates %s not present in %s", missing, path)
        for col in to_parse:
            frame[col] = parse_timestamps(frame[col], timestamp_format)
        frames.append(frame)

    combined = pd.concat(frames, ignore_index=True)
    logging.info("Loaded %d rows from %d files", len(combined), len(paths))
    return combined


def split_coordinates(
    df: pd.DataFrame,
    column: str,
    lat_column: str = "lat",
    lng_column: str = "lng",
) -> pd.DataFrame:
    """Split a "(lat, lng)" string column into numeric lat/lng columns.

    Rows whose coordinate string cannot be parsed are dropped.
    """

    if column not in df.columns:
        raise ValueError(f"Coordinate column {column!r} not found.")

    parts = df[column].astype(str).str.extract(COORDINATE_PATTERN)
    df = df.copy()
    df[lat_column] = pd.to_numeric(parts["lat"], errors="coerce")
    df[lng_column] = pd.to_numeric(parts["lng"], errors="coerce")

    bad = df[lat_column].isna() | df[lng_column].isna()
    if bad.any():
        logging.warning("Dropping %d rows with unparsable coordinates in %r", int(bad.sum()), column)
    return df[~bad].reset_index(drop=True)


def ensure_required_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Validate that the DataFrame contains the required columns."""

    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    return df


def filter_bounds(
    df: pd.DataFrame,
    bounds: Dict[str, float] | None,
    lat_column: str = "lat",
    lng_column: str = "lng",
) -> pd.DataFrame:
    """Keep rows inside the min/max lat/lng box; with no bounds, keep valid WGS84 rows."""

    bounds = bounds or {}
    min_lat = float(bounds.get("min_lat", -90.0))
    max_lat = float(bounds.get("max_lat", 90.0))
    min_lng = float(bounds.get("min_lng", -180.0))
    max_lng = float(bounds.get("max_lng", 180.0))

    lat = pd.to_numeric(df[lat_column], errors="coerce")
    lng = pd.to_numeric(df[lng_column], errors="coerce")
    mask = lat.between(min_lat, max_lat) & lng.between(min_lng, max_lng)
    dropped = int((~mask).sum())
    if dropped:
        logging.info(
            "Dropped %d rows outside lat [%s, %s], lng [%s, %s]", dropped, min_lat, max_lat, min_lng, max_lng
        )
    return df[mask].reset_index(drop=True)


def save_dataframe(df: pd.DataFrame, path: str | Path) -> None:
    """Persist a DataFrame to CSV."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logging.info("Saved %d rows to %s", len(df), path)
