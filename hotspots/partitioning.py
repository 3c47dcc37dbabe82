"""Time partitioning of incidents.

The clustering distance matrix is O(n^2), so incidents are clustered per
(year, quarter) rather than all at once.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterator, Sequence, Tuple

import pandas as pd

from hotspots.io import DEFAULT_TIMESTAMP_FORMAT, parse_timestamps

PARTITION_KEYS = ("year", "quarter")


def add_time_partitions(
    df: pd.DataFrame,
    timestamp_column: str = "timestamp",
    timestamp_format: str | None = DEFAULT_TIMESTAMP_FORMAT,
) -> pd.DataFrame:
    """Add integer 'year' and 'quarter' columns derived from a timestamp column.

    Rows whose timestamp cannot be parsed are dropped.
    """

    if timestamp_column not in df.columns:
        raise ValueError(f"Timestamp column {timestamp_column!r} not found.")

    ts = parse_timestamps(df[timestamp_column], timestamp_format)
    bad = ts.isna()
    if bad.any():
        logging.warning("Dropping %d rows with unparsable %r", int(bad.sum()), timestamp_column)
    df = df[~bad].copy()
    ts = ts[~bad]
    df["year"] = ts.dt.year.astype(int)
    df["quarter"] = ts.dt.quarter.astype(int)
    return df.reset_index(drop=True)


def iter_partitions(
    df: pd.DataFrame,
    keys: Sequence[str] = PARTITION_KEYS,
) -> Iterator[Tuple[Dict[str, Hashable], pd.DataFrame]]:
    """Yield ({key: value}, rows) per partition in sorted key order."""

    keys = list(keys)
    if not keys:
        yield {}, df
        return

    for values, part in df.groupby(keys, sort=True):
        if not isinstance(values, tuple):
            values = (values,)
        labels = {key: (val.item() if hasattr(val, "item") else val) for key, val in zip(keys, values)}
        logging.info("Partition %s: %d rows", labels, len(part))
        yield labels, part.reset_index(drop=True)
