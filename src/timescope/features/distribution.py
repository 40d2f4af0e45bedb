from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

WHISKER_IQR_MULTIPLIER = 1.5
DISPLAY_MARGIN = 0.1
BOX_STAT_COLUMNS = [
    "bucket",
    "n",
    "q1",
    "median",
    "q3",
    "whisker_low",
    "whisker_high",
    "min",
    "max",
]


def _clean_values(values: pd.Series | np.ndarray) -> np.ndarray:
    numeric = pd.to_numeric(pd.Series(values), errors="coerce").astype(float).to_numpy()
    return numeric[np.isfinite(numeric)]


def whisker_range(values: pd.Series | np.ndarray) -> tuple[float, float] | None:
    """Tukey whisker ends: the most extreme observations within 1.5 IQR of the quartiles."""
    clean = _clean_values(values)
    if clean.size == 0:
        return None
    q1, q3 = np.percentile(clean, [25.0, 75.0])
    spread = WHISKER_IQR_MULTIPLIER * (q3 - q1)
    inside = clean[(clean >= q1 - spread) & (clean <= q3 + spread)]
    return float(inside.min()), float(inside.max())


def display_range(
    whiskers: tuple[float, float] | None,
    margin: float = DISPLAY_MARGIN,
) -> tuple[float, float]:
    if whiskers is None:
        return 0.0, 1.0
    low, high = whiskers
    width = high - low
    if width <= 0.0:
        # Constant column: pad around the value so the axis still has extent.
        pad = abs(low) * margin or 1.0
        return low - pad, high + pad
    return low - margin * width, high + margin * width


def _bucketed_values(values: pd.Series, buckets: pd.Series) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "bucket": buckets.to_numpy(),
            "value": pd.to_numeric(values, errors="coerce").astype(float).to_numpy(),
        }
    ).dropna()


def _box_stats(values: np.ndarray) -> dict[str, float]:
    q1, median, q3 = np.percentile(values, [25.0, 50.0, 75.0])
    spread = WHISKER_IQR_MULTIPLIER * (q3 - q1)
    inside = values[(values >= q1 - spread) & (values <= q3 + spread)]
    return {
        "n": int(values.size),
        "q1": float(q1),
        "median": float(median),
        "q3": float(q3),
        "whisker_low": float(inside.min()),
        "whisker_high": float(inside.max()),
        "min": float(values.min()),
        "max": float(values.max()),
    }


def build_bucket_box_stats(
    values: pd.Series,
    buckets: pd.Series,
    axis: Sequence[pd.Timestamp],
) -> pd.DataFrame:
    """One row of box-plot statistics per axis bucket; buckets without values get ``n == 0``."""
    frame = _bucketed_values(values, buckets)
    frame = frame[np.isfinite(frame["value"])]
    by_bucket = {
        pd.Timestamp(bucket): group["value"].to_numpy(dtype=float)
        for bucket, group in frame.groupby("bucket")
    }

    rows: list[dict[str, object]] = []
    for bucket in axis:
        bucket_values = by_bucket.get(pd.Timestamp(bucket))
        if bucket_values is None or bucket_values.size == 0:
            rows.append(
                {
                    "bucket": pd.Timestamp(bucket),
                    "n": 0,
                    **{column: np.nan for column in BOX_STAT_COLUMNS[2:]},
                }
            )
            continue
        rows.append({"bucket": pd.Timestamp(bucket), **_box_stats(bucket_values)})
    if not rows:
        return pd.DataFrame(columns=BOX_STAT_COLUMNS)
    return pd.DataFrame(rows, columns=BOX_STAT_COLUMNS)


def flag_outliers(
    values: pd.Series,
    buckets: pd.Series,
    whiskers: tuple[float, float] | None,
) -> pd.DataFrame:
    """All non-missing points with an ``is_outlier`` flag relative to the column whisker range."""
    points = _bucketed_values(values, buckets)
    # Infinite values never fall inside a whisker range.
    non_finite = ~np.isfinite(points["value"])
    if whiskers is None:
        points["is_outlier"] = non_finite
        return points.reset_index(drop=True)
    low, high = whiskers
    points["is_outlier"] = non_finite | (points["value"] < low) | (points["value"] > high)
    return points.sort_values("bucket", kind="stable").reset_index(drop=True)
