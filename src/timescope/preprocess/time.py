from __future__ import annotations

import logging
from typing import Literal

import pandas as pd

from timescope.contracts import InvalidDateColumnError

LOGGER = logging.getLogger(__name__)

TimeUnit = Literal["second", "minute", "hour", "month", "year"]

TIME_UNITS: tuple[TimeUnit, ...] = ("second", "minute", "hour", "month", "year")

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = SECONDS_PER_MINUTE * 60
SECONDS_PER_DAY = SECONDS_PER_HOUR * 24
SECONDS_PER_YEAR = SECONDS_PER_DAY * 365

# Ordered (exclusive lower bound in seconds, unit); first match wins.
UNIT_THRESHOLDS: tuple[tuple[int, TimeUnit], ...] = (
    (SECONDS_PER_YEAR * 2, "year"),
    (SECONDS_PER_DAY * 35, "month"),
    (SECONDS_PER_HOUR * 6, "hour"),
    (SECONDS_PER_MINUTE * 10, "minute"),
)

FLOOR_FREQ_MAP = {
    "second": "s",
    "minute": "min",
    "hour": "h",
}
PERIOD_FREQ_MAP = {
    "month": "M",
    "year": "Y",
}


def unit_for_span(span_seconds: float) -> TimeUnit:
    for threshold, unit in UNIT_THRESHOLDS:
        if span_seconds > threshold:
            return unit
    return "second"


def infer_time_unit(times: pd.Series, override: str = "auto") -> TimeUnit:
    """Return ``override`` when given, otherwise pick a unit from the span of ``times``."""
    if override != "auto":
        if override not in TIME_UNITS:
            raise ValueError(f"Unsupported time unit: {override}")
        return override  # type: ignore[return-value]

    values = pd.to_datetime(pd.Series(times)).dropna()
    if values.empty:
        return "second"
    span_seconds = (values.max() - values.min()).total_seconds()
    return unit_for_span(span_seconds)


def floor_time(times: pd.Series, unit: TimeUnit) -> pd.Series:
    if unit in FLOOR_FREQ_MAP:
        return times.dt.floor(FLOOR_FREQ_MAP[unit])
    if unit in PERIOD_FREQ_MAP:
        return times.dt.to_period(PERIOD_FREQ_MAP[unit]).dt.to_timestamp()
    raise ValueError(f"Unsupported time unit: {unit}")


def ordered_buckets(buckets: pd.Series) -> tuple[pd.Timestamp, ...]:
    return tuple(pd.DatetimeIndex(buckets.dropna().unique()).sort_values())


def _parse_datetime_values(raw: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(raw.astype("object"), errors="coerce", utc=True, format="mixed")
    return parsed.dt.tz_localize(None)


def normalize_time_axis(df: pd.DataFrame, date_column: str) -> pd.Series:
    """Return timezone-naive UTC timestamps for ``date_column``.

    Datetime columns are used directly (timezone-aware ones are converted to UTC
    first); string, categorical and ``datetime.date`` object columns are parsed.
    Individual values that cannot be parsed come back as ``NaT`` so callers can
    drop those rows.
    """
    if date_column not in df.columns:
        raise InvalidDateColumnError(date_column, "column not found in dataset")

    raw = df[date_column]
    if raw.isna().all():
        raise InvalidDateColumnError(date_column, "column is entirely missing")

    if isinstance(raw.dtype, pd.DatetimeTZDtype):
        return raw.dt.tz_convert("UTC").dt.tz_localize(None)
    if pd.api.types.is_datetime64_any_dtype(raw):
        return raw
    if pd.api.types.is_bool_dtype(raw) or pd.api.types.is_numeric_dtype(raw):
        raise InvalidDateColumnError(
            date_column,
            f"expected a date/timestamp column, got dtype {raw.dtype}",
        )

    timestamps = _parse_datetime_values(raw)
    if timestamps.isna().all():
        raise InvalidDateColumnError(date_column, "values could not be parsed as dates")

    unparsed = int((timestamps.isna() & raw.notna()).sum())
    if unparsed:
        LOGGER.warning(
            "Date column %s has %d value(s) that could not be parsed; those rows are dropped",
            date_column,
            unparsed,
        )
    return timestamps
