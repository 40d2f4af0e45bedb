from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

import pandas as pd

from timescope.features.composition import CollapsedCategories, category_shares
from timescope.features.distribution import (
    build_bucket_box_stats,
    display_range,
    flag_outliers,
    whisker_range,
)
from timescope.preprocess.time import TimeUnit

ChartKind = Literal["distribution", "composition"]


@dataclass(frozen=True)
class ChartSpec:
    """Drawing-independent description of one chart.

    ``buckets`` is the full chronological time axis shared by every chart of a
    run. ``data`` holds per-bucket box statistics for distribution charts and
    per-bucket ``(category, n, share)`` rows for composition charts.
    """

    kind: ChartKind
    variable_name: str
    time_unit: TimeUnit
    buckets: tuple[pd.Timestamp, ...]
    data: pd.DataFrame
    points: pd.DataFrame | None = None
    display_range: tuple[float, float] | None = None
    whisker_range: tuple[float, float] | None = None
    categories: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        if self.kind == "distribution":
            return f"Distribution of {self.variable_name} over time"
        return f"Evolution of variable {self.variable_name}"

    @property
    def outlier_count(self) -> int:
        if self.points is None or self.points.empty:
            return 0
        return int(self.points["is_outlier"].sum())


def build_distribution_chart(
    variable_name: str,
    values: pd.Series,
    buckets: pd.Series,
    axis: Sequence[pd.Timestamp],
    time_unit: TimeUnit,
) -> ChartSpec:
    whiskers = whisker_range(values)
    return ChartSpec(
        kind="distribution",
        variable_name=variable_name,
        time_unit=time_unit,
        buckets=tuple(axis),
        data=build_bucket_box_stats(values, buckets, axis),
        points=flag_outliers(values, buckets, whiskers),
        display_range=display_range(whiskers),
        whisker_range=whiskers,
    )


def build_composition_chart(
    variable_name: str,
    collapsed: CollapsedCategories,
    axis: Sequence[pd.Timestamp],
    time_unit: TimeUnit,
) -> ChartSpec:
    return ChartSpec(
        kind="composition",
        variable_name=variable_name,
        time_unit=time_unit,
        buckets=tuple(axis),
        data=category_shares(collapsed.counts),
        categories=collapsed.categories,
    )


def share_matrix(chart: ChartSpec) -> pd.DataFrame:
    """Bucket x category share table over the full axis; empty buckets are all zero."""
    if chart.kind != "composition":
        raise ValueError(f"share_matrix requires a composition chart, got {chart.kind}")
    index = pd.DatetimeIndex(chart.buckets, name="bucket")
    if chart.data.empty:
        return pd.DataFrame(0.0, index=index, columns=list(chart.categories))
    matrix = chart.data.pivot_table(
        index="bucket",
        columns="category",
        values="share",
        aggfunc="sum",
        fill_value=0.0,
    )
    return matrix.reindex(index=index, columns=list(chart.categories), fill_value=0.0)
