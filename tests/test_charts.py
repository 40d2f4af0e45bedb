from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from timescope.charts import build_composition_chart, build_distribution_chart, share_matrix
from timescope.features.composition import collapse_categories
from timescope.features.distribution import (
    build_bucket_box_stats,
    display_range,
    flag_outliers,
    whisker_range,
)
from timescope.preprocess.time import ordered_buckets


def test_whisker_range_excludes_outliers_and_clips_to_observed_values() -> None:
    values = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0, 100.0])
    low, high = whisker_range(values)

    assert low == 1.0
    assert high == 5.0
    assert whisker_range(pd.Series([np.nan, np.nan])) is None


def test_display_range_adds_ten_percent_margin() -> None:
    assert display_range((0.0, 10.0)) == pytest.approx((-1.0, 11.0))
    low, high = display_range((5.0, 5.0))
    assert low < 5.0 < high
    assert display_range(None) == (0.0, 1.0)


def test_flag_outliers_retains_every_point() -> None:
    values = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0, 100.0, None])
    buckets = pd.Series(pd.to_datetime(["2020-01-01"] * 7))

    points = flag_outliers(values, buckets, whisker_range(values))

    assert len(points) == 6
    assert points.loc[points["value"] == 100.0, "is_outlier"].tolist() == [True]
    assert int(points["is_outlier"].sum()) == 1


def test_infinite_values_are_flagged_and_kept_out_of_box_stats() -> None:
    values = pd.Series([np.inf, np.inf, 1.0, 2.0, 3.0, -np.inf])
    buckets = pd.Series(pd.to_datetime(["2020-01-01"] * 3 + ["2021-01-01"] * 3))
    axis = ordered_buckets(buckets)

    chart = build_distribution_chart("reading", values, buckets, axis, "year")

    assert chart.whisker_range == (1.0, 3.0)
    assert chart.data["n"].tolist() == [1, 2]
    assert np.isfinite(chart.data[["q1", "median", "q3"]].to_numpy()).all()
    assert len(chart.points) == 6
    assert chart.outlier_count == 3


def test_flag_outliers_marks_infinite_values_without_whiskers() -> None:
    values = pd.Series([np.inf, -np.inf])
    buckets = pd.Series(pd.to_datetime(["2020-01-01", "2020-01-01"]))

    assert whisker_range(values) is None
    assert flag_outliers(values, buckets, None)["is_outlier"].tolist() == [True, True]


def test_box_stats_mark_empty_buckets_without_failing() -> None:
    buckets = pd.Series(pd.to_datetime(["2020-01-01", "2020-01-01", "2021-01-01"]))
    values = pd.Series([1.0, 3.0, np.nan])
    axis = ordered_buckets(buckets)

    stats = build_bucket_box_stats(values, buckets, axis)

    assert stats["bucket"].tolist() == list(axis)
    assert stats["n"].tolist() == [2, 0]
    assert stats.loc[0, "median"] == 2.0
    assert np.isnan(stats.loc[1, "median"])


def test_distribution_chart_single_bucket() -> None:
    buckets = pd.Series(pd.to_datetime(["2020-01-01"] * 20))
    values = pd.Series(np.arange(20, dtype=float))

    chart = build_distribution_chart("value", values, buckets, ordered_buckets(buckets), "year")

    assert chart.kind == "distribution"
    assert len(chart.buckets) == 1
    assert chart.data["n"].tolist() == [20]
    low, high = chart.display_range
    assert low < 0.0 and high > 19.0
    assert chart.outlier_count == 0
    assert "value" in chart.title


def test_composition_chart_covers_full_axis_with_zero_rows_for_empty_buckets() -> None:
    buckets = pd.Series(pd.to_datetime(["2020-01-01", "2020-01-01", "2021-01-01", "2022-01-01"]))
    values = pd.Series(["a", "b", None, "a"])
    axis = ordered_buckets(buckets)

    chart = build_composition_chart("letters", collapse_categories(values, buckets), axis, "year")
    matrix = share_matrix(chart)

    assert chart.kind == "composition"
    assert matrix.index.tolist() == list(axis)
    assert matrix.loc[pd.Timestamp("2020-01-01")].sum() == pytest.approx(1.0)
    assert matrix.loc[pd.Timestamp("2021-01-01")].sum() == 0.0
    assert matrix.loc[pd.Timestamp("2022-01-01"), "a"] == pytest.approx(1.0)


def test_share_matrix_requires_composition_chart() -> None:
    buckets = pd.Series(pd.to_datetime(["2020-01-01"] * 3))
    chart = build_distribution_chart(
        "value", pd.Series([1.0, 2.0, 3.0]), buckets, ordered_buckets(buckets), "year"
    )
    with pytest.raises(ValueError, match="composition"):
        share_matrix(chart)
