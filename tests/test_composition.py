from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from timescope.features.composition import (
    OTHERS_LABEL,
    category_shares,
    collapse_categories,
    high_cardinality_warning,
    rank_categories,
)


def _buckets(values: list[str]) -> pd.Series:
    return pd.Series(pd.to_datetime(values))


def test_collapse_keeps_all_categories_when_within_cap() -> None:
    values = pd.Series(["a", "b", "a", "c", None, "b"])
    buckets = _buckets(
        ["2020-01-01", "2020-01-01", "2021-01-01", "2021-01-01", "2021-01-01", "2021-01-01"]
    )

    collapsed = collapse_categories(values, buckets)

    assert not collapsed.collapsed
    assert set(collapsed.kept_categories) == {"a", "b", "c"}
    assert OTHERS_LABEL not in set(collapsed.counts["category"])
    assert high_cardinality_warning("letters", collapsed) is None
    per_bucket = collapsed.counts.groupby("bucket")["n"].sum()
    assert per_bucket.loc[pd.Timestamp("2020-01-01")] == 2
    # the missing value is excluded from the 2021 bucket total
    assert per_bucket.loc[pd.Timestamp("2021-01-01")] == 3


def test_collapse_folds_tail_into_one_others_row_per_bucket() -> None:
    rng = np.random.default_rng(11)
    categories = [f"cat_{index:02d}" for index in range(15)]
    # cat_00 is the most frequent, cat_14 the least.
    values = [label for index, label in enumerate(categories) for _ in range(30 - index)]
    bucket_labels = rng.choice(["2020-01-01", "2021-01-01", "2022-01-01"], size=len(values))
    frame = pd.DataFrame({"value": values, "bucket": pd.to_datetime(bucket_labels)})

    collapsed = collapse_categories(frame["value"], frame["bucket"])

    assert collapsed.collapsed
    assert collapsed.distinct_count == 15
    assert set(collapsed.kept_categories) == set(categories[:10])
    assert collapsed.categories[-1] == OTHERS_LABEL
    assert len(collapsed.categories) == 11

    others = collapsed.counts[collapsed.counts["category"] == OTHERS_LABEL]
    assert others["bucket"].is_unique
    buckets_with_tail = frame.loc[frame["value"].isin(categories[10:]), "bucket"].unique()
    assert set(others["bucket"]) == set(pd.DatetimeIndex(buckets_with_tail))

    warning = high_cardinality_warning("code", collapsed)
    assert warning is not None
    assert warning.kind == "high_cardinality"
    assert "code" in warning.message
    assert "10" in warning.message


def test_collapse_preserves_per_bucket_totals() -> None:
    rng = np.random.default_rng(3)
    values = pd.Series(rng.integers(0, 25, size=400).astype(str))
    values[rng.choice(400, size=40, replace=False)] = None
    buckets = pd.Series(pd.to_datetime(rng.choice(["2020-01", "2020-02", "2020-03"], size=400)))

    collapsed = collapse_categories(values, buckets)

    emitted = collapsed.counts.groupby("bucket")["n"].sum()
    expected = buckets[values.notna()].value_counts()
    for bucket, total in expected.items():
        assert emitted.loc[bucket] == total


def test_collapse_omits_others_for_buckets_without_dropped_rows() -> None:
    common = [f"c{index}" for index in range(10)]
    values = common * 3 + ["rare"]
    buckets = ["2020-01-01"] * 10 + ["2021-01-01"] * 10 + ["2022-01-01"] * 10 + ["2022-01-01"]

    collapsed = collapse_categories(pd.Series(values), _buckets(buckets))

    others = collapsed.counts[collapsed.counts["category"] == OTHERS_LABEL]
    assert others["bucket"].tolist() == [pd.Timestamp("2022-01-01")]
    assert others["n"].tolist() == [1]


def test_collapse_handles_all_missing_values() -> None:
    collapsed = collapse_categories(pd.Series([None, None]), _buckets(["2020-01-01"] * 2))
    assert collapsed.counts.empty
    assert collapsed.kept_categories == ()


def test_collapse_rejects_misaligned_inputs() -> None:
    with pytest.raises(ValueError, match="same length"):
        collapse_categories(pd.Series(["a"]), _buckets(["2020-01-01", "2020-01-02"]))


def test_rank_categories_orders_by_frequency() -> None:
    ranked = rank_categories(pd.Series(["x", "y", "y", "z", "z", "z"]))
    assert ranked.index.tolist() == ["z", "y", "x"]


def test_category_shares_sum_to_one_per_bucket() -> None:
    collapsed = collapse_categories(
        pd.Series([True, False, True, True]),
        _buckets(["2020-01-01", "2020-01-01", "2020-02-01", "2020-02-01"]),
    )
    shares = category_shares(collapsed.counts)
    totals = shares.groupby("bucket")["share"].sum()
    assert np.allclose(totals.to_numpy(), 1.0)
    assert set(shares["category"]) == {"True", "False"}
