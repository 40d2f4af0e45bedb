from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from timescope.contracts import AnalysisWarning

TOP_K_CATEGORIES = 10
OTHERS_LABEL = "Others"
COUNT_COLUMNS = ["bucket", "category", "n"]


@dataclass(frozen=True)
class CollapsedCategories:
    counts: pd.DataFrame
    kept_categories: tuple[str, ...]
    distinct_count: int
    top_k: int = TOP_K_CATEGORIES

    @property
    def collapsed(self) -> bool:
        return self.distinct_count > self.top_k

    @property
    def categories(self) -> tuple[str, ...]:
        if self.collapsed:
            return (*self.kept_categories, OTHERS_LABEL)
        return self.kept_categories


def _empty_counts() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "bucket": pd.Series(dtype="datetime64[ns]"),
            "category": pd.Series(dtype="object"),
            "n": pd.Series(dtype="int64"),
        }
    )


def rank_categories(categories: pd.Series) -> pd.Series:
    """Global frequency per category, descending; ties keep first-seen order."""
    counts = categories.value_counts(sort=False, dropna=True)
    return counts.sort_values(ascending=False, kind="stable")


def collapse_categories(
    values: pd.Series,
    buckets: pd.Series,
    top_k: int = TOP_K_CATEGORIES,
) -> CollapsedCategories:
    """Count rows per (bucket, category), folding categories outside the top ``top_k`` into Others.

    Missing values are excluded, so each bucket's counts sum to that bucket's
    non-missing rows. Buckets with no rows outside the top ``top_k`` get no
    Others row.
    """
    if len(values) != len(buckets):
        raise ValueError("values and buckets must have the same length")
    if top_k < 1:
        raise ValueError("top_k must be >= 1")

    frame = pd.DataFrame({"bucket": buckets.to_numpy(), "category": values.to_numpy()})
    frame = frame[frame["category"].notna() & frame["bucket"].notna()].copy()
    if frame.empty:
        return CollapsedCategories(
            counts=_empty_counts(), kept_categories=(), distinct_count=0, top_k=top_k
        )
    frame["category"] = frame["category"].astype(str)

    ranked = rank_categories(frame["category"])
    kept = tuple(str(label) for label in ranked.index[:top_k])
    in_top = frame["category"].isin(kept)

    grouped = frame[in_top].groupby(["bucket", "category"]).size().reset_index(name="n")
    if len(ranked) > top_k:
        others = frame[~in_top].groupby("bucket").size().reset_index(name="n")
        others["category"] = OTHERS_LABEL
        grouped = pd.concat([grouped, others[COUNT_COLUMNS]], ignore_index=True)

    grouped = grouped[grouped["n"] > 0]
    grouped = grouped.sort_values(["bucket", "n"], ascending=[True, False], kind="stable")
    return CollapsedCategories(
        counts=grouped[COUNT_COLUMNS].reset_index(drop=True),
        kept_categories=kept,
        distinct_count=int(len(ranked)),
        top_k=top_k,
    )


def high_cardinality_warning(column: str, collapsed: CollapsedCategories) -> AnalysisWarning | None:
    if not collapsed.collapsed:
        return None
    return AnalysisWarning(
        kind="high_cardinality",
        column=column,
        message=(
            f"On variable {column}, {collapsed.distinct_count} distinct values found, "
            f"only using top {collapsed.top_k} for visualization."
        ),
    )


def category_shares(counts: pd.DataFrame) -> pd.DataFrame:
    shaped = counts.copy()
    totals = shaped.groupby("bucket")["n"].transform("sum")
    shaped["share"] = (shaped["n"] / totals).where(totals > 0, 0.0).astype(float)
    return shaped
