from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from timescope.contracts import AnalysisWarning
from timescope.features.profile import ColumnMetadata

DecisionKind = Literal["skip", "distribution", "composition"]
SkipReason = Literal["all_missing", "date_column", "unsupported_type"]

SUPPORTED_TYPES = frozenset({"Integer", "Logical", "Numeric", "Factor", "Character"})
CONTINUOUS_TYPES = frozenset({"Integer", "Numeric"})
DEFAULT_CATEGORICAL_THRESHOLD = 2


@dataclass(frozen=True)
class ColumnDecision:
    column: str
    kind: DecisionKind
    skip_reason: SkipReason | None = None
    warning: AnalysisWarning | None = None

    @property
    def is_skip(self) -> bool:
        return self.kind == "skip"


def classify_column(
    metadata: ColumnMetadata,
    date_column: str,
    categorical_threshold: int = DEFAULT_CATEGORICAL_THRESHOLD,
) -> ColumnDecision:
    """Pick the chart strategy for one column, or skip it.

    Rules are evaluated in order and the first match wins:

    1. completely missing -> skip with an ``all_missing`` warning
    2. the date column itself -> skip silently
    3. unsupported type -> skip with an ``unsupported_type`` warning
    4. Integer/Numeric with more than ``categorical_threshold`` distinct values
       -> ``distribution``
    5. anything else -> ``composition``
    """
    name = metadata.name
    if metadata.missing_fraction >= 1.0:
        return ColumnDecision(
            column=name,
            kind="skip",
            skip_reason="all_missing",
            warning=AnalysisWarning(
                kind="all_missing",
                column=name,
                message=f"Variable {name} is completely missing, cannot visualize.",
            ),
        )
    if name == date_column:
        return ColumnDecision(column=name, kind="skip", skip_reason="date_column")
    if metadata.type not in SUPPORTED_TYPES:
        return ColumnDecision(
            column=name,
            kind="skip",
            skip_reason="unsupported_type",
            warning=AnalysisWarning(
                kind="unsupported_type",
                column=name,
                message=(
                    f"Ignoring variable {name}: unsupported type {metadata.type} "
                    "for visualization."
                ),
            ),
        )
    if metadata.type in CONTINUOUS_TYPES and metadata.distinct_count > categorical_threshold:
        return ColumnDecision(column=name, kind="distribution")
    return ColumnDecision(column=name, kind="composition")
