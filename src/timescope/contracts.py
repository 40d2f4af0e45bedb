from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

WarningKind = Literal[
    "invalid_date_column",
    "all_missing",
    "unsupported_type",
    "high_cardinality",
]

ALLOWED_WARNING_KINDS = frozenset(
    {"invalid_date_column", "all_missing", "unsupported_type", "high_cardinality"}
)


@dataclass(frozen=True)
class AnalysisWarning:
    kind: WarningKind
    column: str
    message: str

    def __post_init__(self) -> None:
        if self.kind not in ALLOWED_WARNING_KINDS:
            raise ValueError(f"Unsupported warning kind: {self.kind}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "column": self.column, "message": self.message}


class InvalidDateColumnError(ValueError):
    """Raised when the designated date column cannot serve as a time axis."""

    def __init__(self, column: str, reason: str) -> None:
        super().__init__(f"Invalid date column '{column}': {reason}")
        self.column = column
        self.reason = reason
