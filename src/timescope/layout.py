from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from timescope.charts import ChartSpec

GRID_ROWS = 2
GRID_COLUMNS = 2
PAGE_CAPACITY = GRID_ROWS * GRID_COLUMNS


@dataclass(frozen=True)
class PageCell:
    row: int
    column: int
    chart: ChartSpec


@dataclass(frozen=True)
class Page:
    number: int
    charts: tuple[ChartSpec, ...]

    @property
    def full_size(self) -> bool:
        return len(self.charts) == 1

    @property
    def cells(self) -> tuple[PageCell, ...]:
        # Column-major: fill column 0 top-to-bottom, then column 1.
        return tuple(
            PageCell(row=index % GRID_ROWS, column=index // GRID_ROWS, chart=chart)
            for index, chart in enumerate(self.charts)
        )


def batch_pages(charts: Sequence[ChartSpec], capacity: int = PAGE_CAPACITY) -> list[Page]:
    if capacity < 1 or capacity > PAGE_CAPACITY:
        raise ValueError(f"capacity must be between 1 and {PAGE_CAPACITY}")
    ordered = list(charts)
    return [
        Page(number=index + 1, charts=tuple(ordered[start : start + capacity]))
        for index, start in enumerate(range(0, len(ordered), capacity))
    ]
