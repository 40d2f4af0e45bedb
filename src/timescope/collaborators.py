from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Sequence, TypeVar

import pandas as pd
from tqdm import tqdm

from timescope.charts import ChartSpec
from timescope.features.profile import ColumnMetadata
from timescope.layout import Page

T = TypeVar("T")

Profiler = Callable[[pd.DataFrame], Sequence[ColumnMetadata]]
ProgressReporter = Callable[[Sequence[T]], Iterable[T]]


class PageDisplay:
    name: str

    def show(self, page: Page) -> None:
        raise NotImplementedError


class ChartExporter:
    name: str

    def export(self, chart: ChartSpec, path: Path) -> Path:
        raise NotImplementedError


def tqdm_progress(items: Sequence[T]) -> Iterable[T]:
    return tqdm(items, desc="Analyzing columns", unit="column", leave=False)


def no_progress(items: Sequence[T]) -> Iterable[T]:
    return items
