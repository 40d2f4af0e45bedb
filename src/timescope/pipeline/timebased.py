from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from timescope.charts import ChartSpec, build_composition_chart, build_distribution_chart
from timescope.classify import ColumnDecision, classify_column
from timescope.collaborators import (
    ChartExporter,
    PageDisplay,
    Profiler,
    ProgressReporter,
    no_progress,
)
from timescope.config import AnalysisConfig
from timescope.contracts import AnalysisWarning, InvalidDateColumnError
from timescope.features.composition import collapse_categories, high_cardinality_warning
from timescope.features.profile import profile_columns
from timescope.layout import Page, batch_pages
from timescope.paths import chart_export_path
from timescope.preprocess.time import (
    TimeUnit,
    floor_time,
    infer_time_unit,
    normalize_time_axis,
    ordered_buckets,
)
from timescope.viz.draw import ChartFileExporter

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimebasedResult:
    date_column: str
    time_unit: TimeUnit | None
    charts: tuple[ChartSpec, ...] = ()
    pages: tuple[Page, ...] = ()
    warnings: tuple[AnalysisWarning, ...] = ()
    exported_paths: tuple[Path, ...] = ()

    @property
    def chart_count(self) -> int:
        return len(self.charts)

    def summary(self) -> dict[str, Any]:
        return {
            "date_column": self.date_column,
            "time_unit": self.time_unit,
            "chart_count": self.chart_count,
            "page_count": len(self.pages),
            "charts": [
                {
                    "variable": chart.variable_name,
                    "kind": chart.kind,
                    "outliers": chart.outlier_count,
                }
                for chart in self.charts
            ],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "exported_paths": [str(path) for path in self.exported_paths],
        }


@dataclass
class _Accumulator:
    charts: list[ChartSpec] = field(default_factory=list)
    warnings: list[AnalysisWarning] = field(default_factory=list)

    def add_warning(self, warning: AnalysisWarning | None) -> None:
        if warning is None:
            return
        LOGGER.warning(warning.message)
        self.warnings.append(warning)


def _as_frame(data: pd.DataFrame | Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    frame = data if isinstance(data, pd.DataFrame) else pd.DataFrame.from_records(list(data))
    # Metadata and charts refer to columns by their string name.
    if not all(isinstance(column, str) for column in frame.columns):
        frame = frame.rename(columns=str)
    return frame


def _build_chart(
    decision: ColumnDecision,
    values: pd.Series,
    buckets: pd.Series,
    axis: Sequence[pd.Timestamp],
    time_unit: TimeUnit,
) -> tuple[ChartSpec, AnalysisWarning | None]:
    if decision.kind == "distribution":
        chart = build_distribution_chart(decision.column, values, buckets, axis, time_unit)
        return chart, None
    collapsed = collapse_categories(values, buckets)
    chart = build_composition_chart(decision.column, collapsed, axis, time_unit)
    return chart, high_cardinality_warning(decision.column, collapsed)


def _export_charts(
    charts: Sequence[ChartSpec],
    output_directory: str,
    exporter: ChartExporter,
    figures_format: str,
) -> tuple[Path, ...]:
    exported: list[Path] = []
    for chart in charts:
        path = chart_export_path(output_directory, chart.variable_name, suffix=figures_format)
        exported.append(exporter.export(chart, path))
    return tuple(exported)


def run_timebased(
    data: pd.DataFrame | Iterable[Mapping[str, Any]],
    config: AnalysisConfig,
    *,
    profiler: Profiler = profile_columns,
    display: PageDisplay | None = None,
    exporter: ChartExporter | None = None,
    progress: ProgressReporter = no_progress,
    figures_format: str = "png",
) -> TimebasedResult:
    """Chart every column of ``data`` against ``config.date_column``.

    Columns are processed in order. Per-column problems are recorded as
    warnings and the column is skipped; an unusable date column aborts the run
    and returns a result without charts. Pages go to ``display`` when given and
    each chart is exported only when ``config.output_directory`` is set.
    """
    frame = _as_frame(data)
    date_column = config.date_column

    try:
        time_axis = normalize_time_axis(frame, date_column)
    except InvalidDateColumnError as exc:
        warning = AnalysisWarning(kind="invalid_date_column", column=date_column, message=str(exc))
        LOGGER.warning(warning.message)
        return TimebasedResult(date_column=date_column, time_unit=None, warnings=(warning,))

    valid = time_axis.notna()
    if not valid.all():
        frame = frame.loc[valid]
        time_axis = time_axis.loc[valid]

    time_unit = infer_time_unit(time_axis, override=config.time_unit)
    buckets = floor_time(time_axis, time_unit)
    axis = ordered_buckets(buckets)
    LOGGER.info("Using time unit %s with %d bucket(s) on %s", time_unit, len(axis), date_column)

    metadata = list(profiler(frame))
    accumulator = _Accumulator()
    for column_metadata in progress(metadata):
        decision = classify_column(
            column_metadata,
            date_column=date_column,
            categorical_threshold=config.categorical_threshold,
        )
        if decision.is_skip:
            accumulator.add_warning(decision.warning)
            continue
        chart, warning = _build_chart(
            decision,
            frame[decision.column],
            buckets,
            axis,
            time_unit,
        )
        accumulator.add_warning(warning)
        accumulator.charts.append(chart)

    pages = batch_pages(accumulator.charts)
    if display is not None:
        for page in pages:
            display.show(page)

    exported: tuple[Path, ...] = ()
    if config.output_directory:
        if exporter is None:
            exporter = ChartFileExporter()
        exported = _export_charts(
            accumulator.charts, config.output_directory, exporter, figures_format
        )

    LOGGER.info("%d charts have been generated.", len(accumulator.charts))
    return TimebasedResult(
        date_column=date_column,
        time_unit=time_unit,
        charts=tuple(accumulator.charts),
        pages=tuple(pages),
        warnings=tuple(accumulator.warnings),
        exported_paths=exported,
    )
