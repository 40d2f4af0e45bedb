from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import PercentFormatter

from timescope.charts import ChartSpec, share_matrix
from timescope.collaborators import ChartExporter
from timescope.viz.common import save_figure

BOX_FILL = "#ccccff"
OUTLIER_COLOR = "red"
COMPOSITION_PALETTE = "Paired"
LEGEND_LABEL_LENGTH = 10
SINGLE_CHART_FIGSIZE = (10, 6)

BUCKET_LABEL_FORMATS = {
    "year": "%Y",
    "month": "%Y-%m",
    "hour": "%Y-%m-%d %H:00",
    "minute": "%Y-%m-%d %H:%M",
    "second": "%Y-%m-%d %H:%M:%S",
}


def abbreviate(label: str, max_length: int = LEGEND_LABEL_LENGTH) -> str:
    """Truncate a legend label to ``max_length`` characters, ending with an ellipsis."""
    text = str(label)
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def bucket_labels(chart: ChartSpec) -> list[str]:
    fmt = BUCKET_LABEL_FORMATS.get(chart.time_unit, "%Y-%m-%d %H:%M:%S")
    return [pd.Timestamp(bucket).strftime(fmt) for bucket in chart.buckets]


def _format_time_axis(ax: Axes, chart: ChartSpec) -> None:
    positions = np.arange(len(chart.buckets))
    ax.set_xticks(positions, labels=bucket_labels(chart), rotation=45, ha="right")
    ax.set_xlim(-0.5, max(len(chart.buckets), 1) - 0.5)
    ax.set_xlabel(f"Time ({chart.time_unit})")


def draw_distribution(ax: Axes, chart: ChartSpec) -> Axes:
    stats = chart.data
    filled = stats[stats["n"] > 0]
    if not filled.empty:
        box_stats = [
            {
                "med": row.median,
                "q1": row.q1,
                "q3": row.q3,
                "whislo": row.whisker_low,
                "whishi": row.whisker_high,
                "fliers": [],
            }
            for row in filled.itertuples(index=False)
        ]
        ax.bxp(
            box_stats,
            positions=filled.index.to_numpy(dtype=float),
            showfliers=False,
            patch_artist=True,
            boxprops={"facecolor": BOX_FILL},
            medianprops={"color": "#1e293b"},
            widths=0.6,
            manage_ticks=False,
        )

    points = chart.points
    if points is not None and not points.empty:
        outliers = points[points["is_outlier"] & np.isfinite(points["value"])]
        if not outliers.empty:
            position_by_bucket = {
                pd.Timestamp(bucket): index for index, bucket in enumerate(chart.buckets)
            }
            x = [position_by_bucket.get(pd.Timestamp(bucket), np.nan) for bucket in outliers["bucket"]]
            ax.scatter(
                x,
                outliers["value"],
                facecolors="none",
                edgecolors=OUTLIER_COLOR,
                marker="o",
                s=18,
                label="Outlier",
            )

    if chart.display_range is not None:
        ax.set_ylim(*chart.display_range)
    _format_time_axis(ax, chart)
    ax.set_ylabel(chart.variable_name)
    ax.set_title(chart.title)
    return ax


def draw_composition(ax: Axes, chart: ChartSpec) -> Axes:
    matrix = share_matrix(chart)
    positions = np.arange(len(chart.buckets))
    cmap = plt.get_cmap(COMPOSITION_PALETTE)
    bottom = np.zeros(len(positions), dtype=float)
    for index, category in enumerate(matrix.columns):
        heights = matrix[category].to_numpy(dtype=float)
        ax.bar(
            positions,
            heights,
            bottom=bottom,
            width=0.8,
            color=cmap(index % cmap.N),
            label=abbreviate(category),
        )
        bottom += heights

    ax.set_ylim(0.0, 1.0)
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0))
    _format_time_axis(ax, chart)
    ax.set_ylabel("Rows")
    ax.set_title(chart.title)
    if len(matrix.columns):
        ax.legend(
            title=abbreviate(chart.variable_name),
            fontsize="small",
            loc="center left",
            bbox_to_anchor=(1.0, 0.5),
        )
    return ax


def draw_chart(ax: Axes, chart: ChartSpec) -> Axes:
    if chart.kind == "distribution":
        return draw_distribution(ax, chart)
    if chart.kind == "composition":
        return draw_composition(ax, chart)
    raise ValueError(f"Unsupported chart kind: {chart.kind}")


def render_chart(chart: ChartSpec) -> Figure:
    fig, ax = plt.subplots(figsize=SINGLE_CHART_FIGSIZE)
    draw_chart(ax, chart)
    return fig


class ChartFileExporter(ChartExporter):
    name = "chart_file"

    def __init__(self, dpi: int | None = None) -> None:
        self.dpi = dpi

    def export(self, chart: ChartSpec, path: Path) -> Path:
        return save_figure(path, fig=render_chart(chart), dpi=self.dpi)
