from __future__ import annotations

from pathlib import Path

from timescope.collaborators import tqdm_progress
from timescope.config import AppConfig
from timescope.io.read import load_dataset
from timescope.io.write import write_summary
from timescope.paths import build_output_paths
from timescope.pipeline.timebased import TimebasedResult, run_timebased
from timescope.viz.draw import ChartFileExporter
from timescope.viz.pages import PageFigureWriter


def run_all(data_path: Path | None, out_dir: Path, config: AppConfig) -> TimebasedResult:
    """Load the dataset, write page figures and exported charts, and record a summary."""
    paths = build_output_paths(out_dir)
    frame = load_dataset(path=data_path, config=config)
    writer = PageFigureWriter(
        paths.pages,
        figures_format=config.outputs.figures_format,
        dpi=config.outputs.dpi,
    )
    result = run_timebased(
        frame,
        config.analysis,
        display=writer,
        exporter=ChartFileExporter(dpi=config.outputs.dpi),
        progress=tqdm_progress,
        figures_format=config.outputs.figures_format,
    )
    summary = result.summary()
    summary["page_files"] = [str(path) for path in writer.written]
    write_summary(summary, paths.summary)
    return result
