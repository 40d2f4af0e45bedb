from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from timescope.collaborators import PageDisplay
from timescope.layout import GRID_COLUMNS, GRID_ROWS, Page
from timescope.paths import page_file_name
from timescope.viz.common import save_figure
from timescope.viz.draw import draw_chart, render_chart

GRID_FIGSIZE = (16, 10)


def render_page(page: Page) -> Figure:
    """Draw a page; a single chart fills the figure, otherwise a 2x2 grid is used."""
    if not page.charts:
        raise ValueError(f"Page {page.number} has no charts")
    if page.full_size:
        return render_chart(page.charts[0])

    fig, axes = plt.subplots(GRID_ROWS, GRID_COLUMNS, figsize=GRID_FIGSIZE, squeeze=False)
    used: set[tuple[int, int]] = set()
    for cell in page.cells:
        draw_chart(axes[cell.row][cell.column], cell.chart)
        used.add((cell.row, cell.column))
    for row in range(GRID_ROWS):
        for column in range(GRID_COLUMNS):
            if (row, column) not in used:
                axes[row][column].axis("off")
    return fig


class PageFigureWriter(PageDisplay):
    name = "page_figure_writer"

    def __init__(self, directory: Path, figures_format: str = "png", dpi: int | None = None) -> None:
        self.directory = directory
        self.figures_format = figures_format
        self.dpi = dpi
        self.written: list[Path] = []

    def show(self, page: Page) -> None:
        path = self.directory / page_file_name(page.number, suffix=self.figures_format)
        self.written.append(save_figure(path, fig=render_page(page), dpi=self.dpi))
