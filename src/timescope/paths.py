from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    pages: Path
    summary: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        pages=out_dir / "pages",
        summary=out_dir / "summary.json",
    )
    for path in (paths.root, paths.pages):
        path.mkdir(parents=True, exist_ok=True)
    return paths


def chart_file_name(variable_name: str, suffix: str = "png") -> str:
    stem = NON_ALNUM_RE.sub("_", str(variable_name).lower())
    return f"{stem}.{suffix.lstrip('.') or 'png'}"


def chart_export_path(output_directory: str | Path, variable_name: str, suffix: str = "png") -> Path:
    return Path(output_directory) / chart_file_name(variable_name, suffix=suffix)


def page_file_name(page_number: int, suffix: str = "png") -> str:
    return f"page_{int(page_number):03d}.{suffix.lstrip('.') or 'png'}"
