from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from timescope.config import AppConfig, build_config
from timescope.features.profile import metadata_table, profile_columns
from timescope.io.read import load_dataset
from timescope.logging import configure_logging
from timescope.pipeline.run_all import run_all

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None, overrides: dict[str, object]) -> AppConfig:
    try:
        return build_config(config_path, overrides)
    except ValidationError as exc:
        raise typer.BadParameter(
            f"Invalid configuration: {exc}. "
            "The date column is required via --date-column or analysis.date_column."
        ) from exc


def _require_path_for_file_mode(data: Path | None, cfg: AppConfig) -> Path | None:
    if cfg.input.mode != "postgres" and data is None:
        raise typer.BadParameter(
            "Missing --csv. Required unless input.mode='postgres' "
            "with input.db_url/input.table_name configured."
        )
    return data


@app.command()
def analyze(
    csv: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="CSV or Parquet file to analyze.",
    ),
    date_column: str | None = typer.Option(None, help="Column used as the time axis."),
    time_unit: str | None = typer.Option(
        None,
        help="Bucket unit: auto, second, minute, hour, month or year.",
    ),
    categorical_threshold: int | None = typer.Option(
        None,
        min=0,
        help="Numeric columns with this many or fewer distinct values are treated as categorical.",
    ),
    export_dir: Path | None = typer.Option(
        None,
        resolve_path=True,
        help="Save one image per chart into this directory.",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    """Chart every column against the date column and write pages plus a summary."""
    configure_logging(log_level)
    overrides: dict[str, object] = {
        "date_column": date_column,
        "time_unit": time_unit,
        "categorical_threshold": categorical_threshold,
        "output_directory": str(export_dir) if export_dir is not None else None,
    }
    cfg = _load_app_config(config, overrides)
    csv = _require_path_for_file_mode(csv, cfg)
    result = run_all(data_path=csv, out_dir=out, config=cfg)
    for warning in result.warnings:
        typer.echo(f"Warning [{warning.kind}] {warning.column}: {warning.message}", err=True)
    typer.echo(f"{result.chart_count} charts have been generated. Output: {out}")


@app.command()
def profile(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    date_column: str | None = typer.Option(None, help="Column used as the time axis."),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    """Print the per-column metadata used to pick chart strategies."""
    configure_logging(log_level)
    cfg = _load_app_config(config, {"date_column": date_column})
    csv = _require_path_for_file_mode(csv, cfg)
    frame = load_dataset(path=csv, config=cfg)
    table = metadata_table(profile_columns(frame))
    typer.echo(table.to_string(index=False))

