from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REMOTE_ROW_LIMIT = 100_000

TimeUnitOption = Literal["auto", "second", "minute", "hour", "month", "year"]


class AnalysisConfig(BaseModel):
    date_column: str
    time_unit: TimeUnitOption = "auto"
    categorical_threshold: int = Field(default=2, ge=0)
    output_directory: str | None = None


class InputConfig(BaseModel):
    mode: Literal["csv", "parquet", "postgres"] = "csv"
    db_url: str | None = None
    table_name: str | None = None
    row_limit: int = Field(default=DEFAULT_REMOTE_ROW_LIMIT, ge=1)


class OutputsConfig(BaseModel):
    figures_format: str = "png"
    dpi: int = Field(default=100, ge=10)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    analysis: AnalysisConfig
    input: InputConfig = Field(default_factory=InputConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def _read_config_data(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _finalize(config: AppConfig, base_dir: Path) -> AppConfig:
    config.analysis.output_directory = _resolve_optional_path(
        config.analysis.output_directory,
        base_dir,
    )
    config.input.db_url = (
        config.input.db_url or os.getenv("TIMESCOPE_DB_URL") or os.getenv("DATABASE_URL")
    )
    return config


def load_config(path: Path) -> AppConfig:
    config = AppConfig.model_validate(_read_config_data(path))
    return _finalize(config, path.resolve().parent)


def build_config(path: Path | None, overrides: dict[str, Any] | None = None) -> AppConfig:
    """Merge an optional YAML config with non-null ``analysis`` overrides from the CLI."""
    data = _read_config_data(path) if path is not None else {}
    analysis = dict(data.get("analysis") or {})
    analysis.update({key: value for key, value in (overrides or {}).items() if value is not None})
    data["analysis"] = analysis

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent if path is not None else Path.cwd()
    return _finalize(config, base_dir)
