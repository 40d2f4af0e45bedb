from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from timescope.config import AppConfig

LOGGER = logging.getLogger(__name__)


def _load_psycopg():
    try:
        import psycopg
        from psycopg import sql
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError(
            "psycopg is required for PostgreSQL sources. "
            "Install with: pip install 'timescope[postgres]'"
        ) from exc
    return psycopg, sql


def drop_missing_dates(df: pd.DataFrame, date_column: str) -> pd.DataFrame:
    if date_column not in df.columns:
        return df
    mask = df[date_column].notna()
    dropped = int((~mask).sum())
    if dropped:
        LOGGER.info("Dropping %d row(s) with missing %s", dropped, date_column)
    return df.loc[mask].reset_index(drop=True)


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        return pd.read_csv(path, encoding="utf-8-sig")
    raise ValueError(f"Unsupported table file type: {path.suffix}")


def load_remote_dataset(
    db_url: str,
    table_name: str,
    date_column: str,
    row_limit: int,
) -> pd.DataFrame:
    """Collect up to ``row_limit`` rows with a non-null date from a PostgreSQL table."""
    psycopg, sql = _load_psycopg()
    LOGGER.info("Remote data source, collecting up to %d sample rows", row_limit)
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cursor:
            query = sql.SQL("SELECT * FROM {table_name} WHERE {date_column} IS NOT NULL LIMIT %s").format(
                table_name=sql.Identifier(table_name),
                date_column=sql.Identifier(date_column),
            )
            cursor.execute(query, [int(row_limit)])
            rows = cursor.fetchall()
            columns = [column.name for column in cursor.description or []]

    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def load_dataset(path: Path | None, config: AppConfig) -> pd.DataFrame:
    """Load the dataset for analysis with null-date rows removed."""
    date_column = config.analysis.date_column
    if config.input.mode == "postgres":
        if not config.input.db_url:
            raise ValueError("input.db_url must be set when input.mode is 'postgres'")
        if not config.input.table_name:
            raise ValueError("input.table_name must be set when input.mode is 'postgres'")
        frame = load_remote_dataset(
            db_url=config.input.db_url,
            table_name=config.input.table_name,
            date_column=date_column,
            row_limit=config.input.row_limit,
        )
        return drop_missing_dates(frame, date_column)

    if path is None:
        raise ValueError(f"A file path is required when input.mode is '{config.input.mode}'")
    return drop_missing_dates(load_table(path), date_column)
