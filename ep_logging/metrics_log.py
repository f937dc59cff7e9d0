"""Append-only CSV metrics log backed by Polars."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List

import polars as pl

__all__ = ["log_dir", "log_records", "log_record", "read_log"]


def log_dir() -> Path:
    """Directory for metric CSVs (``$EP_LOG_DIR``, default ``logs/``)."""
    out = Path(os.environ.get("EP_LOG_DIR", "logs"))
    out.mkdir(parents=True, exist_ok=True)
    return out


def _align(frame: pl.DataFrame, schema: Dict[str, pl.DataType]) -> pl.DataFrame:
    cols = []
    for name, dtype in schema.items():
        if name in frame.columns:
            cols.append(pl.col(name).cast(dtype))
        else:
            cols.append(pl.lit(None, dtype=dtype).alias(name))
    return frame.select(cols)


def _union_schema(prev: pl.DataFrame, new: pl.DataFrame) -> Dict[str, pl.DataType]:
    schema: Dict[str, pl.DataType] = {}
    for name in sorted(set(prev.columns) | set(new.columns)):
        a = prev.schema.get(name)
        b = new.schema.get(name)
        if a is None or b is None or a == b:
            schema[name] = a if b is None else b
        elif a == pl.Utf8 or b == pl.Utf8:
            schema[name] = pl.Utf8
        else:
            schema[name] = pl.Float64
    return schema


def log_records(name: str, records: List[Dict[str, Any]]) -> Path:
    """Append rows to ``<log_dir>/<name>.csv``.

    Args:
        name: Base filename without extension.
        records: List of dict rows; columns may differ between calls.
    Returns:
        Path to the CSV file.
    """
    assert isinstance(name, str) and len(name) > 0, "Invalid log name"
    assert isinstance(records, list), "records must be a list"
    out = log_dir() / f"{name}.csv"
    if not records:
        return out
    df = pl.DataFrame(records)
    if out.exists():
        prev = pl.read_csv(out)
        try:
            df = pl.concat([prev, df], how="vertical_relaxed")
        except pl.exceptions.PolarsError:
            # column sets differ between runs: align on the union
            schema = _union_schema(prev, df)
            df = pl.concat([_align(prev, schema), _align(df, schema)], how="vertical")
    df.write_csv(out)
    return out


def log_record(name: str, record: Dict[str, Any]) -> Path:
    """Append a single row."""
    return log_records(name, [record])


def read_log(name: str) -> pl.DataFrame:
    return pl.read_csv(log_dir() / f"{name}.csv")
