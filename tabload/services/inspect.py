"""Inspection helpers for loaded tables.

These produce the compact views shown after a load: first/last rows,
dimensions, and a per-column structure summary that is safe to serialize
as JSON.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from tabload.domain.models import ColumnSummary, TableSummary


# ----------------
# HELPER FUNCTIONS
# ----------------

def _json_safe(value: Any) -> Any:
    """Convert numpy/pandas scalars to plain Python; missing values to None."""
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if value is pd.NaT or (not isinstance(value, (list, dict, tuple)) and pd.isna(value)):
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if isinstance(value, pd.Timedelta):
        return str(value)
    return value


def _has_row_names(df: pd.DataFrame) -> bool:
    """True unless the index is the default 0..n-1 range."""
    index = df.index
    return not (isinstance(index, pd.RangeIndex) and index.start == 0 and index.step == 1)


# ----------------
# VIEWS
# ----------------

def head(df: pd.DataFrame, n: int = 6) -> pd.DataFrame:
    """First ``n`` rows; a negative ``n`` drops the last ``|n|`` rows."""
    if n >= 0:
        return df.iloc[:n]
    return df.iloc[:max(len(df) + n, 0)]


def tail(df: pd.DataFrame, n: int = 6) -> pd.DataFrame:
    """Last ``n`` rows; a negative ``n`` drops the first ``|n|`` rows."""
    if n >= 0:
        return df.iloc[max(len(df) - n, 0):]
    return df.iloc[min(-n, len(df)):]


def dim(df: pd.DataFrame) -> Tuple[int, int]:
    return int(df.shape[0]), int(df.shape[1])


def structure(df: pd.DataFrame, sample_size: int = 5) -> TableSummary:
    """Summarize a table's shape and columns.

    Each column reports its dtype, missing count and the first few values.
    Categorical columns also list their levels.
    """
    columns: List[ColumnSummary] = []
    for name in df.columns:
        series = df[name]
        levels = None
        if isinstance(series.dtype, pd.CategoricalDtype):
            levels = [str(level) for level in series.cat.categories]
        columns.append(ColumnSummary(
            name=str(name),
            dtype=str(series.dtype),
            missing=int(series.isna().sum()),
            sample=[_json_safe(v) for v in series.head(sample_size).tolist()],
            levels=levels,
        ))

    rows, cols = dim(df)
    return TableSummary(
        rows=rows,
        columns=cols,
        has_row_names=_has_row_names(df),
        column_summaries=columns,
    )


def to_records(df: pd.DataFrame, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Rows as JSON-safe dicts.

    Row names, when present, are included under ``_row``.
    """
    view = df if limit is None else head(df, limit)
    include_index = _has_row_names(df)
    records = []
    for label, row in zip(view.index, view.itertuples(index=False, name=None)):
        record: Dict[str, Any] = {}
        if include_index:
            record["_row"] = _json_safe(label)
        for col, value in zip(view.columns, row):
            record[str(col)] = _json_safe(value)
        records.append(record)
    return records
