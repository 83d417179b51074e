"""
records.py
-----------
Input boundary helpers.

Callers hand over movements and deadlines as DataFrames, lists of dicts or
lists of dataclasses. Everything is turned into a DataFrame with every
expected column present and optional fields filled, so the engine layers
never branch on "is this field present".
"""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from typing import Any, Mapping

import pandas as pd


_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def to_frame(items: Any, defaults: Mapping[str, Any]) -> pd.DataFrame:
    """
    Builds a DataFrame from `items` with every column in `defaults`.

    Missing columns are added and missing cells filled with the column
    default (a default of None leaves the cell empty). Items that are
    neither mappings nor dataclass instances (a stray None, a bare string)
    are left out; their count is kept in df.attrs["skipped_records"].
    """
    skipped = 0
    if items is None:
        df = pd.DataFrame()
    elif isinstance(items, pd.DataFrame):
        df = items.copy()
    else:
        records = []
        for item in items:
            record = _as_dict(item)
            if record is None:
                skipped += 1
                continue
            records.append(record)
        df = pd.DataFrame(records)

    for column, default in defaults.items():
        if column not in df.columns:
            df[column] = default
        elif default is not None:
            df[column] = df[column].where(df[column].notna(), default)

    df = df.reset_index(drop=True)
    df.attrs["skipped_records"] = skipped
    return df


def _as_dict(item: Any) -> dict | None:
    if is_dataclass(item) and not isinstance(item, type):
        return asdict(item)
    if isinstance(item, Mapping):
        return dict(item)
    return None


def parse_date(value: Any) -> pd.Timestamp:
    """
    Parses one date value; NaT when it cannot be parsed.

    Accepts datetime/date objects, ISO strings ("2024-01-16", optionally
    followed by a time part) and the Italian "16/01/2024" form. Aware
    datetimes keep their wall-clock date and lose the timezone, so a batch
    never mixes aware and naive values.
    """
    if value is None:
        return pd.NaT
    if isinstance(value, (datetime, date)):
        ts = pd.Timestamp(value)
        if ts.tzinfo is not None:
            ts = ts.tz_localize(None)
        return ts.normalize()
    if not isinstance(value, str):
        return pd.NaT

    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return pd.Timestamp(datetime.strptime(text[:10], fmt))
        except ValueError:
            continue
    return pd.NaT


def parse_dates(values: pd.Series) -> pd.Series:
    """Element-wise parse_date, keeping the index."""
    return pd.to_datetime(values.map(parse_date))


def to_amounts(series: pd.Series) -> pd.Series:
    """Numeric coercion; unparseable or missing amounts become 0.0."""
    return pd.to_numeric(series, errors="coerce").fillna(0.0).astype(float)
