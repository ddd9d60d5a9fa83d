from __future__ import annotations

import decimal
import math
from datetime import date, datetime
from typing import Any

import pandas as pd


def json_safe_cell(v: Any) -> str | int | float | bool | None:
    """Convert a single decoded cell to a JSON-safe primitive."""
    if v is None:
        return None

    # unwrap numpy scalars
    if hasattr(v, "item") and callable(getattr(v, "item")) and not isinstance(v, (str, bytes)):
        try:
            return json_safe_cell(v.item())
        except (ValueError, TypeError):
            pass

    if v is pd.NaT:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        if math.isnan(v) or math.isinf(v):
            return None
        return v
    if isinstance(v, str):
        return v
    if isinstance(v, decimal.Decimal):
        return float(v)
    if isinstance(v, pd.Timestamp):
        if pd.isna(v):
            return None
        return v.to_pydatetime().isoformat()
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, (bytes, bytearray)):
        return v.decode("utf-8", errors="replace")
    return str(v)


def frame_to_arrays(df: pd.DataFrame) -> list[list[str | int | float | bool | None]]:
    """Positional rows of a header-less frame, NaN/NaT -> None."""
    df = df.astype(object).where(df.notna(), None)
    return [[json_safe_cell(v) for v in row] for row in df.to_numpy(dtype=object).tolist()]


def frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Column-keyed rows of a frame, NaN/NaT -> None."""
    columns = [str(c) for c in df.columns]
    return [dict(zip(columns, row)) for row in frame_to_arrays(df)]
