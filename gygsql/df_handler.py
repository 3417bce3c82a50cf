"""DataFrame conversion for row inserts."""

import pandas as pd
import re
from typing import Any, Dict, List, Optional, Sequence


def _scalar(value: Any) -> Any:
    """Turn pandas/numpy scalars into values the SQLite driver can bind."""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat(sep=' ')
    if isinstance(value, pd.Timedelta):
        return value.total_seconds()
    if hasattr(value, 'item') and not isinstance(value, (bytes, bytearray, memoryview)):
        return value.item()
    return value


def df_rows(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """Convert DataFrame rows to column -> value mappings ready for insert."""
    if not isinstance(df, pd.DataFrame):
        raise TypeError('Input must be a pandas DataFrame')
    if df.empty:
        return []
    cols = list(columns) if columns is not None else [str(c) for c in df.columns]
    bad = [c for c in cols if not re.match(r'^\w+$', c)]
    if bad:
        raise ValueError(f'Invalid column names: {bad}')
    frame = df[cols] if columns is not None else df
    return [
        {col: _scalar(val) for col, val in zip(cols, row)}
        for row in frame.itertuples(index=False, name=None)
    ]
