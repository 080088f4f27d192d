from __future__ import annotations

import logging
import math
from typing import IO, List, Optional, Union

import pandas as pd

from .config import PREVIEW_ROWS
from .statistics import InvalidInput


logger = logging.getLogger(__name__)

CsvSource = Union[str, IO[str], IO[bytes]]


def read_sample(source: CsvSource, column: str, sep: str = ",") -> List[float]:
    """Read one numeric column from delimited text.

    - `column` must be present in the header row.
    - Empty and non-numeric cells are dropped, as are NaN/inf values.

    Raises InvalidInput when the file cannot be parsed, lacks the column,
    or has no usable numbers in it.
    """
    if hasattr(source, "seek"):
        # uploaded buffers are reused across page reruns
        source.seek(0)
    try:
        df = pd.read_csv(source, sep=sep, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        logger.warning("Could not parse upload for column %r: %s", column, exc)
        raise InvalidInput(f"Error reading file: {exc}") from exc

    return extract_sample(df, column)


def extract_sample(df: pd.DataFrame, column: str) -> List[float]:
    if column not in df.columns:
        logger.warning("Upload is missing column %r (found %s)", column, list(df.columns))
        raise InvalidInput(f'CSV must contain "{column}" column')

    numeric = pd.to_numeric(df[column], errors="coerce").dropna()
    values = [float(v) for v in numeric if math.isfinite(v)]

    if not values:
        raise InvalidInput(f'No valid numeric data found in "{column}" column')

    dropped = len(df) - len(values)
    if dropped:
        logger.debug("Dropped %d non-numeric rows from column %r", dropped, column)
    return values


def preview_table(values: List[float], rows: int = PREVIEW_ROWS) -> pd.DataFrame:
    """First `rows` values as an Index/Value table (1-based, two decimals)."""
    head = values[:rows]
    return pd.DataFrame(
        {
            "Index": list(range(1, len(head) + 1)),
            "Value": [f"{v:.2f}" for v in head],
        }
    )


def preview_note(values: List[float], rows: int = PREVIEW_ROWS) -> Optional[str]:
    remaining = len(values) - rows
    if remaining <= 0:
        return None
    return f"... and {remaining:,} more records"


def export_sample_csv(values: List[float], column: str) -> str:
    """Write a cleaned sample back out as a one-column CSV string."""
    return pd.DataFrame({column: values}).to_csv(index=False)
