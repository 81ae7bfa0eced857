"""
Delimited-text parsing for uploaded (x, y) datasets
"""
from __future__ import annotations

import csv
import io
import logging

import numpy as np
import pandas as pd

from backend.config import DELIMITERS
from backend.preprocessing import InsufficientDataError

logger = logging.getLogger(__name__)


def decode_payload(raw: bytes) -> str:
    """Decode an upload as UTF-8, dropping a byte-order mark if present.

    Invalid bytes become U+FFFD; rows containing them fail numeric parsing
    and are dropped.
    """
    return raw.decode('utf-8-sig', errors='replace')


def _read_with_delimiter(content: str, delimiter: str) -> pd.DataFrame:
    """Rows with finite numeric x and y, parsed with one delimiter"""
    frame = pd.read_csv(
        io.StringIO(content),
        sep=delimiter,
        dtype=str,
        engine='python',
        skip_blank_lines=True,
        skipinitialspace=True,
        on_bad_lines='skip',
    )
    frame.columns = [str(column).strip() for column in frame.columns]
    if 'x' not in frame.columns or 'y' not in frame.columns:
        return pd.DataFrame({'x': [], 'y': []}, dtype=float)

    values = frame[['x', 'y']].apply(lambda column: pd.to_numeric(column.str.strip(), errors='coerce'))
    finite = np.isfinite(values['x']) & np.isfinite(values['y'])
    return values[finite].reset_index(drop=True)


def parse_delimited(content: str, delimiters: tuple[str, ...] = DELIMITERS) -> tuple[np.ndarray, np.ndarray]:
    """Parse header + rows into x and y arrays.

    Each delimiter is tried in turn; the first one that yields at least one
    row with numeric `x` and `y` columns wins.

    Raises:
        InsufficientDataError: fewer than 2 valid rows
    """
    records = pd.DataFrame({'x': [], 'y': []}, dtype=float)
    for delimiter in delimiters:
        try:
            parsed = _read_with_delimiter(content, delimiter)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as e:
            logger.debug("Parsing failed with delimiter %r: %s", delimiter, e)
            continue
        if len(parsed) > 0:
            logger.debug("Parsed %d row(s) with delimiter %r", len(parsed), delimiter)
            records = parsed
            break

    if len(records) < 2:
        raise InsufficientDataError(
            f"No valid data or insufficient points ({len(records)} found)"
        )

    return records['x'].to_numpy(dtype=float), records['y'].to_numpy(dtype=float)
