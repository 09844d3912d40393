"""CSV reading for customer uploads."""

import io
from pathlib import Path
from typing import IO, Any, Dict, List, Union

import pandas as pd

from .normalizer import normalize_row

READ_OPTIONS = {
    "dtype": str,
    "keep_default_na": False,
    "skip_blank_lines": True,
    "skipinitialspace": True,
}


def _read_text(source: Union[str, Path, IO[str]]) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).read_text(encoding="utf-8-sig")
    return source.read().lstrip("\ufeff")


def read_customer_csv(source: Union[str, Path, IO[str]]) -> List[Dict[str, Any]]:
    """
    Read an uploaded CSV into normalized row dictionaries.

    Every cell is read as text (no NA inference, so "" stays ""), blank
    lines are skipped and headers go through the field normalizer.

    Cells beyond the header width (trailing commas, stray values) are
    dropped from their own row; they never shift columns or fail the file.

    Raises:
        pandas.errors.EmptyDataError: If the file has no header line
        pandas.errors.ParserError: If the file cannot be tokenized
    """
    text = _read_text(source)
    width = len(pd.read_csv(io.StringIO(text), nrows=0, **READ_OPTIONS).columns)

    df = pd.read_csv(
        io.StringIO(text),
        engine="python",
        index_col=False,
        on_bad_lines=lambda cells: cells[:width],
        **READ_OPTIONS,
    )
    return [normalize_row(row) for row in df.to_dict(orient="records")]
