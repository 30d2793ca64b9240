"""Delimited text readers and writers.

Two families of readers sit on top of ``pandas.read_csv``:

* the classic family (``read_table``, ``read_csv``, ``read_csv2``,
  ``read_delim``, ``read_delim2``): no header by default for
  ``read_table``, ``V1..Vn`` column names, whitespace separation, syntactic
  name repair and optional row names;
* the tidy family (``read_delim_tidy``, ``read_csv_tidy``,
  ``read_tsv_tidy``): header on by default, names kept verbatim, no row
  index, surrounding whitespace trimmed.

Parsing itself is left entirely to pandas; errors propagate unchanged.
"""
import csv
import io
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

import pandas as pd
from pandas.api.types import is_string_dtype

from tabload.core.config import settings
from tabload.core.logging import get_logger, LogTimer
from tabload.infrastructure.sources import open_source, source_label
from tabload.utils.text import make_names, tidy_unique

logger = get_logger(__name__)

ColNames = Union[bool, Sequence[str]]

_UNNAMED = re.compile(r"^Unnamed: \d+$")


# ----------------
# HELPERS
# ----------------

def _quote_kwargs(quote: Optional[str]) -> dict:
    """pandas takes a single quote character; an empty string disables quoting."""
    if not quote:
        return {"quoting": csv.QUOTE_NONE}
    return {"quotechar": quote[0]}


def _rewindable(handle: Any) -> Any:
    """Make sure a file object can be read twice."""
    if not hasattr(handle, "read"):
        return handle
    if hasattr(handle, "seekable") and handle.seekable():
        return handle
    data = handle.read()
    return io.BytesIO(data) if isinstance(data, bytes) else io.StringIO(data)


def _rewind(handle: Any, position: Optional[int]) -> None:
    if position is not None:
        handle.seek(position)


def _string_columns(df: pd.DataFrame) -> List[str]:
    return [col for col in df.columns if is_string_dtype(df[col].dtype) and not isinstance(df[col].dtype, pd.CategoricalDtype)]


def _finish(df: pd.DataFrame, timer: LogTimer) -> pd.DataFrame:
    timer.update(rows=int(df.shape[0]), columns=int(df.shape[1]))
    return df


# ----------------
# CLASSIC READERS
# ----------------

def read_table(
    source: Any,
    header: bool = False,
    sep: str = "",
    quote: str = "\"'",
    dec: str = ".",
    na_strings: Iterable[str] = ("NA",),
    skip: int = 0,
    nrows: int = -1,
    comment_char: str = "#",
    col_names: Optional[Sequence[str]] = None,
    row_names: Optional[Union[int, str]] = None,
    check_names: bool = True,
    strings_as_factors: bool = False,
    strip_white: bool = False,
    encoding: Optional[str] = None,
) -> pd.DataFrame:
    """Read a delimited text table into a DataFrame.

    Args:
        source: Local path, URL or open file object
        header: Whether the first line holds the column names
        sep: Field separator; "" means any run of whitespace
        quote: Quote characters (only the first one is honoured)
        dec: Decimal mark
        na_strings: Extra values treated as missing; blank fields always are
        skip: Lines to skip before reading
        nrows: Maximum data rows to read (-1 for all)
        comment_char: Single comment character ("" disables)
        col_names: Explicit column names
        row_names: 1-based column position or column name to use as row names
        check_names: Repair names into valid, unique identifiers
        strings_as_factors: Convert string columns to categoricals
        strip_white: Strip leading whitespace from unquoted fields
        encoding: Text encoding (defaults to ``settings.default_encoding``)

    Returns:
        Parsed DataFrame. If ``header`` is set and the header line has one
        field fewer than the data rows, the first column becomes the index.

    Raises:
        FileNotFoundError: If a local source does not exist
        pandas.errors.ParserError: If rows cannot be tokenized
        pandas.errors.EmptyDataError: If the source has no columns
    """
    label = source_label(source)
    with LogTimer(logger, "read_table", source=label) as timer:
        handle, compression = open_source(source)

        if isinstance(row_names, int):
            if row_names < 1:
                raise ValueError("row_names position is 1-based")
            index_col: Any = row_names - 1
        else:
            index_col = row_names

        df = pd.read_csv(
            handle,
            sep=r"\s+" if sep == "" else sep,
            header=0 if header else None,
            names=list(col_names) if col_names is not None else None,
            index_col=index_col,
            decimal=dec,
            skiprows=skip or None,
            nrows=None if nrows is None or nrows < 0 else nrows,
            comment=comment_char or None,
            na_values=list(na_strings) + [""],
            keep_default_na=False,
            skipinitialspace=strip_white,
            encoding=encoding or settings.default_encoding,
            compression=compression,
            **_quote_kwargs(quote),
        )

        if row_names is not None:
            df.index.name = None

        if not header and col_names is None:
            df.columns = [f"V{i}" for i in range(1, df.shape[1] + 1)]
        elif check_names:
            raw = ["" if _UNNAMED.match(str(c)) else c for c in df.columns]
            df.columns = make_names(raw)

        if strings_as_factors:
            for col in _string_columns(df):
                df[col] = df[col].astype("category")

        return _finish(df, timer)


def read_csv(source: Any, header: bool = True, sep: str = ",", quote: str = "\"",
             dec: str = ".", comment_char: str = "", **kwargs) -> pd.DataFrame:
    """Comma-separated ``read_table`` with a header row."""
    return read_table(source, header=header, sep=sep, quote=quote, dec=dec,
                      comment_char=comment_char, **kwargs)


def read_csv2(source: Any, header: bool = True, sep: str = ";", quote: str = "\"",
              dec: str = ",", comment_char: str = "", **kwargs) -> pd.DataFrame:
    """Semicolon-separated ``read_table`` with comma decimals."""
    return read_table(source, header=header, sep=sep, quote=quote, dec=dec,
                      comment_char=comment_char, **kwargs)


def read_delim(source: Any, header: bool = True, sep: str = "\t", quote: str = "\"",
               dec: str = ".", comment_char: str = "", **kwargs) -> pd.DataFrame:
    """Tab-separated ``read_table`` with a header row."""
    return read_table(source, header=header, sep=sep, quote=quote, dec=dec,
                      comment_char=comment_char, **kwargs)


def read_delim2(source: Any, header: bool = True, sep: str = "\t", quote: str = "\"",
                dec: str = ",", comment_char: str = "", **kwargs) -> pd.DataFrame:
    """Tab-separated ``read_table`` with comma decimals."""
    return read_table(source, header=header, sep=sep, quote=quote, dec=dec,
                      comment_char=comment_char, **kwargs)


# ----------------
# TIDY READERS
# ----------------

def read_delim_tidy(
    source: Any,
    delim: str,
    col_names: ColNames = True,
    skip: int = 0,
    n_max: Optional[int] = None,
    na: Iterable[str] = ("", "NA"),
    comment: Optional[str] = None,
    trim_ws: bool = True,
    quote: str = "\"",
    encoding: Optional[str] = None,
) -> pd.DataFrame:
    """Read a delimited file the tidy way.

    Column names are kept as written; blanks and repeats are repaired with
    ``tidy_unique``. ``col_names=False`` names columns ``X1..Xn``; a list
    supplies the names and treats the first line as data. No row index is
    ever inferred.
    """
    if not delim:
        raise ValueError("delim must be a non-empty string")

    label = source_label(source)
    with LogTimer(logger, "read_delim_tidy", source=label) as timer:
        handle, compression = open_source(source)
        handle = _rewindable(handle)
        start = handle.tell() if hasattr(handle, "read") else None

        common = dict(
            sep=delim,
            comment=comment or None,
            skipinitialspace=trim_ws,
            encoding=encoding or settings.default_encoding,
            compression=compression,
            **_quote_kwargs(quote),
        )

        names: Optional[List[str]] = None
        if col_names is True:
            # First pass reads the header row verbatim; pandas would mangle repeats
            head = pd.read_csv(handle, header=None, nrows=1, skiprows=skip or None,
                               dtype=str, keep_default_na=False, **common)
            raw = [str(v).strip() if trim_ws else str(v) for v in head.iloc[0].tolist()] if len(head) else []
            names = tidy_unique(raw)
            _rewind(handle, start)
        elif col_names is not False:
            names = list(col_names)

        df = pd.read_csv(
            handle,
            header=0 if col_names is True else None,
            names=None if col_names is True else names,
            index_col=False,
            skiprows=skip or None,
            nrows=n_max,
            na_values=list(na),
            keep_default_na=False,
            **common,
        )

        if col_names is True:
            df.columns = names
        elif col_names is False:
            df.columns = [f"X{i}" for i in range(1, df.shape[1] + 1)]

        if trim_ws:
            for col in _string_columns(df):
                df[col] = df[col].str.strip()

        return _finish(df, timer)


def read_csv_tidy(source: Any, **kwargs) -> pd.DataFrame:
    """Comma-separated ``read_delim_tidy``."""
    return read_delim_tidy(source, delim=",", **kwargs)


def read_tsv_tidy(source: Any, **kwargs) -> pd.DataFrame:
    """Tab-separated ``read_delim_tidy``."""
    return read_delim_tidy(source, delim="\t", **kwargs)


# ----------------
# WRITERS
# ----------------

def write_table(
    df: pd.DataFrame,
    path: Union[str, Path],
    sep: str = " ",
    quote: bool = True,
    row_names: bool = True,
    col_names: bool = True,
    na: str = "NA",
    dec: str = ".",
    encoding: Optional[str] = None,
) -> Path:
    """Write a DataFrame as delimited text.

    With ``quote=True`` every non-numeric field (names included) is quoted.
    Returns the path written.
    """
    path = Path(path)
    with LogTimer(logger, "write_table", file=str(path), rows=int(df.shape[0]), columns=int(df.shape[1])):
        quoting = {"quoting": csv.QUOTE_NONNUMERIC} if quote else {"quoting": csv.QUOTE_NONE, "escapechar": "\\"}
        df.to_csv(
            path,
            sep=sep,
            index=row_names,
            header=col_names,
            na_rep=na,
            decimal=dec,
            encoding=encoding or settings.default_encoding,
            **quoting,
        )
    return path


def write_csv(df: pd.DataFrame, path: Union[str, Path], row_names: bool = True,
              na: str = "NA", **kwargs) -> Path:
    """Comma-separated ``write_table``."""
    return write_table(df, path, sep=",", row_names=row_names, na=na, **kwargs)


READERS = {
    "table": read_table,
    "csv": read_csv,
    "csv2": read_csv2,
    "delim": read_delim,
    "delim2": read_delim2,
    "tidy_delim": read_delim_tidy,
    "tidy_csv": read_csv_tidy,
    "tidy_tsv": read_tsv_tidy,
}
