# io_utils.py
"""
Loading samples and contingency tables from pasted text or uploaded files.

Tables come back as `(DataFrame, header_used)`. Headers are auto-detected (a
first row with no numeric cells followed by numeric rows) unless forced with
`header_override` = "Force header" / "Force no header".
"""

from typing import Dict, List, Optional, Tuple
import csv
import io
import logging
import re

import numpy as np
import pandas as pd

from backend import ContingencyTable

logger = logging.getLogger(__name__)

HEADER_MODES = ("Auto-detect", "Force header", "Force no header")


def _is_numeric_token(tok) -> bool:
    if tok is None or pd.isna(tok):
        return False
    try:
        float(str(tok))
        return True
    except ValueError:
        return False


def _detect_header(rows: List[list], header_override: str) -> bool:
    if header_override not in HEADER_MODES:
        raise ValueError(f"header_override must be one of {HEADER_MODES}, got {header_override!r}.")
    if header_override == "Force header":
        return True
    if header_override == "Force no header" or not rows:
        return False
    first_numeric = sum(1 for tok in rows[0] if _is_numeric_token(tok))
    later_numeric = sum(1 for r in rows[1:] for tok in r if _is_numeric_token(tok))
    return first_numeric == 0 and later_numeric >= 1


def _rows_to_frame(rows: List[list], header_override: str) -> Tuple[pd.DataFrame, bool]:
    """Shared tail of both readers: pad rows, apply the header rule, normalize blanks."""
    if not rows:
        return pd.DataFrame(), False
    max_cols = max(len(r) for r in rows)
    rows = [list(r) + [None] * (max_cols - len(r)) for r in rows]

    header_used = _detect_header(rows, header_override)
    if header_used:
        columns = [
            str(c) if (c is not None and not pd.isna(c)) else f"col{i}"
            for i, c in enumerate(rows[0], start=1)
        ]
        df = pd.DataFrame(rows[1:], columns=columns)
    else:
        df = pd.DataFrame(rows, columns=[f"col{i}" for i in range(1, max_cols + 1)])

    for col in df.columns:
        if df[col].dtype == object:
            df[col] = df[col].replace({"": pd.NA, " ": pd.NA})
    return df, header_used


# -------------------------
# IO helper (paste text)
# -------------------------
def parse_table_from_text(raw_text: str, header_override: str = "Auto-detect") -> Tuple[pd.DataFrame, bool]:
    """
    Parse a pasted text table into a DataFrame.

    Tabs take precedence over commas as the delimiter; text with neither is read
    as a single column. Blank lines are skipped.

    Returns
    -------
    Tuple[pandas.DataFrame, bool]
        (df, header_used).
    """
    lines = [ln.rstrip() for ln in raw_text.splitlines()]
    lines = [ln for ln in lines if ln.strip() != ""]

    if any("\t" in ln for ln in lines):
        delim_regex = r"[\t]+"
    elif any("," in ln for ln in lines):
        delim_regex = r"[,]+"
    else:
        delim_regex = None

    if delim_regex is None:
        rows = [[ln.strip()] for ln in lines]
    else:
        rows = [[p.strip() for p in re.split(delim_regex, ln)] for ln in lines]
    return _rows_to_frame(rows, header_override)


# -------------------------
# IO helper (uploaded bytes)
# -------------------------
def read_table_from_bytes(
    content: bytes,
    filename: str = "uploaded_file",
    header_override: str = "Auto-detect",
) -> Tuple[pd.DataFrame, bool]:
    """
    Read a bytes payload (uploaded file) into a pandas DataFrame.

    Parameters
    ----------
    content : bytes
        Raw bytes of the uploaded file.
    filename : str, optional
        Original filename (used to guess extension), by default "uploaded_file".
    header_override : str, optional
        One of {"Auto-detect", "Force header", "Force no header"}.

    Returns
    -------
    Tuple[pandas.DataFrame, bool]
        (df, header_used).

    Raises
    ------
    ValueError
        If an Excel file cannot be read (missing optional engine or corrupt file).
    """
    fname = (filename or "").lower()
    ext = fname.split(".")[-1] if "." in fname else ""

    if ext in ("xls", "xlsx"):
        # .xls needs xlrd, .xlsx openpyxl (the "excel" extra)
        engine = "xlrd" if ext == "xls" else "openpyxl"
        try:
            raw = pd.read_excel(io.BytesIO(content), header=None, dtype=object, engine=engine)
        except ImportError as e:
            raise ValueError(
                f"Unable to read .{ext} files because the optional dependency '{engine}' is not installed. "
                f"Install it (pip install {engine}) or save the file as .csv."
            ) from e
        except Exception as e:
            raise ValueError(f"Failed to read .{ext} file '{filename}': {e}") from e
        return _rows_to_frame(raw.where(raw.notna(), None).values.tolist(), header_override)

    try:
        raw = pd.read_csv(io.BytesIO(content), header=None, dtype=object, sep=None, engine="python")
    except (csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        # sniffing failed; fall back to plain text parsing
        logger.debug("CSV sniffing failed for %r (%s); parsing as text", filename, e)
        text = content.decode("utf-8", errors="replace")
        return parse_table_from_text(text, header_override=header_override)
    return _rows_to_frame(raw.where(raw.notna(), None).values.tolist(), header_override)


# -------------------------
# Frame -> test inputs
# -------------------------
def samples_from_frame(df: pd.DataFrame, columns: Optional[List[str]] = None) -> Dict[str, np.ndarray]:
    """
    Numeric samples from DataFrame columns.

    Non-numeric cells are treated as missing and dropped; columns with no numeric
    values at all are skipped.

    Returns
    -------
    dict
        Column name -> float array.
    """
    names = list(df.columns) if columns is None else list(columns)
    samples = {}
    for name in names:
        values = pd.to_numeric(df[name], errors="coerce").dropna().to_numpy(dtype=float)
        if values.size == 0:
            logger.debug("Column %r has no numeric values; skipped", name)
            continue
        samples[str(name)] = values
    return samples


def contingency_table_from_frame(df: pd.DataFrame, label_column: Optional[str] = None) -> ContingencyTable:
    """
    Contingency table from a DataFrame of counts.

    Parameters
    ----------
    df : pandas.DataFrame
        Count table. Every cell must be numeric.
    label_column : str, optional
        Column holding row labels; it is removed from the counts.

    Raises
    ------
    ValueError
        If a count cell is missing or non-numeric.
    """
    if label_column is not None:
        df = df.set_index(label_column)
    counts = df.apply(pd.to_numeric, errors="coerce")
    if counts.isna().any().any():
        raise ValueError("Contingency table contains missing or non-numeric counts.")
    return ContingencyTable.from_frame(counts)
