# test_io_utils.py
# run as: pytest -q test_io_utils.py
import io

import numpy as np
import pandas as pd
import pytest

import backend
from io_utils import (
    contingency_table_from_frame,
    parse_table_from_text,
    read_table_from_bytes,
    samples_from_frame,
)


# -------------------------
# Pasted text
# -------------------------
def test_tab_text_with_header():
    df, header_used = parse_table_from_text("before\tafter\n312\t300\n242\t201\n340\t232\n")
    assert header_used
    assert list(df.columns) == ["before", "after"]
    assert len(df) == 3


def test_tabs_take_precedence_over_commas():
    # commas inside cells stay in the cell when tabs are present
    df, _ = parse_table_from_text("a\tb\n1,5\t2\n", header_override="Force header")
    assert df.loc[0, "a"] == "1,5"


def test_comma_text_without_header():
    df, header_used = parse_table_from_text("1,2\n3,4\n\n5,6")
    assert not header_used
    assert list(df.columns) == ["col1", "col2"]
    assert len(df) == 3


def test_single_column_text():
    df, header_used = parse_table_from_text("4.5\n5.0\n5.5\n")
    assert not header_used
    assert list(df.columns) == ["col1"]


@pytest.mark.parametrize("mode, header_used, rows", [
    ("Force header", True, 1),
    ("Force no header", False, 2),
])
def test_forced_header_modes(mode, header_used, rows):
    df, used = parse_table_from_text("1,2\n3,4", header_override=mode)
    assert used is header_used
    assert len(df) == rows


def test_invalid_header_mode():
    with pytest.raises(ValueError):
        parse_table_from_text("a,b\n1,2", header_override="Sometimes")


def test_blank_cells_become_missing():
    df, _ = parse_table_from_text("a\tb\n1\t\n3\t4")
    assert pd.isna(df.loc[0, "b"])


# -------------------------
# Uploaded bytes
# -------------------------
def test_read_csv_bytes():
    df, header_used = read_table_from_bytes(b"a,b\n1,2\n3,4\n", "data.csv")
    assert header_used
    assert list(df.columns) == ["a", "b"]
    samples = samples_from_frame(df)
    np.testing.assert_array_equal(samples["a"], [1.0, 3.0])
    np.testing.assert_array_equal(samples["b"], [2.0, 4.0])


def test_read_xlsx_bytes():
    pytest.importorskip("openpyxl")
    buffer = io.BytesIO()
    pd.DataFrame({"left": [1, 2, 3], "right": [2, 4, 7]}).to_excel(buffer, index=False)
    df, header_used = read_table_from_bytes(buffer.getvalue(), "upload.xlsx")
    assert header_used
    samples = samples_from_frame(df)
    np.testing.assert_array_equal(samples["right"], [2.0, 4.0, 7.0])


def test_corrupt_excel_raises_value_error():
    pytest.importorskip("openpyxl")
    with pytest.raises(ValueError):
        read_table_from_bytes(b"not a spreadsheet", "upload.xlsx")


# -------------------------
# Frame -> test inputs
# -------------------------
def test_samples_skip_non_numeric_columns():
    df = pd.DataFrame({"name": ["a", "b", "c"], "score": ["1", "x", "3"]})
    samples = samples_from_frame(df)
    assert list(samples) == ["score"]
    np.testing.assert_array_equal(samples["score"], [1.0, 3.0])


def test_samples_for_selected_columns():
    df = pd.DataFrame({"a": [1, 2], "b": [3, 4], "c": [5, 6]})
    assert list(samples_from_frame(df, columns=["c", "a"])) == ["c", "a"]


def test_contingency_table_from_pasted_text():
    df, _ = parse_table_from_text("group,A,B\nX,20,18\nY,7,35\n")
    table = contingency_table_from_frame(df, label_column="group")
    assert table.row_labels == ("X", "Y")
    assert table.column_labels == ("A", "B")
    np.testing.assert_array_equal(table.observed, [[20, 18], [7, 35]])
    result = backend.chi_squared_test_of_independence(table)
    assert not result.null_accepted


def test_contingency_table_rejects_missing_counts():
    df, _ = parse_table_from_text("A,B\n20,\n7,35\n")
    with pytest.raises(ValueError, match="missing or non-numeric"):
        contingency_table_from_frame(df)
