from datetime import datetime

import pytest
from openpyxl import Workbook

from excel_reader import CURRENCY_SYMBOLS, IngestionError, format_cell, read_excel_rows, read_header
from sheet_normalizer import CONFIG, CurrencyRule


def _save(tmp_path, rows, formats=None):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    for coordinate, number_format in (formats or {}).items():
        sheet[coordinate].number_format = number_format
    path = tmp_path / "input.xlsx"
    workbook.save(path)
    return path


def test_header_fallback_and_duplicates():
    assert read_header(["ID", None, "Name", "  ", "Name", "Name"]) == [
        "ID",
        "Column2",
        "Name",
        "Column4",
        "Name_1",
        "Name_2",
    ]


def test_trailing_blank_header_cells_are_dropped():
    assert read_header(["ID", "Name", None, None]) == ["ID", "Name"]


def test_reads_rows_as_display_text(tmp_path):
    path = _save(
        tmp_path,
        [
            ["ID", "Name", "Price", "Name", "Joined", "Active"],
            [101, "  Melisa ", 99.99, "Test", datetime(2024, 1, 15), True],
        ],
    )
    rows = read_excel_rows(path)

    assert rows == [
        {
            "ID": "101",
            "Name": "Melisa",
            "Price": "99.99",
            "Name_1": "Test",
            "Joined": "2024-01-15",
            "Active": "TRUE",
        }
    ]


def test_blank_cells_become_none_and_blank_rows_are_skipped(tmp_path):
    path = _save(tmp_path, [["A", "B"], ["x", None], [None, None], ["y", "   "]])
    assert read_excel_rows(path) == [{"A": "x", "B": None}, {"A": "y", "B": None}]


def test_currency_and_percent_formats_are_kept_in_text(tmp_path):
    path = _save(
        tmp_path,
        [["Fee", "Price", "Share"], [50, 60, 0.25]],
        formats={"A2": '#,##0.00 "€"', "B2": '"$"#,##0', "C2": "0%"},
    )
    assert read_excel_rows(path) == [{"Fee": "50.00 €", "Price": "$60", "Share": "25%"}]


def test_format_cell_values():
    assert format_cell(None) is None
    assert format_cell("   ") is None
    assert format_cell(3.0) == "3"
    assert format_cell(False) == "FALSE"
    assert format_cell(datetime(2024, 1, 15, 8, 30)) == "2024-01-15T08:30:00"


def test_missing_workbook(tmp_path):
    with pytest.raises(IngestionError):
        read_excel_rows(tmp_path / "missing.xlsx")


def test_unreadable_workbook(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")
    with pytest.raises(IngestionError):
        read_excel_rows(path)


def test_sheet_without_header(tmp_path):
    path = tmp_path / "empty.xlsx"
    Workbook().save(path)
    with pytest.raises(IngestionError):
        read_excel_rows(path)


@pytest.mark.parametrize("symbol", list(CURRENCY_SYMBOLS))
def test_formatted_amounts_split_with_the_configured_symbols(symbol):
    rule = CurrencyRule(CONFIG["HEURISTICS"]["CURRENCY_SYMBOLS"])
    for number_format in (f'0.00 "{symbol}"', f'"{symbol}"0.00'):
        text = format_cell(50, number_format)
        assert rule.attempt("Fee", text) == {"Fee_Amount": 50.0, "Fee_Currency": symbol}


def test_reader_uses_the_symbols_it_is_given(tmp_path):
    path = _save(tmp_path, [["Fee"], [50]], formats={"A2": '0 "R"'})
    assert read_excel_rows(path) == [{"Fee": "50"}]
    assert read_excel_rows(path, currency_symbols="R") == [{"Fee": "50 R"}]
