"""
Unit tests for the spreadsheet reader.
"""

import sys
from io import BytesIO
from pathlib import Path

import pytest
import xlsxwriter

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from teslashop.file_loader import (
    EmptyFileError,
    UnsupportedFileError,
    grid_rows,
    is_supported,
    load_upload,
    sniff_csv_delimiter,
)


def make_xlsx(rows):
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})
    ws = workbook.add_worksheet()
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if value is not None:
                ws.write(r, c, value)
    workbook.close()
    return output.getvalue()


def test_supported_extensions_case_insensitive():
    assert is_supported("parts.CSV")
    assert is_supported("parts.xlsx")
    assert is_supported("parts.XLS")
    assert not is_supported("parts.txt")
    assert not is_supported("parts")


def test_unsupported_extension_rejected():
    with pytest.raises(UnsupportedFileError):
        load_upload(b"a,b\n1,2\n", "parts.txt")


def test_empty_upload_rejected():
    with pytest.raises(EmptyFileError):
        load_upload(b"", "parts.csv")
    with pytest.raises(EmptyFileError):
        load_upload(b"\n  \n", "parts.csv")


def test_csv_cells_are_text_and_quotes_respected():
    content = b'title,sku,price_1pc\n"Bumper, Front",BN-1,"$1,234.56"\n'
    rows = grid_rows(load_upload(content, "parts.csv"))
    assert rows[0] == ["title", "sku", "price_1pc"]
    assert rows[1] == ["Bumper, Front", "BN-1", "$1,234.56"]


def test_csv_ragged_rows_padded_with_none():
    rows = grid_rows(load_upload(b"title,sku,price_1pc\nDoor,DH-1\n", "parts.csv"))
    assert rows[1] == ["Door", "DH-1", None]


def test_csv_blank_line_keeps_row_position():
    rows = grid_rows(load_upload(b"title,sku\nDoor,DH-1\n\nSeat,ST-1\n", "parts.csv"))
    assert len(rows) == 4
    assert rows[3][0] == "Seat"


def test_csv_utf8_bom_stripped():
    rows = grid_rows(load_upload("title,sku\nDoor,DH-1\n".encode("utf-8-sig"), "parts.csv"))
    assert rows[0][0] == "title"


def test_csv_latin1_fallback():
    rows = grid_rows(load_upload("title,sku\nD\xe9flecteur,DF-1\n".encode("latin-1"), "parts.csv"))
    assert rows[1][0] == "D\xe9flecteur"


def test_csv_semicolon_delimiter():
    rows = grid_rows(load_upload(b"title;sku;price_1pc\nDoor;DH-1;29.99\n", "parts.csv"))
    assert rows[1] == ["Door", "DH-1", "29.99"]


def test_sniffer_without_sample():
    assert sniff_csv_delimiter("") is None


def test_xlsx_keeps_native_types():
    content = make_xlsx([
        ["title", "sku", "price_1pc", "weight"],
        ["Front Bumper", "BN-TE-3-0004", 44, None],
    ])
    rows = grid_rows(load_upload(content, "model3_parts.xlsx"))
    assert rows[0] == ["title", "sku", "price_1pc", "weight"]
    assert rows[1][0] == "Front Bumper"
    assert rows[1][2] == 44
    assert rows[1][3] is None


def test_comma_header_ignores_other_delimiters():
    rows = grid_rows(load_upload(b"title,sku;code,price_1pc\nDoor,DH-1;A,29.99\n", "parts.csv"))
    assert rows[0] == ["title", "sku;code", "price_1pc"]
    assert sniff_csv_delimiter("title|sku,price") == ","
