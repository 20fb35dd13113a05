"""Tests for catalog CSV row mapping and part field rules."""

import pytest

from partsledger.core.entities.part import Part
from partsledger.core.exceptions import ValidationError
from partsledger.core.services.catalog import (
    clean_text,
    validate_opening_stock,
    validate_part_fields,
)
from partsledger.core.services.catalog_csv import (
    BOM,
    CSV_HEADER,
    RowError,
    export_csv,
    iter_csv_rows,
    parse_row,
)

HEADER = ",".join(CSV_HEADER)


class TestIterCsvRows:
    def test_skips_header_and_blank_lines(self):
        text = f"{HEADER}\nP-1,Bolt,,10,5\n\n  \nP-2,Nut,,2,0\n"
        rows = list(iter_csv_rows(text))
        assert [line for line, _ in rows] == [2, 5]
        assert rows[0][1] == ["P-1", "Bolt", "", "10", "5"]

    def test_strips_bom(self):
        rows = list(iter_csv_rows(f"{BOM}{HEADER}\nP-1,Bolt,,10,5\n"))
        assert len(rows) == 1

    def test_quoted_fields(self):
        text = f'{HEADER}\nP-1,"Bolt, M8","says ""hi""",10,5\n'
        (_, fields), = iter_csv_rows(text)
        assert fields[1] == "Bolt, M8"
        assert fields[2] == 'says "hi"'

    def test_header_only(self):
        assert list(iter_csv_rows(HEADER)) == []


class TestParseRow:
    def test_valid_row(self):
        row = parse_row(["P-1", "Bolt", "", "12.5", "3"])
        assert row.code == "P-1"
        assert row.description is None
        assert row.price == 12.5
        assert row.stock == 3

    def test_too_few_columns(self):
        with pytest.raises(RowError, match="expected 5 columns, got 3"):
            parse_row(["P-1", "Bolt", ""])

    def test_price_not_numeric(self):
        with pytest.raises(RowError, match="price is not a number"):
            parse_row(["P-1", "Bolt", "", "abc", "3"])

    @pytest.mark.parametrize("price", ["nan", "inf", "-inf"])
    def test_price_not_finite(self, price):
        with pytest.raises(RowError, match="price must be a finite number"):
            parse_row(["P-1", "Bolt", "", price, "3"])

    def test_stock_not_integer(self):
        with pytest.raises(RowError, match="stock is not an integer"):
            parse_row(["P-1", "Bolt", "", "1", "3.5"])

    def test_collects_all_problems(self):
        with pytest.raises(RowError) as exc_info:
            parse_row(["", "", "", "-1", "-2"])
        message = str(exc_info.value)
        assert "part code is required" in message
        assert "part name is required" in message
        assert "price must be 0 or more" in message
        assert "stock must be 0 or more" in message


class TestExportCsv:
    def test_bom_header_and_rows(self):
        parts = [
            Part(code="P-1", name="Bolt", price=10.0, stock=5),
            Part(code="P-2", name="Nut, M8", description="zinc", price=2.5, stock=0),
        ]
        text = export_csv(parts)
        assert text.startswith(BOM)
        lines = text[len(BOM):].splitlines()
        assert lines[0] == "部品コード,部品名,説明,価格,在庫数"
        assert lines[1] == "P-1,Bolt,,10,5"
        assert lines[2] == 'P-2,"Nut, M8",zinc,2.5,0'

    def test_export_is_importable(self):
        text = export_csv([Part(code="P-1", name="Bolt", price=10.0, stock=5)])
        (_, fields), = iter_csv_rows(text)
        row = parse_row(fields)
        assert (row.code, row.price, row.stock) == ("P-1", 10.0, 5)


class TestPartFields:
    def test_strips(self):
        assert validate_part_fields("  P-1 ", " Bolt ", 0) == ("P-1", "Bolt")

    @pytest.mark.parametrize(
        ("code", "name", "price", "field"),
        [
            ("", "Bolt", 0, "code"),
            ("P-1", "  ", 0, "name"),
            ("P-1", "Bolt", -1, "price"),
            ("P-1", "Bolt", float("nan"), "price"),
            ("P-1", "Bolt", float("inf"), "price"),
        ],
    )
    def test_invalid(self, code, name, price, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_part_fields(code, name, price)
        assert exc_info.value.details["field"] == field

    def test_opening_stock(self):
        assert validate_opening_stock(0) == 0
        with pytest.raises(ValidationError):
            validate_opening_stock(-1)

    def test_clean_text(self):
        assert clean_text("  ") is None
        assert clean_text(None) is None
        assert clean_text(" a ") == "a"
