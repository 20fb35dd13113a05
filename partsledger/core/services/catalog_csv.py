"""
Catalog CSV row mapping.

The import/export row schema is fixed: code, name, description, price,
stock, with Japanese header labels. Files are UTF-8, optionally with a BOM.
"""

import csv
import io
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from partsledger.core.entities.part import Part

CSV_HEADER = ["部品コード", "部品名", "説明", "価格", "在庫数"]
CSV_COLUMNS = len(CSV_HEADER)
BOM = "\ufeff"


class RowError(ValueError):
    """A single import row could not be mapped to a part record."""


@dataclass(frozen=True)
class PartRow:
    """One validated catalog row."""

    code: str
    name: str
    description: str | None
    price: float
    stock: int


def iter_csv_rows(text: str) -> Iterator[tuple[int, list[str]]]:
    """
    Yield (line number, fields) for every data row.

    Line numbers are 1-indexed file lines; the header is line 1 and is
    skipped. Blank lines are ignored.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    reader = csv.reader(io.StringIO(text))
    for fields in reader:
        if reader.line_num == 1 or not any(f.strip() for f in fields):
            continue
        yield reader.line_num, [f.strip() for f in fields]


def parse_row(fields: list[str]) -> PartRow:
    """
    Map raw CSV fields to a PartRow.

    Raises:
        RowError: with a message describing every problem found
    """
    if len(fields) < CSV_COLUMNS:
        raise RowError(f"expected {CSV_COLUMNS} columns, got {len(fields)}")

    code, name, description, price_raw, stock_raw = fields[:CSV_COLUMNS]

    try:
        price = float(price_raw)
    except ValueError:
        raise RowError(f"price is not a number ({price_raw})") from None
    try:
        stock = int(stock_raw)
    except ValueError:
        raise RowError(f"stock is not an integer ({stock_raw})") from None

    problems = []
    if not code:
        problems.append("part code is required")
    if not name:
        problems.append("part name is required")
    if not math.isfinite(price):
        problems.append("price must be a finite number")
    elif price < 0:
        problems.append("price must be 0 or more")
    if stock < 0:
        problems.append("stock must be 0 or more")
    if problems:
        raise RowError(", ".join(problems))

    return PartRow(
        code=code,
        name=name,
        description=description or None,
        price=price,
        stock=stock,
    )


def _format_price(price: float) -> str:
    return str(int(price)) if float(price).is_integer() else str(price)


def export_csv(parts: Iterable[Part]) -> str:
    """Render parts as CSV text with BOM and header row."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for part in parts:
        writer.writerow([
            part.code,
            part.name,
            part.description or "",
            _format_price(part.price),
            part.stock,
        ])
    return BOM + output.getvalue()
