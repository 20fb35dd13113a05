"""
Stock ledger rules.

Pure functions that decide what a movement does to a part's stock. Storage
implementations call `plan_movement` inside the same locked transaction that
reads the current stock, so the check and the write see the same value.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import (
    InsufficientStockError,
    NoChangeError,
    ValidationError,
)

NOTE_SEPARATOR = " / "


@dataclass(frozen=True)
class LedgerPosting:
    """The effect of one accepted movement, ready to be written."""

    kind: MovementKind
    quantity: int
    stock_before: int
    stock_after: int
    note: str | None


def validate_quantity(kind: MovementKind, quantity: object) -> int:
    """Check the caller-supplied quantity (or ADJUST target) and return it."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity", "must be an integer", quantity)
    if kind == MovementKind.ADJUST:
        if quantity < 0:
            raise ValidationError("quantity", "adjusted stock must be 0 or more", quantity)
    elif quantity < 1:
        raise ValidationError("quantity", "must be 1 or more", quantity)
    return quantity


def adjustment_note(old_stock: int, new_stock: int, note: str | None = None) -> str:
    """Summarize a stock correction, followed by the caller's note if any."""
    delta = new_stock - old_stock
    summary = f"Stock adjusted: {old_stock} → {new_stock} (Δ{delta:+d})"
    if note:
        return f"{summary}{NOTE_SEPARATOR}{note}"
    return summary


def plan_movement(
    part_id: int,
    stock: int,
    kind: MovementKind,
    quantity: int,
    note: str | None = None,
) -> LedgerPosting:
    """
    Apply the ledger rules to the current stock.

    For IN/OUT `quantity` is the number of units moved. For ADJUST it is the
    counted stock the part should end at.

    Raises:
        ValidationError: quantity is not a valid integer for the kind
        InsufficientStockError: OUT larger than current stock
        NoChangeError: ADJUST to the current stock
    """
    quantity = validate_quantity(kind, quantity)
    note = note.strip() if note else None

    if kind == MovementKind.IN:
        return LedgerPosting(kind, quantity, stock, stock + quantity, note or None)

    if kind == MovementKind.OUT:
        if quantity > stock:
            raise InsufficientStockError(part_id, requested=quantity, available=stock)
        return LedgerPosting(kind, quantity, stock, stock - quantity, note or None)

    delta = quantity - stock
    if delta == 0:
        raise NoChangeError(part_id, stock)
    return LedgerPosting(
        kind,
        abs(delta),
        stock,
        quantity,
        adjustment_note(stock, quantity, note),
    )


def replay(movements: Iterable[StockMovement], opening_stock: int = 0) -> int:
    """Rebuild stock from movements in chronological order."""
    stock = opening_stock
    for movement in movements:
        stock += movement.signed_delta
    return stock
