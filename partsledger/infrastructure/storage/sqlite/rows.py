"""Row-to-entity conversion shared by the SQLite stores."""

from datetime import datetime

import aiosqlite

from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.entities.part import Part, utcnow
from partsledger.core.entities.stock import MovementKind, StockMovement


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp column, None when empty or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def to_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def row_to_part(row: aiosqlite.Row) -> Part:
    """Convert a database row to a Part entity."""
    return Part(
        id=row["id"],
        code=row["code"],
        name=row["name"],
        description=row["description"],
        price=float(row["price"]),
        stock=int(row["stock"]),
        created_at=parse_timestamp(row["created_at"]) or utcnow(),
        updated_at=parse_timestamp(row["updated_at"]) or utcnow(),
    )


def row_to_movement(row: aiosqlite.Row) -> StockMovement:
    """Convert a database row to a StockMovement entity."""
    return StockMovement(
        id=row["id"],
        part_id=row["part_id"],
        user_id=row["user_id"],
        kind=MovementKind(row["kind"]),
        quantity=int(row["quantity"]),
        stock_before=int(row["stock_before"]),
        stock_after=int(row["stock_after"]),
        reference=row["reference"],
        note=row["note"],
        created_at=parse_timestamp(row["created_at"]) or utcnow(),
    )


def row_to_order_item(row: aiosqlite.Row) -> OrderItem:
    """Convert a database row to an OrderItem entity."""
    return OrderItem(
        id=row["id"],
        order_id=row["order_id"],
        part_id=row["part_id"],
        quantity=int(row["quantity"]),
        unit_price=float(row["unit_price"]),
    )


def row_to_order(row: aiosqlite.Row, items: list[OrderItem]) -> Order:
    """Convert a database row plus its item rows to an Order entity."""
    return Order(
        id=row["id"],
        order_number=row["order_number"],
        status=OrderStatus(row["status"]),
        note=row["note"],
        rejection_reason=row["rejection_reason"],
        requested_by=row["requested_by"],
        approved_by=row["approved_by"],
        approved_at=parse_timestamp(row["approved_at"]),
        ordered_at=parse_timestamp(row["ordered_at"]),
        received_at=parse_timestamp(row["received_at"]),
        total_amount=float(row["total_amount"]),
        items=items,
        created_at=parse_timestamp(row["created_at"]) or utcnow(),
        updated_at=parse_timestamp(row["updated_at"]) or utcnow(),
    )
