"""SQLite implementation of purchase order storage."""

from datetime import datetime
from typing import Any

import aiosqlite

from partsledger.config import get_logger
from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.entities.part import utcnow
from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    PartNotFoundError,
)
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.services.order_workflow import (
    OrderAction,
    next_order_number,
    order_total,
)
from partsledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from partsledger.infrastructure.storage.sqlite.ledger_store import post_movement
from partsledger.infrastructure.storage.sqlite.rows import (
    row_to_order,
    row_to_order_item,
    to_timestamp,
)

logger = get_logger(__name__)

# Columns a transition may write besides status and updated_at
TRANSITION_FIELDS = frozenset({
    "approved_by",
    "approved_at",
    "ordered_at",
    "received_at",
    "rejection_reason",
})


def receive_note(order_number: str) -> str:
    return f"Received via order {order_number}"


def _order_filter(
    status: OrderStatus | None, requested_by: str | None
) -> tuple[str, list]:
    clauses = []
    params: list = []
    if status is not None:
        clauses.append("status = ?")
        params.append(status.value)
    if requested_by is not None:
        clauses.append("requested_by = ?")
        params.append(requested_by)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


async def _fetch_items(
    conn: aiosqlite.Connection, order_ids: list[int]
) -> dict[int, list[OrderItem]]:
    """Items of several orders, keyed by order id."""
    items: dict[int, list[OrderItem]] = {order_id: [] for order_id in order_ids}
    if not order_ids:
        return items
    placeholders = ",".join("?" * len(order_ids))
    cursor = await conn.execute(
        f"SELECT * FROM order_items WHERE order_id IN ({placeholders}) ORDER BY id",
        order_ids,
    )
    for row in await cursor.fetchall():
        items[row["order_id"]].append(row_to_order_item(row))
    return items


async def _load_order(conn: aiosqlite.Connection, order_id: int) -> Order | None:
    cursor = await conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,))
    row = await cursor.fetchone()
    if row is None:
        return None
    items = await _fetch_items(conn, [order_id])
    return row_to_order(row, items[order_id])


async def _diagnose(
    conn: aiosqlite.Connection,
    order_id: int,
    expected: OrderStatus,
    action: str,
) -> None:
    """Raise the reason a conditional order write matched no row."""
    cursor = await conn.execute(
        "SELECT order_number, status FROM orders WHERE id = ?", (order_id,)
    )
    row = await cursor.fetchone()
    if row is None:
        raise OrderNotFoundError(order_id)
    raise InvalidTransitionError(
        row["order_number"],
        action=action,
        required=expected.value,
        actual=row["status"],
    )


async def _insert_items(
    conn: aiosqlite.Connection, order_id: int, items: list[OrderItem]
) -> list[OrderItem]:
    """Insert line items after checking every referenced part exists."""
    saved = []
    for item in items:
        cursor = await conn.execute("SELECT id FROM parts WHERE id = ?", (item.part_id,))
        if await cursor.fetchone() is None:
            raise PartNotFoundError(item.part_id)

        cursor = await conn.execute(
            """
            INSERT INTO order_items (order_id, part_id, quantity, unit_price, subtotal)
            VALUES (?, ?, ?, ?, ?)
            """,
            (order_id, item.part_id, item.quantity, item.unit_price, item.subtotal),
        )
        saved.append(
            item.model_copy(update={"id": cursor.lastrowid, "order_id": order_id})
        )
    return saved


class SQLiteOrderStore(IOrderStore):
    """SQLite implementation of purchase order storage."""

    async def create_order(self, order: Order) -> Order:
        """Insert an order under the next order number."""
        now = utcnow()
        async with get_transaction("create_order") as conn:
            # The write lock is held from here, so MAX+1 cannot be issued twice
            cursor = await conn.execute("SELECT MAX(order_sequence) FROM orders")
            row = await cursor.fetchone()
            sequence, order_number = next_order_number(row[0])

            cursor = await conn.execute(
                """
                INSERT INTO orders (
                    order_sequence, order_number, status, note, requested_by,
                    total_amount, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    sequence,
                    order_number,
                    order.status.value,
                    order.note,
                    order.requested_by,
                    order.total_amount,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            order_id = cursor.lastrowid
            await _insert_items(conn, order_id, order.items)
            created = await _load_order(conn, order_id)

        logger.info(
            "order_created",
            order_id=created.id,
            order_number=created.order_number,
            status=created.status.value,
            items=len(created.items),
            total=created.total_amount,
        )
        return created

    async def get_order(self, order_id: int) -> Order | None:
        """Get order by ID with items."""
        async with get_connection() as conn:
            return await _load_order(conn, order_id)

    async def get_order_by_number(self, order_number: str) -> Order | None:
        """Get order by order number with items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT id FROM orders WHERE order_number = ?", (order_number,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return await _load_order(conn, row["id"])

    async def list_orders(
        self,
        status: OrderStatus | None = None,
        requested_by: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Order]:
        """List orders, newest first."""
        where, params = _order_filter(status, requested_by)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM orders
                {where}
                ORDER BY order_sequence DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            items = await _fetch_items(conn, [row["id"] for row in rows])
            return [row_to_order(row, items[row["id"]]) for row in rows]

    async def count_orders(
        self, status: OrderStatus | None = None, requested_by: str | None = None
    ) -> int:
        where, params = _order_filter(status, requested_by)
        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM orders {where}", params)
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def replace_items(
        self,
        order_id: int,
        items: list[OrderItem],
        note: str | None,
        status: OrderStatus,
        expected: OrderStatus,
    ) -> Order:
        """Replace every line of an order and recompute its total."""
        now = utcnow()
        total = order_total(items)
        async with get_transaction("update_order") as conn:
            cursor = await conn.execute(
                """
                UPDATE orders SET
                    status = ?,
                    note = ?,
                    total_amount = ?,
                    updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (status.value, note, total, now.isoformat(), order_id, expected.value),
            )
            if cursor.rowcount == 0:
                await _diagnose(conn, order_id, expected, OrderAction.UPDATE.value)

            await conn.execute("DELETE FROM order_items WHERE order_id = ?", (order_id,))
            await _insert_items(conn, order_id, items)
            updated = await _load_order(conn, order_id)

        logger.info(
            "order_items_replaced",
            order_id=order_id,
            status=updated.status.value,
            items=len(updated.items),
            total=updated.total_amount,
        )
        return updated

    async def transition(
        self,
        order_id: int,
        expected: OrderStatus,
        target: OrderStatus,
        action: str,
        fields: dict[str, Any] | None = None,
    ) -> Order:
        """Compare-and-set the order status."""
        fields = fields or {}
        unknown = set(fields) - TRANSITION_FIELDS
        if unknown:
            raise ValueError(f"Unsupported order fields: {sorted(unknown)}")

        now = utcnow()
        assignments = ["status = ?", "updated_at = ?"]
        params: list = [target.value, now.isoformat()]
        for column, value in fields.items():
            assignments.append(f"{column} = ?")
            params.append(to_timestamp(value) if isinstance(value, datetime) else value)

        async with get_transaction(f"{action}_order") as conn:
            cursor = await conn.execute(
                f"UPDATE orders SET {', '.join(assignments)} WHERE id = ? AND status = ?",
                (*params, order_id, expected.value),
            )
            if cursor.rowcount == 0:
                await _diagnose(conn, order_id, expected, action)
            updated = await _load_order(conn, order_id)

        logger.info(
            "order_transitioned",
            order_id=order_id,
            order_number=updated.order_number,
            action=action,
            from_status=expected.value,
            to_status=target.value,
        )
        return updated

    async def delete_order(self, order_id: int, expected: OrderStatus) -> None:
        """Delete an order; its items cascade."""
        async with get_transaction("delete_order") as conn:
            cursor = await conn.execute(
                "DELETE FROM orders WHERE id = ? AND status = ?",
                (order_id, expected.value),
            )
            if cursor.rowcount == 0:
                await _diagnose(conn, order_id, expected, OrderAction.DELETE.value)

        logger.info("order_deleted", order_id=order_id)

    async def receive_order(
        self, order_id: int, user_id: str
    ) -> tuple[Order, list[StockMovement]]:
        """Mark an order RECEIVED and post its items into stock."""
        async with get_transaction("receive_order") as conn:
            # Stamped under the write lock so postings sort after earlier commits
            received_at = utcnow()
            cursor = await conn.execute(
                """
                UPDATE orders SET status = ?, received_at = ?, updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    OrderStatus.RECEIVED.value,
                    received_at.isoformat(),
                    received_at.isoformat(),
                    order_id,
                    OrderStatus.ORDERED.value,
                ),
            )
            if cursor.rowcount == 0:
                await _diagnose(
                    conn, order_id, OrderStatus.ORDERED, OrderAction.RECEIVE.value
                )

            order = await _load_order(conn, order_id)
            movements = []
            for item in order.items:
                _, movement = await post_movement(
                    conn,
                    item.part_id,
                    MovementKind.IN,
                    item.quantity,
                    user_id,
                    note=receive_note(order.order_number),
                    reference=order.order_number,
                    now=received_at,
                )
                movements.append(movement)

        logger.info(
            "order_received",
            order_id=order.id,
            order_number=order.order_number,
            movements=len(movements),
        )
        return order, movements
