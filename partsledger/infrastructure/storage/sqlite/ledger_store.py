"""SQLite implementation of the stock ledger."""

from datetime import datetime

import aiosqlite

from partsledger.config import get_logger
from partsledger.core.entities.part import Part, utcnow
from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import PartNotFoundError
from partsledger.core.interfaces.ledger_store import IStockLedgerStore
from partsledger.core.services.stock_ledger import plan_movement
from partsledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from partsledger.infrastructure.storage.sqlite.rows import row_to_movement, row_to_part

logger = get_logger(__name__)


async def post_movement(
    conn: aiosqlite.Connection,
    part_id: int,
    kind: MovementKind,
    quantity: int,
    user_id: str,
    note: str | None = None,
    reference: str | None = None,
    now: datetime | None = None,
) -> tuple[Part, StockMovement]:
    """
    Post one movement on a connection that already holds a write transaction.

    Reads the part's stock, applies the ledger rules, appends the movement
    and updates the cached stock. Nothing is committed here; the caller's
    transaction decides.
    """
    cursor = await conn.execute("SELECT * FROM parts WHERE id = ?", (part_id,))
    row = await cursor.fetchone()
    if row is None:
        raise PartNotFoundError(part_id)
    part = row_to_part(row)

    posting = plan_movement(part.id, part.stock, kind, quantity, note)
    now = now or utcnow()

    cursor = await conn.execute(
        """
        INSERT INTO stock_movements (
            part_id, user_id, kind, quantity, stock_before, stock_after,
            reference, note, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            part.id,
            user_id,
            posting.kind.value,
            posting.quantity,
            posting.stock_before,
            posting.stock_after,
            reference,
            posting.note,
            now.isoformat(),
        ),
    )
    movement = StockMovement(
        id=cursor.lastrowid,
        part_id=part.id,
        user_id=user_id,
        kind=posting.kind,
        quantity=posting.quantity,
        stock_before=posting.stock_before,
        stock_after=posting.stock_after,
        reference=reference,
        note=posting.note,
        created_at=now,
    )

    await conn.execute(
        "UPDATE parts SET stock = ?, updated_at = ? WHERE id = ?",
        (posting.stock_after, now.isoformat(), part.id),
    )
    part.stock = posting.stock_after
    part.updated_at = now

    logger.info(
        "stock_movement_posted",
        movement_id=movement.id,
        part_id=part.id,
        kind=movement.kind.value,
        qty=movement.quantity,
        stock_before=movement.stock_before,
        stock_after=movement.stock_after,
        reference=reference,
    )
    return part, movement


def _movement_filter(
    part_id: int | None, kind: MovementKind | None
) -> tuple[str, list]:
    clauses = []
    params: list = []
    if part_id is not None:
        clauses.append("part_id = ?")
        params.append(part_id)
    if kind is not None:
        clauses.append("kind = ?")
        params.append(kind.value)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class SQLiteStockLedgerStore(IStockLedgerStore):
    """SQLite implementation of stock movement storage."""

    async def record_movement(
        self,
        part_id: int,
        kind: MovementKind,
        quantity: int,
        user_id: str,
        note: str | None = None,
        reference: str | None = None,
    ) -> tuple[Part, StockMovement]:
        async with get_transaction(f"record_{kind.value.lower()}_movement") as conn:
            return await post_movement(
                conn,
                part_id,
                kind,
                quantity,
                user_id,
                note=note,
                reference=reference,
            )

    async def list_movements(
        self,
        part_id: int | None = None,
        kind: MovementKind | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements, newest first."""
        where, params = _movement_filter(part_id, kind)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_movements
                {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]

    async def count_movements(
        self, part_id: int | None = None, kind: MovementKind | None = None
    ) -> int:
        where, params = _movement_filter(part_id, kind)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM stock_movements {where}", params
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def get_ledger(self, part_id: int) -> list[StockMovement]:
        """All movements of a part, oldest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE part_id = ?
                ORDER BY created_at, id
                """,
                (part_id,),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]
