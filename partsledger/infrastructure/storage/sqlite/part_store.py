"""SQLite implementation of the part catalog."""

import sqlite3
from datetime import datetime

import aiosqlite

from partsledger.config import get_logger
from partsledger.core.entities.part import Part, utcnow
from partsledger.core.entities.stock import MovementKind, StockMovement
from partsledger.core.exceptions import (
    DatabaseError,
    DuplicateCodeError,
    PartInUseError,
    PartNotFoundError,
)
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from partsledger.infrastructure.storage.sqlite.ledger_store import post_movement
from partsledger.infrastructure.storage.sqlite.rows import row_to_part

logger = get_logger(__name__)

OPENING_STOCK_NOTE = "Opening stock"
IMPORT_NOTE = "CSV import"


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _search_filter(query: str | None) -> tuple[str, list]:
    if not query or not query.strip():
        return "", []
    pattern = _like_pattern(query.strip())
    return (
        "WHERE code LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\'",
        [pattern, pattern],
    )


def _integrity_error(
    error: sqlite3.IntegrityError, operation: str, code: str
) -> Exception:
    """Translate a constraint failure on the parts table."""
    if "UNIQUE constraint failed: parts.code" in str(error):
        return DuplicateCodeError(code)
    return DatabaseError(operation, str(error))


async def _insert_part(conn: aiosqlite.Connection, part: Part, now: datetime) -> int:
    """Insert a catalog row with zero stock and return its id."""
    try:
        cursor = await conn.execute(
            """
            INSERT INTO parts (
                code, name, description, price, stock,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, 0, ?, ?)
            """,
            (
                part.code,
                part.name,
                part.description,
                part.price,
                now.isoformat(),
                now.isoformat(),
            ),
        )
    except sqlite3.IntegrityError as e:
        raise _integrity_error(e, "insert_part", part.code) from e
    return cursor.lastrowid


class SQLitePartStore(IPartStore):
    """SQLite implementation of part storage."""

    async def create_part(
        self, part: Part, user_id: str
    ) -> tuple[Part, StockMovement | None]:
        """Create a part, posting any opening stock as an adjustment."""
        now = utcnow()
        opening_stock = part.stock
        part.stock = 0
        part.created_at = now
        part.updated_at = now

        async with get_transaction("create_part") as conn:
            cursor = await conn.execute(
                "SELECT id FROM parts WHERE code = ?", (part.code,)
            )
            existing = await cursor.fetchone()
            if existing:
                raise DuplicateCodeError(part.code, existing["id"])

            part.id = await _insert_part(conn, part, now)

            movement = None
            if opening_stock:
                part, movement = await post_movement(
                    conn,
                    part.id,
                    MovementKind.ADJUST,
                    opening_stock,
                    user_id,
                    note=OPENING_STOCK_NOTE,
                    now=now,
                )

        logger.info(
            "part_created",
            part_id=part.id,
            code=part.code,
            opening_stock=opening_stock,
        )
        return part, movement

    async def get_part(self, part_id: int) -> Part | None:
        """Get part by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM parts WHERE id = ?", (part_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_part(row)

    async def get_part_by_code(self, code: str) -> Part | None:
        """Get part by its unique code."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM parts WHERE code = ?", (code,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_part(row)

    async def update_part(self, part: Part) -> Part:
        """Update catalog fields. Stock is left to the ledger."""
        now = utcnow()
        async with get_transaction("update_part") as conn:
            cursor = await conn.execute(
                "SELECT id FROM parts WHERE code = ? AND id != ?",
                (part.code, part.id),
            )
            existing = await cursor.fetchone()
            if existing:
                raise DuplicateCodeError(part.code, existing["id"])

            try:
                cursor = await conn.execute(
                    """
                    UPDATE parts SET
                        code = ?,
                        name = ?,
                        description = ?,
                        price = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        part.code,
                        part.name,
                        part.description,
                        part.price,
                        now.isoformat(),
                        part.id,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise _integrity_error(e, "update_part", part.code) from e
            if cursor.rowcount == 0:
                raise PartNotFoundError(part.id)

            cursor = await conn.execute("SELECT * FROM parts WHERE id = ?", (part.id,))
            updated = row_to_part(await cursor.fetchone())

        logger.info("part_updated", part_id=updated.id, code=updated.code)
        return updated

    async def import_part(self, part: Part, user_id: str) -> tuple[Part, bool]:
        """Create or update a part by code, adjusting stock to `part.stock`."""
        now = utcnow()
        target_stock = part.stock

        async with get_transaction("import_part") as conn:
            cursor = await conn.execute(
                "SELECT id, stock FROM parts WHERE code = ?", (part.code,)
            )
            row = await cursor.fetchone()
            created = row is None

            if created:
                part_id = await _insert_part(conn, part, now)
                current_stock = 0
                note = OPENING_STOCK_NOTE
            else:
                part_id = row["id"]
                current_stock = row["stock"]
                note = IMPORT_NOTE
                try:
                    await conn.execute(
                        """
                        UPDATE parts SET
                            name = ?,
                            description = ?,
                            price = ?,
                            updated_at = ?
                        WHERE id = ?
                        """,
                        (part.name, part.description, part.price, now.isoformat(), part_id),
                    )
                except sqlite3.IntegrityError as e:
                    raise _integrity_error(e, "import_part", part.code) from e

            if target_stock != current_stock:
                await post_movement(
                    conn,
                    part_id,
                    MovementKind.ADJUST,
                    target_stock,
                    user_id,
                    note=note,
                    now=now,
                )

            cursor = await conn.execute("SELECT * FROM parts WHERE id = ?", (part_id,))
            saved = row_to_part(await cursor.fetchone())

        logger.info(
            "part_imported",
            part_id=saved.id,
            code=saved.code,
            created=created,
            stock=saved.stock,
        )
        return saved, created

    async def delete_part(self, part_id: int) -> None:
        """Delete a part and its movements unless an order line references it."""
        async with get_transaction("delete_part") as conn:
            cursor = await conn.execute("SELECT id FROM parts WHERE id = ?", (part_id,))
            if await cursor.fetchone() is None:
                raise PartNotFoundError(part_id)

            cursor = await conn.execute(
                "SELECT COUNT(DISTINCT order_id) FROM order_items WHERE part_id = ?",
                (part_id,),
            )
            order_count = (await cursor.fetchone())[0]
            if order_count:
                raise PartInUseError(part_id, order_count)

            await conn.execute("DELETE FROM parts WHERE id = ?", (part_id,))

        logger.info("part_deleted", part_id=part_id)

    async def list_parts(
        self, limit: int = 100, offset: int = 0, query: str | None = None
    ) -> list[Part]:
        """List parts ordered by code."""
        where, params = _search_filter(query)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM parts
                {where}
                ORDER BY code
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_part(row) for row in rows]

    async def count_parts(self, query: str | None = None) -> int:
        where, params = _search_filter(query)
        async with get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) FROM parts {where}", params)
            row = await cursor.fetchone()
            return row[0] if row else 0
