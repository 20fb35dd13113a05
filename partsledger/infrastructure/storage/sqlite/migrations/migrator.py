"""
Schema migrations and ledger consistency checks.

Migrations are the `vNNN_name.sql` files next to this module. Each one is
applied in its own transaction together with its `schema_migrations` row, so
a failed script leaves no trace.
"""

import asyncio
import hashlib
import re
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from partsledger.config import get_logger, get_settings
from partsledger.core.exceptions import DatabaseError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME_RE = re.compile(r"^v(\d{3})_([a-z0-9_]+)\.sql$")

REQUIRED_TABLES = [
    "parts",
    "stock_movements",
    "orders",
    "order_items",
    "schema_migrations",
]


@dataclass(frozen=True)
class MigrationInfo:
    """One migration script."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=checksum,
        )

    def script(self) -> str:
        """The migration SQL wrapped with its bookkeeping row in one transaction."""
        return (
            "BEGIN IMMEDIATE;\n"
            f"{self.path.read_text(encoding='utf-8')}\n"
            "INSERT INTO schema_migrations (version, name, checksum) "
            f"VALUES ('{self.version}', '{self.name}', '{self.checksum}');\n"
            "COMMIT;\n"
        )


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration scripts in version order; misnamed files are skipped."""
    migrations = []
    for path in sorted(migrations_dir.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> None:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    try:
        await conn.executescript(migration.script())
    except aiosqlite.Error as e:
        if conn.in_transaction:
            await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        raise DatabaseError(f"migration {migration.version}", str(e)) from e
    logger.info("migration_applied", version=migration.version)


async def run_migrations(
    db_path: Path | None = None,
    migrations_dir: Path = MIGRATIONS_DIR,
) -> list[str]:
    """
    Apply every pending migration and return the versions applied.

    Raises:
        DatabaseError: a script failed, or an applied script was edited
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    applied_now: list[str] = []
    async with aiosqlite.connect(db_path, isolation_level=None) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        applied = await _applied_checksums(conn)
        for migration in discover_migrations(migrations_dir):
            recorded = applied.get(migration.version)
            if recorded is None:
                await _apply(conn, migration)
                applied_now.append(migration.version)
            elif recorded != migration.checksum:
                raise DatabaseError(
                    "migrate",
                    f"migration {migration.version} changed after it was applied",
                )

    logger.info("migrations_complete", db_path=str(db_path), applied=applied_now)
    return applied_now


def _check(name: str, failures: list, **details) -> dict:
    return {"check": name, "status": "FAIL" if failures else "PASS", **details}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check the schema and the stock ledger against each other.

    - foreign_keys: no dangling references
    - required_tables: every table of the service exists
    - stock_projection: each part's stock equals its last movement's stock_after
    - ledger_chain: in history order, each movement starts where the previous ended
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]

        drifted: list[int] = []
        broken: list[int] = []
        if not missing:
            cursor = await conn.execute(
                """
                SELECT p.id FROM parts p
                JOIN stock_movements m ON m.id = (
                    SELECT id FROM stock_movements
                    WHERE part_id = p.id
                    ORDER BY created_at DESC, id DESC
                    LIMIT 1
                )
                WHERE m.stock_after != p.stock
                ORDER BY p.id
                """
            )
            drifted = [row[0] for row in await cursor.fetchall()]

            cursor = await conn.execute(
                """
                SELECT DISTINCT part_id FROM (
                    SELECT
                        part_id,
                        stock_before,
                        LAG(stock_after) OVER (
                            PARTITION BY part_id ORDER BY created_at, id
                        ) AS previous_after
                    FROM stock_movements
                )
                WHERE stock_before != COALESCE(previous_after, 0)
                ORDER BY part_id
                """
            )
            broken = [row[0] for row in await cursor.fetchall()]

    return [
        _check("foreign_keys", violations, violations=len(violations)),
        _check("required_tables", missing, missing=missing),
        _check("stock_projection", drifted, drifted_parts=drifted),
        _check("ledger_chain", broken, broken_parts=broken),
    ]


def main() -> None:
    """CLI entry point: migrate, or verify with --verify."""
    import argparse

    parser = argparse.ArgumentParser(description="Parts Ledger database migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check the schema and the stock ledger instead of migrating",
    )
    args = parser.parse_args()

    if args.verify:
        checks = asyncio.run(verify_schema_integrity(args.db_path))
        for check in checks:
            print(f"[{check['status']}] {check['check']}")
        raise SystemExit(0 if all(c["status"] == "PASS" for c in checks) else 1)

    applied = asyncio.run(run_migrations(args.db_path))
    print(f"Applied: {', '.join(applied) or 'nothing pending'}")


if __name__ == "__main__":
    main()
