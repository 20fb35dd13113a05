"""Tests for the SQLite migration runner."""

import shutil
from pathlib import Path

import aiosqlite
import pytest

from partsledger.core.exceptions import DatabaseError
from partsledger.infrastructure.storage.sqlite.migrations.migrator import (
    MIGRATIONS_DIR,
    REQUIRED_TABLES,
    MigrationInfo,
    discover_migrations,
    run_migrations,
    verify_schema_integrity,
)


async def _tables(db_path: Path) -> set[str]:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        return {row[0] for row in await cursor.fetchall()}


async def _seed_part(db_path: Path, stock: int, movements: list[tuple[str, int, int, int, str]]):
    """Insert part 1 and raw movements (kind, quantity, before, after, created_at)."""
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute(
            "INSERT INTO parts (id, code, name, price, stock, created_at, updated_at) "
            "VALUES (1, 'P-1', 'Bolt', 1, ?, '2026-01-01', '2026-01-01')",
            (stock,),
        )
        await conn.executemany(
            "INSERT INTO stock_movements (part_id, user_id, kind, quantity, "
            "stock_before, stock_after, created_at) VALUES (1, 'u', ?, ?, ?, ?, ?)",
            movements,
        )
        await conn.commit()


class TestDiscoverMigrations:
    def test_finds_initial_schema(self):
        migrations = discover_migrations()
        assert migrations
        assert migrations[0].version == "001"
        assert migrations[0].name == "initial_schema"

    def test_invalid_file_name(self, tmp_path: Path):
        (tmp_path / "vx_broken.sql").write_text("SELECT 1;")
        (tmp_path / "v002_Mixed-Case.sql").write_text("SELECT 1;")
        assert discover_migrations(tmp_path) == []

    def test_checksum_is_stable(self):
        first = discover_migrations()[0]
        assert MigrationInfo.from_file(first.path).checksum == first.checksum


class TestRunMigrations:
    @pytest.mark.asyncio
    async def test_creates_required_tables(self, temp_db_path: Path):
        applied = await run_migrations(temp_db_path)

        assert applied == ["001"]
        assert set(REQUIRED_TABLES) <= await _tables(temp_db_path)

    @pytest.mark.asyncio
    async def test_second_run_applies_nothing(self, temp_db_path: Path):
        await run_migrations(temp_db_path)
        assert await run_migrations(temp_db_path) == []

    @pytest.mark.asyncio
    async def test_failed_script_leaves_nothing_behind(self, temp_db_path: Path, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        shutil.copy(MIGRATIONS_DIR / "v001_initial_schema.sql", migrations_dir)
        (migrations_dir / "v002_broken.sql").write_text(
            "CREATE TABLE suppliers (id INTEGER PRIMARY KEY);\nNOT VALID SQL;\n"
        )

        with pytest.raises(DatabaseError) as exc_info:
            await run_migrations(temp_db_path, migrations_dir)

        assert exc_info.value.details["operation"] == "migration 002"
        assert "suppliers" not in await _tables(temp_db_path)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT version FROM schema_migrations")
            assert [row[0] for row in await cursor.fetchall()] == ["001"]

    @pytest.mark.asyncio
    async def test_edited_migration_is_refused(self, temp_db_path: Path, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        script = migrations_dir / "v001_initial_schema.sql"
        shutil.copy(MIGRATIONS_DIR / "v001_initial_schema.sql", script)
        await run_migrations(temp_db_path, migrations_dir)

        script.write_text(script.read_text() + "\n-- edited\n")

        with pytest.raises(DatabaseError, match="changed after it was applied"):
            await run_migrations(temp_db_path, migrations_dir)


class TestVerifySchemaIntegrity:
    @pytest.mark.asyncio
    async def test_fresh_database_passes(self, temp_db_path: Path):
        await run_migrations(temp_db_path)

        checks = await verify_schema_integrity(temp_db_path)

        assert [c["check"] for c in checks] == [
            "foreign_keys",
            "required_tables",
            "stock_projection",
            "ledger_chain",
        ]
        assert all(c["status"] == "PASS" for c in checks)

    @pytest.mark.asyncio
    async def test_consistent_ledger_passes(self, temp_db_path: Path):
        await run_migrations(temp_db_path)
        await _seed_part(
            temp_db_path,
            stock=3,
            movements=[
                ("ADJUST", 5, 0, 5, "2026-01-01T00:00:00"),
                ("OUT", 2, 5, 3, "2026-01-02T00:00:00"),
            ],
        )

        checks = await verify_schema_integrity(temp_db_path)

        assert all(c["status"] == "PASS" for c in checks)

    @pytest.mark.asyncio
    async def test_detects_stock_drift(self, temp_db_path: Path):
        await run_migrations(temp_db_path)
        await _seed_part(temp_db_path, stock=7, movements=[("IN", 5, 0, 5, "2026-01-01")])

        checks = {c["check"]: c for c in await verify_schema_integrity(temp_db_path)}

        assert checks["stock_projection"]["status"] == "FAIL"
        assert checks["stock_projection"]["drifted_parts"] == [1]

    @pytest.mark.asyncio
    async def test_detects_out_of_order_history(self, temp_db_path: Path):
        await run_migrations(temp_db_path)
        # The IN was computed after the OUT but stamped before it
        await _seed_part(
            temp_db_path,
            stock=4,
            movements=[
                ("ADJUST", 5, 0, 5, "2026-01-01T00:00:00"),
                ("OUT", 5, 5, 0, "2026-01-01T00:00:02"),
                ("IN", 4, 0, 4, "2026-01-01T00:00:01"),
            ],
        )

        checks = {c["check"]: c for c in await verify_schema_integrity(temp_db_path)}

        assert checks["ledger_chain"]["status"] == "FAIL"
        assert checks["ledger_chain"]["broken_parts"] == [1]
