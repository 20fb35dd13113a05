"""Versioned SQL migrations."""

from partsledger.infrastructure.storage.sqlite.migrations.migrator import (
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "run_migrations",
    "verify_schema_integrity",
]
