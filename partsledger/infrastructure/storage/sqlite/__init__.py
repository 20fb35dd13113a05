"""SQLite storage implementations."""

from partsledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from partsledger.infrastructure.storage.sqlite.ledger_store import (
    SQLiteStockLedgerStore,
    post_movement,
)
from partsledger.infrastructure.storage.sqlite.order_store import SQLiteOrderStore
from partsledger.infrastructure.storage.sqlite.part_store import SQLitePartStore

# Singleton instances
_part_store: SQLitePartStore | None = None
_ledger_store: SQLiteStockLedgerStore | None = None
_order_store: SQLiteOrderStore | None = None


async def get_part_store() -> SQLitePartStore:
    """Get singleton part store instance."""
    global _part_store
    if _part_store is None:
        _part_store = SQLitePartStore()
    return _part_store


async def get_ledger_store() -> SQLiteStockLedgerStore:
    """Get singleton stock ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteStockLedgerStore()
    return _ledger_store


async def get_order_store() -> SQLiteOrderStore:
    """Get singleton order store instance."""
    global _order_store
    if _order_store is None:
        _order_store = SQLiteOrderStore()
    return _order_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLitePartStore",
    "SQLiteStockLedgerStore",
    "SQLiteOrderStore",
    "post_movement",
    # Factory functions
    "get_part_store",
    "get_ledger_store",
    "get_order_store",
]
