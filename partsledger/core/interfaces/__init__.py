"""Core interfaces (ports) for dependency injection."""

from partsledger.core.interfaces.ledger_store import IStockLedgerStore
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.interfaces.part_store import IPartStore

__all__ = [
    "IPartStore",
    "IStockLedgerStore",
    "IOrderStore",
]
