"""Core domain entities."""

from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import LedgerCheck, MovementKind, StockMovement
from partsledger.core.entities.user import AuthenticatedUser, Role

__all__ = [
    # Catalog
    "Part",
    # Ledger
    "MovementKind",
    "StockMovement",
    "LedgerCheck",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatus",
    # Identity
    "AuthenticatedUser",
    "Role",
]
