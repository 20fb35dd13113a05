"""Abstract interface for purchase order storage."""

from abc import ABC, abstractmethod
from typing import Any

from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.entities.stock import StockMovement


class IOrderStore(ABC):
    """Interface for purchase order persistence.

    Every write is conditional on the order still being in `expected`
    status; when it is not, the store raises InvalidTransitionError and
    changes nothing.
    """

    @abstractmethod
    async def create_order(self, order: Order) -> Order:
        """Insert an order and its items, assigning the next order number."""
        pass

    @abstractmethod
    async def get_order(self, order_id: int) -> Order | None:
        """Get order by ID with items."""
        pass

    @abstractmethod
    async def get_order_by_number(self, order_number: str) -> Order | None:
        """Get order by order number with items."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        status: OrderStatus | None = None,
        requested_by: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Order]:
        """List orders, newest first."""
        pass

    @abstractmethod
    async def count_orders(
        self, status: OrderStatus | None = None, requested_by: str | None = None
    ) -> int:
        """Count orders matching the same filter as list_orders."""
        pass

    @abstractmethod
    async def replace_items(
        self,
        order_id: int,
        items: list[OrderItem],
        note: str | None,
        status: OrderStatus,
        expected: OrderStatus,
    ) -> Order:
        """Delete all items, insert `items`, recompute the total and set status."""
        pass

    @abstractmethod
    async def transition(
        self,
        order_id: int,
        expected: OrderStatus,
        target: OrderStatus,
        action: str,
        fields: dict[str, Any] | None = None,
    ) -> Order:
        """Move an order from `expected` to `target`, writing extra `fields`."""
        pass

    @abstractmethod
    async def delete_order(self, order_id: int, expected: OrderStatus) -> None:
        """Delete an order and its items."""
        pass

    @abstractmethod
    async def receive_order(
        self, order_id: int, user_id: str
    ) -> tuple[Order, list[StockMovement]]:
        """
        Mark an ORDERED order RECEIVED and post one IN movement per item.

        All postings and the status change commit together or not at all.
        """
        pass
