"""Pytest fixtures for SQLite storage tests."""

from collections.abc import Awaitable, Callable

import pytest

from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.entities.part import Part
from partsledger.infrastructure.storage.sqlite import (
    SQLiteOrderStore,
    SQLitePartStore,
    SQLiteStockLedgerStore,
)


@pytest.fixture
def part_store(ledger_db) -> SQLitePartStore:
    return SQLitePartStore()


@pytest.fixture
def ledger_store(ledger_db) -> SQLiteStockLedgerStore:
    return SQLiteStockLedgerStore()


@pytest.fixture
def order_store(ledger_db) -> SQLiteOrderStore:
    return SQLiteOrderStore()


@pytest.fixture
def make_part(part_store) -> Callable[..., Awaitable[Part]]:
    """Create a part with optional opening stock."""

    async def _make(code: str = "P-001", stock: int = 0, price: float = 50.0) -> Part:
        part, _ = await part_store.create_part(
            Part(code=code, name=f"Part {code}", price=price, stock=stock),
            "seed-user",
        )
        return part

    return _make


@pytest.fixture
def make_order(order_store) -> Callable[..., Awaitable[Order]]:
    """Create an order from (part_id, quantity, unit_price) lines."""

    async def _make(
        lines: list[tuple[int, int, float]],
        requested_by: str = "user-1",
        status: OrderStatus = OrderStatus.DRAFT,
    ) -> Order:
        return await order_store.create_order(
            Order(
                status=status,
                requested_by=requested_by,
                items=[
                    OrderItem(part_id=part_id, quantity=quantity, unit_price=price)
                    for part_id, quantity, price in lines
                ],
            )
        )

    return _make
