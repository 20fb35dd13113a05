"""Receive Order Use Case: ORDERED → RECEIVED, posting every line into stock."""

from dataclasses import dataclass

from partsledger.application.dto.mappers import to_movement_response, to_order_response
from partsledger.application.dto.responses import ReceiveOrderResponse
from partsledger.config import get_logger
from partsledger.core.entities.order import Order
from partsledger.core.entities.stock import StockMovement
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import OrderNotFoundError
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.order_workflow import OrderAction, ensure_transition

logger = get_logger(__name__)


@dataclass
class ReceiveOrderResult:
    """Result of receiving an order."""

    order: Order
    movements: list[StockMovement]


class ReceiveOrderUseCase:
    """Receive an ordered purchase order.

    The status change and one IN movement per line commit together; if any
    posting fails the order stays ORDERED and no stock changes.
    """

    def __init__(self, order_store: IOrderStore | None = None):
        self._order_store = order_store

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from partsledger.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def execute(
        self, order_id: int, user: AuthenticatedUser | None
    ) -> ReceiveOrderResult:
        """Execute receive order use case."""
        user = require_user(user, "receive orders")
        store = await self._get_order_store()

        order = await store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        ensure_transition(order, OrderAction.RECEIVE)

        logger.info(
            "receive_order_started",
            order_id=order_id,
            order_number=order.order_number,
            lines=len(order.items),
            user_id=user.id,
        )

        order, movements = await store.receive_order(order_id, user.id)
        return ReceiveOrderResult(order=order, movements=movements)

    def to_response(self, result: ReceiveOrderResult) -> ReceiveOrderResponse:
        """Convert result to API response."""
        return ReceiveOrderResponse(
            order=to_order_response(result.order),
            movements=[to_movement_response(m) for m in result.movements],
        )
