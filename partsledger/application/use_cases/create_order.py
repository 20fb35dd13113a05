"""Create Order Use Case."""

from partsledger.application.dto.mappers import to_order_response
from partsledger.application.dto.requests import CreateOrderRequest, OrderItemRequest
from partsledger.application.dto.responses import OrderResponse
from partsledger.config import get_logger
from partsledger.core.entities.order import Order, OrderItem
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import ForbiddenError, PartNotFoundError
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import can_create_orders, require_user
from partsledger.core.services.catalog import clean_text
from partsledger.core.services.order_workflow import build_items, initial_status

logger = get_logger(__name__)


async def resolve_items(
    part_store: IPartStore, lines: list[OrderItemRequest]
) -> list[OrderItem]:
    """Build order items, pricing lines without a unit price at the part's price."""
    priced = []
    for line in lines:
        unit_price = line.unit_price
        if unit_price is None:
            part = await part_store.get_part(line.part_id)
            if part is None:
                raise PartNotFoundError(line.part_id)
            unit_price = part.price
        priced.append((line.part_id, line.quantity, unit_price))
    return build_items(priced)


class CreateOrderUseCase:
    """Raise a purchase order as a draft, or submitted for approval."""

    def __init__(
        self,
        order_store: IOrderStore | None = None,
        part_store: IPartStore | None = None,
    ):
        self._order_store = order_store
        self._part_store = part_store

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from partsledger.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(
        self, request: CreateOrderRequest, user: AuthenticatedUser | None
    ) -> Order:
        """Execute create order use case."""
        user = require_user(user, "create orders")
        if not can_create_orders(user.role):
            raise ForbiddenError("create orders", f"role '{user.role.value}' cannot create orders")

        logger.info(
            "create_order_started",
            user_id=user.id,
            lines=len(request.items),
            submit=request.submit,
        )

        items = await resolve_items(await self._get_part_store(), request.items)
        order = Order(
            status=initial_status(request.submit),
            note=clean_text(request.note),
            requested_by=user.id,
            items=items,
        )
        return await (await self._get_order_store()).create_order(order)

    def to_response(self, order: Order) -> OrderResponse:
        return to_order_response(order)
