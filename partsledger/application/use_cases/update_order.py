"""Update Order Use Case: replace the lines of a draft."""

from partsledger.application.dto.requests import UpdateOrderRequest
from partsledger.application.use_cases.create_order import resolve_items
from partsledger.config import get_logger
from partsledger.core.entities.order import Order
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import OrderNotFoundError
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import ensure_requester, require_user
from partsledger.core.services.catalog import clean_text
from partsledger.core.services.order_workflow import (
    OrderAction,
    ensure_transition,
    initial_status,
    required_status,
)

logger = get_logger(__name__)


class UpdateOrderUseCase:
    """Replace all items and the note of a DRAFT order, optionally submitting it."""

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
        self,
        order_id: int,
        request: UpdateOrderRequest,
        user: AuthenticatedUser | None,
    ) -> Order:
        user = require_user(user, "update orders")
        store = await self._get_order_store()

        order = await store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        ensure_requester(order, user, "update this order")
        ensure_transition(order, OrderAction.UPDATE)

        items = await resolve_items(await self._get_part_store(), request.items)

        logger.info(
            "update_order_started",
            order_id=order_id,
            lines=len(items),
            submit=request.submit,
        )
        return await store.replace_items(
            order_id,
            items,
            note=clean_text(request.note),
            status=initial_status(request.submit),
            expected=required_status(OrderAction.UPDATE),
        )
