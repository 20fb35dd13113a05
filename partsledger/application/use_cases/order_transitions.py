"""
Order lifecycle use cases.

Every transition checks, in order: an authenticated caller, that the order
exists, that the caller may act on it, and that the order is in the required
status. The store repeats the status check as a conditional write, so a
concurrent transition that got there first still yields InvalidTransitionError.
"""

from partsledger.config import get_logger
from partsledger.core.entities.order import Order
from partsledger.core.entities.part import utcnow
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import OrderNotFoundError, ValidationError
from partsledger.core.interfaces.order_store import IOrderStore
from partsledger.core.services.authorization import (
    ensure_approver,
    ensure_requester,
    require_user,
)
from partsledger.core.services.order_workflow import OrderAction, ensure_transition

logger = get_logger(__name__)


class OrderTransitionUseCase:
    """Shared store access and loading for order transitions."""

    action: OrderAction

    def __init__(self, order_store: IOrderStore | None = None):
        self._order_store = order_store

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from partsledger.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    @property
    def action_label(self) -> str:
        return f"{self.action.value.replace('_', ' ')} orders"

    async def _load(self, order_id: int) -> Order:
        order = await (await self._get_order_store()).get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _transition(self, order: Order, **fields) -> Order:
        target = ensure_transition(order, self.action)
        store = await self._get_order_store()
        updated = await store.transition(
            order.id,  # type: ignore[arg-type]
            expected=order.status,
            target=target,  # type: ignore[arg-type]
            action=self.action.value,
            fields=fields or None,
        )
        logger.info(
            f"order_{self.action.value}",
            order_id=updated.id,
            order_number=updated.order_number,
            status=updated.status.value,
        )
        return updated


class SubmitOrderUseCase(OrderTransitionUseCase):
    """DRAFT → PENDING, by the requester."""

    action = OrderAction.SUBMIT

    async def execute(self, order_id: int, user: AuthenticatedUser | None) -> Order:
        user = require_user(user, self.action_label)
        order = await self._load(order_id)
        ensure_requester(order, user, "submit this order")
        return await self._transition(order)


class ApproveOrderUseCase(OrderTransitionUseCase):
    """PENDING → APPROVED, by an approver."""

    action = OrderAction.APPROVE

    async def execute(self, order_id: int, user: AuthenticatedUser | None) -> Order:
        user = require_user(user, self.action_label)
        order = await self._load(order_id)
        ensure_approver(user, "approve orders")
        return await self._transition(
            order,
            approved_by=user.id,
            approved_at=utcnow(),
        )


class RejectOrderUseCase(OrderTransitionUseCase):
    """PENDING → REJECTED with a reason, by an approver."""

    action = OrderAction.REJECT

    async def execute(
        self, order_id: int, reason: str | None, user: AuthenticatedUser | None
    ) -> Order:
        user = require_user(user, self.action_label)
        order = await self._load(order_id)
        ensure_approver(user, "reject orders")
        ensure_transition(order, self.action)

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("reason", "a rejection reason is required", reason)

        return await self._transition(
            order,
            approved_by=user.id,
            approved_at=utcnow(),
            rejection_reason=reason,
        )


class MarkOrderedUseCase(OrderTransitionUseCase):
    """APPROVED → ORDERED, by any authenticated user."""

    action = OrderAction.MARK_ORDERED

    async def execute(self, order_id: int, user: AuthenticatedUser | None) -> Order:
        require_user(user, self.action_label)
        order = await self._load(order_id)
        return await self._transition(order, ordered_at=utcnow())


class DeleteOrderUseCase(OrderTransitionUseCase):
    """Remove a DRAFT order, by the requester."""

    action = OrderAction.DELETE

    async def execute(self, order_id: int, user: AuthenticatedUser | None) -> None:
        user = require_user(user, self.action_label)
        order = await self._load(order_id)
        ensure_requester(order, user, "delete this order")
        ensure_transition(order, self.action)

        store = await self._get_order_store()
        await store.delete_order(order_id, expected=order.status)
        logger.info("order_delete", order_id=order_id, order_number=order.order_number)
