"""
Purchase order state machine.

DRAFT → PENDING → APPROVED → ORDERED → RECEIVED, with PENDING → REJECTED.
RECEIVED and REJECTED are terminal.
"""

import math
from collections.abc import Iterable
from enum import Enum

from partsledger.core.entities.order import Order, OrderItem, OrderStatus
from partsledger.core.exceptions import InvalidTransitionError, ValidationError

ORDER_NUMBER_PREFIX = "ORD-"
ORDER_NUMBER_WIDTH = 3


class OrderAction(str, Enum):
    """Transitions an existing order can go through."""

    UPDATE = "update"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    MARK_ORDERED = "mark_ordered"
    RECEIVE = "receive"
    DELETE = "delete"


# action -> (required status, resulting status); None means the order is removed
TRANSITIONS: dict[OrderAction, tuple[OrderStatus, OrderStatus | None]] = {
    OrderAction.UPDATE: (OrderStatus.DRAFT, OrderStatus.DRAFT),
    OrderAction.SUBMIT: (OrderStatus.DRAFT, OrderStatus.PENDING),
    OrderAction.APPROVE: (OrderStatus.PENDING, OrderStatus.APPROVED),
    OrderAction.REJECT: (OrderStatus.PENDING, OrderStatus.REJECTED),
    OrderAction.MARK_ORDERED: (OrderStatus.APPROVED, OrderStatus.ORDERED),
    OrderAction.RECEIVE: (OrderStatus.ORDERED, OrderStatus.RECEIVED),
    OrderAction.DELETE: (OrderStatus.DRAFT, None),
}


def required_status(action: OrderAction) -> OrderStatus:
    return TRANSITIONS[action][0]


def ensure_transition(order: Order, action: OrderAction) -> OrderStatus | None:
    """
    Check that `action` is allowed from the order's current status.

    Returns the resulting status (None for delete).

    Raises:
        InvalidTransitionError: order is not in the required status
    """
    required, target = TRANSITIONS[action]
    if order.status != required:
        raise InvalidTransitionError(
            order.order_number or order.id or "?",
            action=action.value,
            required=required.value,
            actual=order.status.value,
        )
    return target


def allowed_actions(status: OrderStatus) -> list[OrderAction]:
    """Actions whose precondition the given status satisfies."""
    return [action for action, (required, _) in TRANSITIONS.items() if required == status]


def initial_status(submit: bool) -> OrderStatus:
    return OrderStatus.PENDING if submit else OrderStatus.DRAFT


# Order numbers


def format_order_number(sequence: int) -> str:
    """Format a sequence number as ORD-001 (wider numbers are not truncated)."""
    return f"{ORDER_NUMBER_PREFIX}{sequence:0{ORDER_NUMBER_WIDTH}d}"


def next_order_number(last_sequence: int | None) -> tuple[int, str]:
    """Sequence and order number following the last issued one, ORD-001 if none."""
    sequence = (last_sequence or 0) + 1
    return sequence, format_order_number(sequence)


# Line items


def build_items(lines: Iterable[tuple[int, int, float]]) -> list[OrderItem]:
    """
    Build order items from (part_id, quantity, unit_price) lines.

    Raises:
        ValidationError: no lines, quantity below 1 or negative price
    """
    items = []
    for index, (part_id, quantity, unit_price) in enumerate(lines, start=1):
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(f"items[{index}].quantity", "must be an integer of 1 or more", quantity)
        if not math.isfinite(unit_price) or unit_price < 0:
            raise ValidationError(f"items[{index}].unit_price", "must be a finite number of 0 or more", unit_price)
        items.append(OrderItem(part_id=part_id, quantity=quantity, unit_price=unit_price))
    if not items:
        raise ValidationError("items", "at least one line item is required")
    return items


def order_total(items: Iterable[OrderItem]) -> float:
    return sum(item.subtotal for item in items)
