"""Entity to response DTO conversion shared by use cases and routes."""

from partsledger.application.dto.responses import (
    LedgerCheckResponse,
    OrderItemResponse,
    OrderResponse,
    PartResponse,
    StockMovementResponse,
)
from partsledger.core.entities.order import Order
from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import LedgerCheck, StockMovement
from partsledger.core.services.order_workflow import allowed_actions


def to_part_response(part: Part) -> PartResponse:
    return PartResponse(
        id=part.id,  # type: ignore[arg-type]
        code=part.code,
        name=part.name,
        description=part.description,
        price=part.price,
        stock=part.stock,
        stock_value=part.stock_value,
        created_at=part.created_at,
        updated_at=part.updated_at,
    )


def to_movement_response(movement: StockMovement) -> StockMovementResponse:
    return StockMovementResponse(
        id=movement.id,  # type: ignore[arg-type]
        part_id=movement.part_id,
        user_id=movement.user_id,
        kind=movement.kind.value,
        quantity=movement.quantity,
        stock_before=movement.stock_before,
        stock_after=movement.stock_after,
        reference=movement.reference,
        note=movement.note,
        created_at=movement.created_at,
    )


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,  # type: ignore[arg-type]
        status=order.status.value,
        note=order.note,
        rejection_reason=order.rejection_reason,
        requested_by=order.requested_by,
        approved_by=order.approved_by,
        approved_at=order.approved_at,
        ordered_at=order.ordered_at,
        received_at=order.received_at,
        total_amount=order.total_amount,
        items=[
            OrderItemResponse(
                id=item.id,  # type: ignore[arg-type]
                part_id=item.part_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                subtotal=item.subtotal,
            )
            for item in order.items
        ],
        allowed_actions=[action.value for action in allowed_actions(order.status)],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def to_ledger_check_response(check: LedgerCheck) -> LedgerCheckResponse:
    return LedgerCheckResponse(
        part_id=check.part_id,
        cached_stock=check.cached_stock,
        replayed_stock=check.replayed_stock,
        movement_count=check.movement_count,
        consistent=check.consistent,
    )
