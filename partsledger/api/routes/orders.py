"""Purchase order endpoints."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from partsledger.api.dependencies import (
    get_approve_order_use_case,
    get_create_order_use_case,
    get_current_user,
    get_delete_order_use_case,
    get_mark_ordered_use_case,
    get_orders,
    get_receive_order_use_case,
    get_reject_order_use_case,
    get_submit_order_use_case,
    get_update_order_use_case,
)
from partsledger.application.dto.mappers import to_order_response
from partsledger.application.dto.requests import (
    CreateOrderRequest,
    RejectOrderRequest,
    UpdateOrderRequest,
)
from partsledger.application.dto.responses import (
    ErrorResponse,
    OrderListResponse,
    OrderResponse,
    ReceiveOrderResponse,
)
from partsledger.application.use_cases import (
    ApproveOrderUseCase,
    CreateOrderUseCase,
    DeleteOrderUseCase,
    MarkOrderedUseCase,
    ReceiveOrderUseCase,
    RejectOrderUseCase,
    SubmitOrderUseCase,
    UpdateOrderUseCase,
)
from partsledger.core.entities.order import OrderStatus
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import OrderNotFoundError
from partsledger.core.services.authorization import require_user
from partsledger.infrastructure.storage.sqlite import SQLiteOrderStore

router = APIRouter(prefix="/api/orders", tags=["orders"])

TRANSITION_ERRORS = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    requested_by: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLiteOrderStore = Depends(get_orders),
) -> OrderListResponse:
    """List orders, newest first."""
    require_user(user, "view orders")
    orders = await store.list_orders(
        status=status_filter, requested_by=requested_by, limit=limit, offset=offset
    )
    total = await store.count_orders(status=status_filter, requested_by=requested_by)
    return OrderListResponse(
        items=[to_order_response(o) for o in orders],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(orders) < total,
    )


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    request: CreateOrderRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> OrderResponse:
    """Raise an order as DRAFT, or PENDING when `submit` is set."""
    order = await use_case.execute(request, user)
    return use_case.to_response(order)


@router.get(
    "/by-number/{order_number}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order_by_number(
    order_number: str,
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLiteOrderStore = Depends(get_orders),
) -> OrderResponse:
    require_user(user, "view orders")
    order = await store.get_order_by_number(order_number)
    if order is None:
        raise OrderNotFoundError(order_number)
    return to_order_response(order)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLiteOrderStore = Depends(get_orders),
) -> OrderResponse:
    require_user(user, "view orders")
    order = await store.get_order(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return to_order_response(order)


@router.put("/{order_id}", response_model=OrderResponse, responses=TRANSITION_ERRORS)
async def update_order(
    order_id: int,
    request: UpdateOrderRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: UpdateOrderUseCase = Depends(get_update_order_use_case),
) -> OrderResponse:
    """Replace the lines of a draft order."""
    order = await use_case.execute(order_id, request, user)
    return to_order_response(order)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=TRANSITION_ERRORS,
)
async def delete_order(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: DeleteOrderUseCase = Depends(get_delete_order_use_case),
) -> Response:
    """Delete a draft order."""
    await use_case.execute(order_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{order_id}/submit", response_model=OrderResponse, responses=TRANSITION_ERRORS)
async def submit_order(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: SubmitOrderUseCase = Depends(get_submit_order_use_case),
) -> OrderResponse:
    order = await use_case.execute(order_id, user)
    return to_order_response(order)


@router.post("/{order_id}/approve", response_model=OrderResponse, responses=TRANSITION_ERRORS)
async def approve_order(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: ApproveOrderUseCase = Depends(get_approve_order_use_case),
) -> OrderResponse:
    """Approve a pending order (admin or manager)."""
    order = await use_case.execute(order_id, user)
    return to_order_response(order)


@router.post("/{order_id}/reject", response_model=OrderResponse, responses=TRANSITION_ERRORS)
async def reject_order(
    order_id: int,
    request: RejectOrderRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: RejectOrderUseCase = Depends(get_reject_order_use_case),
) -> OrderResponse:
    """Reject a pending order with a reason (admin or manager)."""
    order = await use_case.execute(order_id, request.reason, user)
    return to_order_response(order)


@router.post(
    "/{order_id}/mark-ordered",
    response_model=OrderResponse,
    responses=TRANSITION_ERRORS,
)
async def mark_ordered(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: MarkOrderedUseCase = Depends(get_mark_ordered_use_case),
) -> OrderResponse:
    order = await use_case.execute(order_id, user)
    return to_order_response(order)


@router.post(
    "/{order_id}/receive",
    response_model=ReceiveOrderResponse,
    responses=TRANSITION_ERRORS,
)
async def receive_order(
    order_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: ReceiveOrderUseCase = Depends(get_receive_order_use_case),
) -> ReceiveOrderResponse:
    """Receive an ordered order, posting one IN movement per line."""
    result = await use_case.execute(order_id, user)
    return use_case.to_response(result)
