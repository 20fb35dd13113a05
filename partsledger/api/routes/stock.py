"""Stock ledger endpoints."""

from fastapi import APIRouter, Depends, Query, status

from partsledger.api.dependencies import (
    get_current_user,
    get_ledger,
    get_record_movement_use_case,
)
from partsledger.application.dto.mappers import to_movement_response
from partsledger.application.dto.requests import RecordMovementRequest
from partsledger.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    RecordMovementResponse,
)
from partsledger.application.use_cases import RecordMovementUseCase
from partsledger.core.entities.stock import MovementKind
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.services.authorization import require_user
from partsledger.infrastructure.storage.sqlite import SQLiteStockLedgerStore

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.post(
    "/movements",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_movement(
    request: RecordMovementRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """
    Post an IN, OUT or ADJUST movement.

    For ADJUST, `quantity` is the counted stock the part should end at.
    """
    result = await use_case.execute(request, user)
    return use_case.to_response(result)


@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    part_id: int | None = Query(default=None),
    kind: MovementKind | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLiteStockLedgerStore = Depends(get_ledger),
) -> MovementListResponse:
    """List movements, newest first."""
    require_user(user, "view stock movements")
    movements = await store.list_movements(
        part_id=part_id, kind=kind, limit=limit, offset=offset
    )
    total = await store.count_movements(part_id=part_id, kind=kind)
    return MovementListResponse(
        items=[to_movement_response(m) for m in movements],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(movements) < total,
    )
