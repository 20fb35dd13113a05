"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. PART_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class HealthResponse(BaseModel):
    """Service health."""

    status: str
    version: str
    uptime_seconds: float
    database: str


# --- Parts ---


class PartResponse(BaseModel):
    """Part response DTO."""

    id: int
    code: str
    name: str
    description: str | None = None
    price: float
    stock: int
    stock_value: float
    created_at: datetime
    updated_at: datetime


class PartListResponse(PaginatedResponse):
    """Paginated part list."""

    items: list[PartResponse]


class ImportResultResponse(BaseModel):
    """Outcome of a catalog import.

    `success` is false when any row failed; rows that succeeded stay saved.
    """

    success: bool
    created: int
    updated: int
    errors: list[str] = Field(default_factory=list)


# --- Stock ledger ---


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    part_id: int
    user_id: str
    kind: str
    quantity: int
    stock_before: int
    stock_after: int
    reference: str | None = None
    note: str | None = None
    created_at: datetime


class MovementListResponse(PaginatedResponse):
    """Paginated movement list."""

    items: list[StockMovementResponse]


class CreatePartResponse(BaseModel):
    """A created part and its opening stock movement, if any."""

    part: PartResponse
    opening_movement: StockMovementResponse | None = None


class RecordMovementResponse(BaseModel):
    """Response for a posted stock movement."""

    part: PartResponse
    movement: StockMovementResponse


class LedgerCheckResponse(BaseModel):
    """Replay of a part's ledger compared with its cached stock."""

    part_id: int
    cached_stock: int
    replayed_stock: int
    movement_count: int
    consistent: bool


# --- Orders ---


class OrderItemResponse(BaseModel):
    """Order line response DTO."""

    id: int
    part_id: int
    quantity: int
    unit_price: float
    subtotal: float


class OrderResponse(BaseModel):
    """Purchase order response DTO."""

    id: int
    order_number: str
    status: str
    note: str | None = None
    rejection_reason: str | None = None
    requested_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    ordered_at: datetime | None = None
    received_at: datetime | None = None
    total_amount: float
    items: list[OrderItemResponse]
    allowed_actions: list[str] = Field(
        default_factory=list,
        description="Transitions the current status permits",
    )
    created_at: datetime
    updated_at: datetime


class OrderListResponse(PaginatedResponse):
    """Paginated order list."""

    items: list[OrderResponse]


class ReceiveOrderResponse(BaseModel):
    """A received order and the IN movements it posted."""

    order: OrderResponse
    movements: list[StockMovementResponse]
