"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field

from partsledger.core.entities.stock import MovementKind

# --- Parts ---


class CreatePartRequest(BaseModel):
    """Request to add a part to the catalog."""

    code: str = Field(..., min_length=1, max_length=100, description="Unique part code")
    name: str = Field(..., min_length=1, max_length=200, description="Part name")
    description: str | None = Field(default=None, description="Free-text description")
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Unit price")
    stock: int = Field(
        default=0,
        ge=0,
        description="Opening stock, posted to the ledger as an adjustment",
    )


class UpdatePartRequest(BaseModel):
    """Request to edit catalog fields of a part.

    Stock is not editable here; use a stock movement instead.
    """

    code: str | None = Field(default=None, min_length=1, max_length=100, description="Part code")
    name: str | None = Field(default=None, min_length=1, max_length=200, description="Part name")
    description: str | None = Field(default=None, description="Description")
    price: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Unit price"
    )


# --- Stock ledger ---


class RecordMovementRequest(BaseModel):
    """Request to post a stock movement."""

    part_id: int = Field(..., description="Part ID")
    kind: MovementKind = Field(..., description="IN, OUT or ADJUST")
    quantity: int = Field(
        ...,
        description="Units moved for IN/OUT; counted stock to set for ADJUST",
    )
    note: str | None = Field(default=None, max_length=500, description="Free-text note")
    reference: str | None = Field(default=None, max_length=100, description="External reference")


# --- Orders ---


class OrderItemRequest(BaseModel):
    """A single line of a purchase order."""

    part_id: int = Field(..., description="Part ID")
    quantity: int = Field(..., description="Quantity to order (1 or more)")
    unit_price: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Unit price (defaults to the part's current price)",
    )


class CreateOrderRequest(BaseModel):
    """Request to raise a purchase order."""

    items: list[OrderItemRequest] = Field(default_factory=list, description="Line items")
    note: str | None = Field(default=None, max_length=1000, description="Order note")
    submit: bool = Field(
        default=False,
        description="Submit for approval immediately instead of saving as draft",
    )


class UpdateOrderRequest(BaseModel):
    """Request to replace the lines of a draft order."""

    items: list[OrderItemRequest] = Field(default_factory=list, description="Line items")
    note: str | None = Field(default=None, max_length=1000, description="Order note")
    submit: bool = Field(default=False, description="Submit for approval after saving")


class RejectOrderRequest(BaseModel):
    """Request to reject a pending order."""

    reason: str = Field(default="", max_length=1000, description="Rejection reason")
