"""Purchase order domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from partsledger.core.entities.part import utcnow


class OrderStatus(str, Enum):
    """Lifecycle states of a purchase order."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.RECEIVED, OrderStatus.REJECTED)


class OrderItem(BaseModel):
    """A single line on a purchase order."""

    id: int | None = None
    order_id: int | None = None
    part_id: int  # FK → parts.id
    quantity: int
    unit_price: float  # captured when the line is written
    subtotal: float = 0.0

    @model_validator(mode="after")
    def compute_subtotal(self) -> "OrderItem":
        """Compute subtotal from quantity and unit_price."""
        self.subtotal = self.quantity * self.unit_price
        return self


class Order(BaseModel):
    """A purchase order with line items and approval trail."""

    id: int | None = None
    order_number: str | None = None  # assigned on insert
    status: OrderStatus = OrderStatus.DRAFT
    note: str | None = None
    rejection_reason: str | None = None
    requested_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    ordered_at: datetime | None = None
    received_at: datetime | None = None
    total_amount: float = 0.0
    items: list[OrderItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def compute_total(self) -> "Order":
        """Compute total_amount from items."""
        if self.items:
            self.total_amount = sum(i.subtotal for i in self.items)
        return self
