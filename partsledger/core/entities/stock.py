"""Stock ledger domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from partsledger.core.entities.part import utcnow


class MovementKind(str, Enum):
    """Types of stock movements."""

    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"


class StockMovement(BaseModel):
    """An immutable ledger entry for one change to a part's stock.

    `quantity` is always positive: units moved for IN/OUT, the magnitude of
    the correction for ADJUST. `stock_before`/`stock_after` keep the sign of
    adjustments so the ledger can be replayed.
    """

    id: int | None = None
    part_id: int  # FK → parts.id
    user_id: str
    kind: MovementKind
    quantity: int
    stock_before: int
    stock_after: int
    reference: str | None = None  # e.g. order number
    note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def signed_delta(self) -> int:
        """Effect of this movement on the part's stock."""
        if self.kind == MovementKind.IN:
            return self.quantity
        if self.kind == MovementKind.OUT:
            return -self.quantity
        return self.stock_after - self.stock_before


class LedgerCheck(BaseModel):
    """Outcome of replaying a part's ledger against its cached stock."""

    part_id: int
    cached_stock: int
    replayed_stock: int
    movement_count: int

    @property
    def consistent(self) -> bool:
        return self.cached_stock == self.replayed_stock
