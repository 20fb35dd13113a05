"""Part catalog domain entity."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class Part(BaseModel):
    """A catalog part with its cached stock level.

    `stock` is a projection of the part's stock ledger. It is only written by
    ledger postings, never by catalog edits.
    """

    id: int | None = None
    code: str  # unique part code
    name: str
    description: str | None = None
    price: float = 0.0
    stock: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def stock_value(self) -> float:
        """Stock on hand valued at the current unit price."""
        return self.stock * self.price
