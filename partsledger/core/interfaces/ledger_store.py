"""Abstract interface for the stock ledger."""

from abc import ABC, abstractmethod

from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import MovementKind, StockMovement


class IStockLedgerStore(ABC):
    """Interface for stock movement persistence.

    `record_movement` is the single write path for `Part.stock`.
    """

    @abstractmethod
    async def record_movement(
        self,
        part_id: int,
        kind: MovementKind,
        quantity: int,
        user_id: str,
        note: str | None = None,
        reference: str | None = None,
    ) -> tuple[Part, StockMovement]:
        """
        Atomically apply a movement to a part and append it to the ledger.

        For ADJUST, `quantity` is the target stock. Raises PartNotFoundError,
        InsufficientStockError, NoChangeError or ConcurrencyConflictError.
        """
        pass

    @abstractmethod
    async def list_movements(
        self,
        part_id: int | None = None,
        kind: MovementKind | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements, newest first."""
        pass

    @abstractmethod
    async def count_movements(
        self, part_id: int | None = None, kind: MovementKind | None = None
    ) -> int:
        """Count movements matching the same filter as list_movements."""
        pass

    @abstractmethod
    async def get_ledger(self, part_id: int) -> list[StockMovement]:
        """All movements of a part in chronological order."""
        pass
