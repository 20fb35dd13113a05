"""Record Movement Use Case: IN, OUT or ADJUST through the stock ledger."""

from dataclasses import dataclass

from partsledger.application.dto.mappers import to_movement_response, to_part_response
from partsledger.application.dto.requests import RecordMovementRequest
from partsledger.application.dto.responses import RecordMovementResponse
from partsledger.config import get_logger
from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import StockMovement
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.interfaces.ledger_store import IStockLedgerStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.catalog import clean_text
from partsledger.core.services.stock_ledger import validate_quantity

logger = get_logger(__name__)


@dataclass
class RecordMovementResult:
    """Result of posting a movement."""

    part: Part
    movement: StockMovement


class RecordMovementUseCase:
    """Post a stock movement and update the part's stock atomically.

    For ADJUST the request quantity is the counted stock, not a delta.
    """

    def __init__(self, ledger_store: IStockLedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from partsledger.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(
        self, request: RecordMovementRequest, user: AuthenticatedUser | None
    ) -> RecordMovementResult:
        """Execute record movement use case."""
        user = require_user(user, "record stock movements")
        quantity = validate_quantity(request.kind, request.quantity)

        logger.info(
            "record_movement_started",
            part_id=request.part_id,
            kind=request.kind.value,
            quantity=quantity,
            user_id=user.id,
        )

        store = await self._get_ledger_store()
        part, movement = await store.record_movement(
            request.part_id,
            request.kind,
            quantity,
            user.id,
            note=clean_text(request.note),
            reference=clean_text(request.reference),
        )

        logger.info(
            "record_movement_complete",
            part_id=part.id,
            movement_id=movement.id,
            stock=part.stock,
        )
        return RecordMovementResult(part=part, movement=movement)

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        """Convert result to API response."""
        return RecordMovementResponse(
            part=to_part_response(result.part),
            movement=to_movement_response(result.movement),
        )
