"""Create Part Use Case."""

from dataclasses import dataclass

from partsledger.application.dto.mappers import to_movement_response, to_part_response
from partsledger.application.dto.requests import CreatePartRequest
from partsledger.application.dto.responses import CreatePartResponse
from partsledger.config import get_logger
from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import StockMovement
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.catalog import (
    clean_text,
    validate_opening_stock,
    validate_part_fields,
)

logger = get_logger(__name__)


@dataclass
class CreatePartResult:
    """Result of creating a part."""

    part: Part
    opening_movement: StockMovement | None = None


class CreatePartUseCase:
    """Add a part to the catalog, posting any opening stock to the ledger."""

    def __init__(self, part_store: IPartStore | None = None):
        self._part_store = part_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(
        self, request: CreatePartRequest, user: AuthenticatedUser | None
    ) -> CreatePartResult:
        """Execute create part use case."""
        user = require_user(user, "create parts")
        code, name = validate_part_fields(request.code, request.name, request.price)
        stock = validate_opening_stock(request.stock)

        logger.info("create_part_started", code=code, user_id=user.id)

        store = await self._get_part_store()
        part, movement = await store.create_part(
            Part(
                code=code,
                name=name,
                description=clean_text(request.description),
                price=request.price,
                stock=stock,
            ),
            user.id,
        )
        return CreatePartResult(part=part, opening_movement=movement)

    def to_response(self, result: CreatePartResult) -> CreatePartResponse:
        """Convert result to API response."""
        return CreatePartResponse(
            part=to_part_response(result.part),
            opening_movement=(
                to_movement_response(result.opening_movement)
                if result.opening_movement
                else None
            ),
        )
