"""Update Part Use Case."""

from partsledger.application.dto.requests import UpdatePartRequest
from partsledger.config import get_logger
from partsledger.core.entities.part import Part
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import PartNotFoundError
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.catalog import clean_text, validate_part_fields

logger = get_logger(__name__)


class UpdatePartUseCase:
    """Edit code, name, description or price of a part.

    Fields left out of the request keep their current value. Stock is never
    changed here.
    """

    def __init__(self, part_store: IPartStore | None = None):
        self._part_store = part_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(
        self,
        part_id: int,
        request: UpdatePartRequest,
        user: AuthenticatedUser | None,
    ) -> Part:
        user = require_user(user, "update parts")
        store = await self._get_part_store()

        part = await store.get_part(part_id)
        if part is None:
            raise PartNotFoundError(part_id)

        changes = request.model_dump(exclude_unset=True)
        if "description" in changes:
            part.description = clean_text(changes["description"])
        if changes.get("price") is not None:
            part.price = changes["price"]
        part.code, part.name = validate_part_fields(
            changes.get("code") or part.code,
            changes.get("name") or part.name,
            part.price,
        )

        logger.info(
            "update_part_started",
            part_id=part_id,
            fields=sorted(changes),
            user_id=user.id,
        )
        return await store.update_part(part)
