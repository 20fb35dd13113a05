"""Delete Part Use Case."""

from partsledger.config import get_logger
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user

logger = get_logger(__name__)


class DeletePartUseCase:
    """Remove a part that no order line references."""

    def __init__(self, part_store: IPartStore | None = None):
        self._part_store = part_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(self, part_id: int, user: AuthenticatedUser | None) -> None:
        user = require_user(user, "delete parts")
        logger.info("delete_part_started", part_id=part_id, user_id=user.id)
        store = await self._get_part_store()
        await store.delete_part(part_id)
