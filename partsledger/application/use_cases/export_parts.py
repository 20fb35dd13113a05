"""Export Parts Use Case."""

from partsledger.config import get_logger
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.catalog_csv import export_csv

logger = get_logger(__name__)

PAGE_SIZE = 500


class ExportPartsUseCase:
    """Render the whole catalog, ordered by code, as CSV text."""

    def __init__(self, part_store: IPartStore | None = None):
        self._part_store = part_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(self, user: AuthenticatedUser | None) -> str:
        user = require_user(user, "export parts")
        store = await self._get_part_store()

        parts = []
        offset = 0
        while True:
            page = await store.list_parts(limit=PAGE_SIZE, offset=offset)
            parts.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        logger.info("export_parts_complete", count=len(parts), user_id=user.id)
        return export_csv(parts)
