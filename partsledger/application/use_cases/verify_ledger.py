"""Verify Ledger Use Case."""

from partsledger.config import get_logger
from partsledger.core.entities.stock import LedgerCheck
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import PartNotFoundError
from partsledger.core.interfaces.ledger_store import IStockLedgerStore
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.stock_ledger import replay

logger = get_logger(__name__)


class VerifyLedgerUseCase:
    """Replay a part's movements and compare with its cached stock."""

    def __init__(
        self,
        part_store: IPartStore | None = None,
        ledger_store: IStockLedgerStore | None = None,
    ):
        self._part_store = part_store
        self._ledger_store = ledger_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def _get_ledger_store(self) -> IStockLedgerStore:
        if self._ledger_store is None:
            from partsledger.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def execute(self, part_id: int, user: AuthenticatedUser | None) -> LedgerCheck:
        require_user(user, "verify the stock ledger")

        part = await (await self._get_part_store()).get_part(part_id)
        if part is None:
            raise PartNotFoundError(part_id)

        movements = await (await self._get_ledger_store()).get_ledger(part_id)
        check = LedgerCheck(
            part_id=part_id,
            cached_stock=part.stock,
            replayed_stock=replay(movements),
            movement_count=len(movements),
        )
        if not check.consistent:
            logger.warning(
                "ledger_drift_detected",
                part_id=part_id,
                cached_stock=check.cached_stock,
                replayed_stock=check.replayed_stock,
            )
        return check
