"""Import Parts Use Case: per-row create-or-update from catalog CSV."""

from dataclasses import dataclass, field

from partsledger.application.dto.responses import ImportResultResponse
from partsledger.config import get_logger
from partsledger.core.entities.part import Part
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import PartsLedgerError, ValidationError
from partsledger.core.interfaces.part_store import IPartStore
from partsledger.core.services.authorization import require_user
from partsledger.core.services.catalog_csv import PartRow, RowError, iter_csv_rows, parse_row

logger = get_logger(__name__)


@dataclass
class ImportResult:
    """Result of a catalog import. Successful rows stay committed."""

    created: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def decode_upload(content: bytes) -> str:
    """Decode an uploaded CSV file, dropping a UTF-8 BOM."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("file", "must be a UTF-8 encoded CSV file") from e


class ImportPartsUseCase:
    """Create or update parts keyed by code, one row at a time.

    Each row commits on its own: its catalog fields and any stock adjustment
    are written together or not at all. A failing row is recorded and the
    import moves on.
    """

    def __init__(self, part_store: IPartStore | None = None):
        self._part_store = part_store

    async def _get_part_store(self) -> IPartStore:
        if self._part_store is None:
            from partsledger.infrastructure.storage.sqlite import get_part_store

            self._part_store = await get_part_store()
        return self._part_store

    async def execute(self, text: str, user: AuthenticatedUser | None) -> ImportResult:
        """Execute import parts use case."""
        user = require_user(user, "import parts")
        logger.info("import_parts_started", user_id=user.id, size=len(text))

        result = ImportResult()
        rows = list(iter_csv_rows(text))
        if not rows:
            result.errors.append("No data rows")
            return result

        for line_no, fields in rows:
            try:
                row = parse_row(fields)
            except RowError as e:
                result.errors.append(f"Row {line_no}: {e}")
                continue

            try:
                created = await self._apply_row(row, user)
            except PartsLedgerError as e:
                logger.warning(
                    "import_row_failed", line=line_no, code=row.code, error=e.code
                )
                result.errors.append(f"Row {line_no} ({row.code}): {e.message}")
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        logger.info(
            "import_parts_complete",
            created=result.created,
            updated=result.updated,
            errors=len(result.errors),
        )
        return result

    async def _apply_row(self, row: PartRow, user: AuthenticatedUser) -> bool:
        """Write one row. Returns True when a new part was created."""
        part_store = await self._get_part_store()
        _, created = await part_store.import_part(
            Part(
                code=row.code,
                name=row.name,
                description=row.description,
                price=row.price,
                stock=row.stock,
            ),
            user.id,
        )
        return created

    def to_response(self, result: ImportResult) -> ImportResultResponse:
        """Convert result to API response."""
        return ImportResultResponse(
            success=result.success,
            created=result.created,
            updated=result.updated,
            errors=result.errors,
        )
