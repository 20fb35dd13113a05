"""Part catalog endpoints."""

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from partsledger.api.dependencies import (
    get_app_settings,
    get_create_part_use_case,
    get_current_user,
    get_delete_part_use_case,
    get_export_parts_use_case,
    get_import_parts_use_case,
    get_parts,
    get_update_part_use_case,
    get_verify_ledger_use_case,
)
from partsledger.application.dto.mappers import to_ledger_check_response, to_part_response
from partsledger.application.dto.requests import CreatePartRequest, UpdatePartRequest
from partsledger.application.dto.responses import (
    CreatePartResponse,
    ErrorResponse,
    ImportResultResponse,
    LedgerCheckResponse,
    PartListResponse,
    PartResponse,
)
from partsledger.application.use_cases import (
    CreatePartUseCase,
    DeletePartUseCase,
    ExportPartsUseCase,
    ImportPartsUseCase,
    UpdatePartUseCase,
    VerifyLedgerUseCase,
)
from partsledger.application.use_cases.import_parts import decode_upload
from partsledger.config import Settings
from partsledger.core.entities.user import AuthenticatedUser
from partsledger.core.exceptions import PartNotFoundError
from partsledger.core.services.authorization import require_user
from partsledger.infrastructure.storage.sqlite import SQLitePartStore

router = APIRouter(prefix="/api/parts", tags=["parts"])

EXPORT_FILENAME = "parts.csv"


@router.get("", response_model=PartListResponse)
async def list_parts(
    q: str | None = Query(default=None, description="Substring of code or name"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLitePartStore = Depends(get_parts),
) -> PartListResponse:
    """List parts ordered by code."""
    require_user(user, "view parts")
    parts = await store.list_parts(limit=limit, offset=offset, query=q)
    total = await store.count_parts(query=q)
    return PartListResponse(
        items=[to_part_response(p) for p in parts],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(parts) < total,
    )


@router.post(
    "",
    response_model=CreatePartResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_part(
    request: CreatePartRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: CreatePartUseCase = Depends(get_create_part_use_case),
) -> CreatePartResponse:
    """Add a part. Opening stock is posted to the ledger as an adjustment."""
    result = await use_case.execute(request, user)
    return use_case.to_response(result)


@router.get("/export")
async def export_parts(
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: ExportPartsUseCase = Depends(get_export_parts_use_case),
) -> Response:
    """Download the catalog as UTF-8 CSV with BOM."""
    content = await use_case.execute(user)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post(
    "/import",
    response_model=ImportResultResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def import_parts(
    file: UploadFile = File(...),
    user: AuthenticatedUser | None = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    use_case: ImportPartsUseCase = Depends(get_import_parts_use_case),
) -> ImportResultResponse:
    """
    Import a catalog CSV.

    Rows are created or updated by part code. Failing rows are reported and
    skipped; the rest are saved.
    """
    require_user(user, "import parts")
    filename = file.filename or ""
    if not filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type. Use: .csv",
        )

    content = await file.read()
    if len(content) > settings.api.max_upload_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.api.max_upload_size} bytes",
        )

    result = await use_case.execute(decode_upload(content), user)
    return use_case.to_response(result)


@router.get(
    "/by-code/{code}",
    response_model=PartResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_part_by_code(
    code: str,
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLitePartStore = Depends(get_parts),
) -> PartResponse:
    require_user(user, "view parts")
    part = await store.get_part_by_code(code)
    if part is None:
        raise PartNotFoundError(code)
    return to_part_response(part)


@router.get(
    "/{part_id}",
    response_model=PartResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_part(
    part_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    store: SQLitePartStore = Depends(get_parts),
) -> PartResponse:
    require_user(user, "view parts")
    part = await store.get_part(part_id)
    if part is None:
        raise PartNotFoundError(part_id)
    return to_part_response(part)


@router.patch(
    "/{part_id}",
    response_model=PartResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_part(
    part_id: int,
    request: UpdatePartRequest,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: UpdatePartUseCase = Depends(get_update_part_use_case),
) -> PartResponse:
    """Edit catalog fields. Stock changes go through /api/stock/movements."""
    part = await use_case.execute(part_id, request, user)
    return to_part_response(part)


@router.delete(
    "/{part_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_part(
    part_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: DeletePartUseCase = Depends(get_delete_part_use_case),
) -> Response:
    """Delete a part not referenced by any order."""
    await use_case.execute(part_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{part_id}/ledger/verify",
    response_model=LedgerCheckResponse,
    responses={404: {"model": ErrorResponse}},
)
async def verify_ledger(
    part_id: int,
    user: AuthenticatedUser | None = Depends(get_current_user),
    use_case: VerifyLedgerUseCase = Depends(get_verify_ledger_use_case),
) -> LedgerCheckResponse:
    """Replay the part's movements and compare with its cached stock."""
    check = await use_case.execute(part_id, user)
    return to_ledger_check_response(check)
