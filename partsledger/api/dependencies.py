"""
Dependency injection container for FastAPI.

Provides the caller identity, stores and use cases to route handlers.
"""

from functools import lru_cache

from fastapi import Request

from partsledger.application.use_cases import (
    ApproveOrderUseCase,
    CreateOrderUseCase,
    CreatePartUseCase,
    DeleteOrderUseCase,
    DeletePartUseCase,
    ExportPartsUseCase,
    ImportPartsUseCase,
    MarkOrderedUseCase,
    ReceiveOrderUseCase,
    RecordMovementUseCase,
    RejectOrderUseCase,
    SubmitOrderUseCase,
    UpdateOrderUseCase,
    UpdatePartUseCase,
    VerifyLedgerUseCase,
)
from partsledger.config import Settings, get_settings
from partsledger.core.entities.user import AuthenticatedUser, Role
from partsledger.infrastructure.storage.sqlite import (
    SQLiteOrderStore,
    SQLitePartStore,
    SQLiteStockLedgerStore,
    get_ledger_store,
    get_order_store,
    get_part_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Caller identity
def get_current_user(request: Request) -> AuthenticatedUser | None:
    """
    Read the caller identity set by the authenticating proxy.

    Returns None when no user id header is present; use cases reject
    anonymous callers with UnauthenticatedError.
    """
    settings = get_app_settings()
    user_id = (request.headers.get(settings.api.user_id_header) or "").strip()
    if not user_id:
        return None
    return AuthenticatedUser(
        id=user_id,
        role=Role.parse(request.headers.get(settings.api.user_role_header)),
    )


# Store dependencies
async def get_parts() -> SQLitePartStore:
    """Get part store."""
    return await get_part_store()


async def get_ledger() -> SQLiteStockLedgerStore:
    """Get stock ledger store."""
    return await get_ledger_store()


async def get_orders() -> SQLiteOrderStore:
    """Get order store."""
    return await get_order_store()


# Catalog use cases
def get_create_part_use_case() -> CreatePartUseCase:
    return CreatePartUseCase()


def get_update_part_use_case() -> UpdatePartUseCase:
    return UpdatePartUseCase()


def get_delete_part_use_case() -> DeletePartUseCase:
    return DeletePartUseCase()


def get_import_parts_use_case() -> ImportPartsUseCase:
    return ImportPartsUseCase()


def get_export_parts_use_case() -> ExportPartsUseCase:
    return ExportPartsUseCase()


# Ledger use cases
def get_record_movement_use_case() -> RecordMovementUseCase:
    return RecordMovementUseCase()


def get_verify_ledger_use_case() -> VerifyLedgerUseCase:
    return VerifyLedgerUseCase()


# Order use cases
def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase()


def get_update_order_use_case() -> UpdateOrderUseCase:
    return UpdateOrderUseCase()


def get_submit_order_use_case() -> SubmitOrderUseCase:
    return SubmitOrderUseCase()


def get_approve_order_use_case() -> ApproveOrderUseCase:
    return ApproveOrderUseCase()


def get_reject_order_use_case() -> RejectOrderUseCase:
    return RejectOrderUseCase()


def get_mark_ordered_use_case() -> MarkOrderedUseCase:
    return MarkOrderedUseCase()


def get_receive_order_use_case() -> ReceiveOrderUseCase:
    return ReceiveOrderUseCase()


def get_delete_order_use_case() -> DeleteOrderUseCase:
    return DeleteOrderUseCase()
