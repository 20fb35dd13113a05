"""Application use cases."""

from partsledger.application.use_cases.create_order import CreateOrderUseCase
from partsledger.application.use_cases.create_part import CreatePartResult, CreatePartUseCase
from partsledger.application.use_cases.delete_part import DeletePartUseCase
from partsledger.application.use_cases.export_parts import ExportPartsUseCase
from partsledger.application.use_cases.import_parts import ImportPartsUseCase, ImportResult
from partsledger.application.use_cases.order_transitions import (
    ApproveOrderUseCase,
    DeleteOrderUseCase,
    MarkOrderedUseCase,
    RejectOrderUseCase,
    SubmitOrderUseCase,
)
from partsledger.application.use_cases.receive_order import (
    ReceiveOrderResult,
    ReceiveOrderUseCase,
)
from partsledger.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from partsledger.application.use_cases.update_order import UpdateOrderUseCase
from partsledger.application.use_cases.update_part import UpdatePartUseCase
from partsledger.application.use_cases.verify_ledger import VerifyLedgerUseCase

__all__ = [
    # Catalog
    "CreatePartUseCase",
    "CreatePartResult",
    "UpdatePartUseCase",
    "DeletePartUseCase",
    "ImportPartsUseCase",
    "ImportResult",
    "ExportPartsUseCase",
    # Ledger
    "RecordMovementUseCase",
    "RecordMovementResult",
    "VerifyLedgerUseCase",
    # Orders
    "CreateOrderUseCase",
    "UpdateOrderUseCase",
    "SubmitOrderUseCase",
    "ApproveOrderUseCase",
    "RejectOrderUseCase",
    "MarkOrderedUseCase",
    "DeleteOrderUseCase",
    "ReceiveOrderUseCase",
    "ReceiveOrderResult",
]
