"""
Core business rules.

Layer-pure modules that depend only on:
- partsledger/core/entities/*
- partsledger/core/exceptions.py

NO infrastructure imports.
"""

from partsledger.core.services.authorization import (
    can_approve_orders,
    can_create_orders,
    ensure_approver,
    ensure_requester,
    require_user,
)
from partsledger.core.services.catalog import (
    clean_text,
    validate_opening_stock,
    validate_part_fields,
)
from partsledger.core.services.catalog_csv import (
    CSV_HEADER,
    PartRow,
    RowError,
    export_csv,
    iter_csv_rows,
    parse_row,
)
from partsledger.core.services.order_workflow import (
    OrderAction,
    allowed_actions,
    build_items,
    ensure_transition,
    format_order_number,
    next_order_number,
    order_total,
)
from partsledger.core.services.stock_ledger import (
    LedgerPosting,
    adjustment_note,
    plan_movement,
    replay,
)

__all__ = [
    # Authorization
    "can_approve_orders",
    "can_create_orders",
    "ensure_approver",
    "ensure_requester",
    "require_user",
    # Catalog
    "clean_text",
    "validate_opening_stock",
    "validate_part_fields",
    # Catalog CSV
    "CSV_HEADER",
    "PartRow",
    "RowError",
    "export_csv",
    "iter_csv_rows",
    "parse_row",
    # Orders
    "OrderAction",
    "allowed_actions",
    "build_items",
    "ensure_transition",
    "format_order_number",
    "next_order_number",
    "order_total",
    # Ledger
    "LedgerPosting",
    "adjustment_note",
    "plan_movement",
    "replay",
]
