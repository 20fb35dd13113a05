"""
Domain exceptions for the parts ledger.

Every failure the core reports to a caller is one of these types. They are
recoverable and structured: `code` is machine-readable and `details` carries
the values a caller needs to react (current stock, required status, ...).
"""

from typing import Any


class PartsLedgerError(Exception):
    """Base exception for all parts ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(PartsLedgerError):
    """Requested entity does not exist."""

    pass


class PartNotFoundError(NotFoundError):
    """Part not found in the catalog."""

    def __init__(self, part_ref: int | str):
        super().__init__(
            f"Part not found: {part_ref}",
            code="PART_NOT_FOUND",
            details={"part": part_ref},
        )


class OrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, order_ref: int | str):
        super().__init__(
            f"Order not found: {order_ref}",
            code="ORDER_NOT_FOUND",
            details={"order": order_ref},
        )


# Catalog Exceptions
class DuplicateCodeError(PartsLedgerError):
    """Part code is already held by another part."""

    def __init__(self, code: str, existing_id: int | None = None):
        super().__init__(
            f"Part code already exists: {code}",
            code="DUPLICATE_CODE",
            details={"part_code": code, "existing_id": existing_id},
        )


# Validation Exceptions
class ValidationError(PartsLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class PartInUseError(ValidationError):
    """Part is referenced by order lines and cannot be deleted."""

    def __init__(self, part_id: int, order_count: int):
        super().__init__(
            field="part_id",
            message=f"Part {part_id} is referenced by {order_count} order(s)",
            value=part_id,
        )
        self.code = "PART_IN_USE"
        self.details["order_count"] = order_count


# Ledger Exceptions
class LedgerError(PartsLedgerError):
    """Base exception for stock ledger rules."""

    pass


class InsufficientStockError(LedgerError):
    """OUT movement would drive stock negative."""

    def __init__(self, part_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for part {part_id}: "
            f"current stock {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "part_id": part_id,
                "requested": requested,
                "available": available,
            },
        )


class NoChangeError(LedgerError):
    """ADJUST target equals the current stock."""

    def __init__(self, part_id: int, stock: int):
        super().__init__(
            f"Stock for part {part_id} is already {stock}",
            code="NO_CHANGE",
            details={"part_id": part_id, "stock": stock},
        )


# Order Lifecycle Exceptions
class InvalidTransitionError(PartsLedgerError):
    """Order is not in the state a transition requires."""

    def __init__(self, order_ref: int | str, action: str, required: str, actual: str):
        super().__init__(
            f"Cannot {action} order {order_ref}: status must be {required} (is {actual})",
            code="INVALID_TRANSITION",
            details={
                "order": order_ref,
                "action": action,
                "required_status": required,
                "current_status": actual,
            },
        )


# Access Exceptions
class ForbiddenError(PartsLedgerError):
    """Authenticated user may not perform the action."""

    def __init__(self, action: str, reason: str):
        super().__init__(
            f"Not allowed to {action}: {reason}",
            code="FORBIDDEN",
            details={"action": action, "reason": reason},
        )


class UnauthenticatedError(PartsLedgerError):
    """No authenticated user identity was supplied."""

    def __init__(self, action: str | None = None):
        super().__init__(
            "Authentication required" + (f" to {action}" if action else ""),
            code="UNAUTHENTICATED",
            details={"action": action},
        )


# Storage Exceptions
class StorageError(PartsLedgerError):
    """Base exception for storage operations."""

    pass


class ConcurrencyConflictError(StorageError):
    """Lock wait or serialization failure; the caller should retry."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Concurrent update conflict during {operation}: {reason}",
            code="CONCURRENCY_CONFLICT",
            details={"operation": operation, "reason": reason, "retryable": True},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
