"""
Typed errors raised by the point-of-sale core.

Every error carries a stable machine-readable ``kind`` and the HTTP status the
API layer maps it to. ``details`` names the offending entity or amounts.
"""
from typing import Any, Dict, Optional


class PosError(Exception):
    """Base class for all errors the core returns to callers."""

    kind = "pos_error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message, "details": self.details}


class ValidationError(PosError):
    """Malformed or missing input. No state was changed."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(PosError):
    kind = "not_found"
    status_code = 404


class ConflictError(PosError):
    """Duplicate item name on create or update."""

    kind = "conflict"
    status_code = 409


class InsufficientStockError(PosError):
    kind = "insufficient_stock"
    status_code = 400

    def __init__(self, item_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {item_name}: requested {requested}, available {available}",
            {"item": item_name, "requested": requested, "available": available},
        )


class InsufficientPaymentError(PosError):
    kind = "insufficient_payment"
    status_code = 400

    def __init__(self, total, received):
        super().__init__(
            f"Insufficient payment. Total: {total}, Received: {received}",
            {"total": str(total), "received": str(received)},
        )


class StorageError(PosError):
    """Document store unavailable or corrupt. No partial writes are visible."""

    kind = "storage_error"
    status_code = 500


class AuthError(PosError):
    kind = "auth_error"
    status_code = 401

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code
