"""Error taxonomy for payout operations.

Every error carries a stable `code` (persisted in API responses) and the HTTP
status the routes answer with. Messages are meant to be shown to operators
as-is.
"""

from typing import Any


class PayoutError(RuntimeError):
    code = "PAYOUT_ERROR"
    status_code = 400

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class PayoutValidationError(PayoutError):
    """Bad input (month format, missing fields, invalid settings)."""

    code = "VALIDATION_ERROR"
    status_code = 400


class CapacityError(PayoutError):
    """A configured cap (founder stores, monthly contribution type) is reached."""

    code = "CAPACITY_EXCEEDED"
    status_code = 409


class ConflictError(PayoutError):
    """The month's lock state does not allow the operation."""

    code = "CONFLICT"
    status_code = 409


class ForbiddenError(PayoutError):
    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(PayoutError):
    code = "NOT_FOUND"
    status_code = 404
