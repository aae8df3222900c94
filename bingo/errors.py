"""Application errors.

Every error a handler can surface is an ``AppError``; the registered Flask
error handlers turn it into ``{"error": message, "code": code, ...details}``
with the error's status code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Malformed or out-of-range request data."""

    def __init__(self, message: str = "Validation error", details: Any | None = None,
                 code: str = "ValidationError") -> None:
        super().__init__(code=code, message=message, status_code=400, details=details)


class InvalidSelection(ValidationError):
    """Card selection breaks the count or index rules."""

    def __init__(self, message: str = "Invalid card selection", details: Any | None = None) -> None:
        super().__init__(message=message, details=details, code="InvalidSelection")


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None) -> None:
        super().__init__(code="NotFound", message=message, status_code=404, details=details)


class ConflictError(AppError):
    """Request conflicts with current state (reported as 400)."""

    def __init__(self, message: str = "Conflict", details: Any | None = None,
                 code: str = "ConflictError") -> None:
        super().__init__(code=code, message=message, status_code=400, details=details)


class SessionFull(ConflictError):
    def __init__(self, message: str = "Session is full", details: Any | None = None) -> None:
        super().__init__(message=message, details=details, code="SessionFull")


class SessionClosed(ConflictError):
    def __init__(self, message: str = "Session is not accepting players", details: Any | None = None) -> None:
        super().__init__(message=message, details=details, code="SessionClosed")


class CardUnavailable(ConflictError):
    def __init__(self, message: str = "Card already reserved", details: Any | None = None) -> None:
        super().__init__(message=message, details=details, code="CardUnavailable")


class InsufficientBalanceError(AppError):
    """Withdrawal larger than the stored balance."""

    def __init__(self, current_balance: float, requested_amount: float) -> None:
        super().__init__(
            code="InsufficientBalance",
            message="Insufficient balance",
            status_code=400,
            details={"currentBalance": current_balance, "requestedAmount": requested_amount},
        )


class UpstreamPaymentError(AppError):
    """Payment provider refused or failed; the client may retry."""

    def __init__(self, message: str = "Payment provider error", details: Any | None = None) -> None:
        super().__init__(code="UpstreamPaymentError", message=message, status_code=500, details=details)


class InternalError(AppError):
    def __init__(self, message: str = "Internal server error", details: Any | None = None) -> None:
        super().__init__(code="InternalError", message=message, status_code=500, details=details)
