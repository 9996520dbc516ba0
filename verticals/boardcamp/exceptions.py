"""
Domain exceptions for the Boardcamp service.

These exceptions represent domain-level errors and are independent
of infrastructure concerns. The API layer maps each one to an HTTP status.
"""

from typing import Any, Optional


class BoardcampError(Exception):
    """Base exception for all Boardcamp errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(BoardcampError):
    """Raised when request data is malformed or references missing records."""


class CapacityExceeded(InvalidInput):
    """Raised when every unit of a game is already rented out."""

    def __init__(self, game_id: int, active_rentals: int, stock_total: int):
        super().__init__(
            message=f"Game {game_id} has no units available",
            details={
                "game_id": game_id,
                "active_rentals": active_rentals,
                "stock_total": stock_total,
            },
        )


class NotFound(BoardcampError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} {resource_id} not found",
            details={"resource": resource, "id": resource_id},
        )


class AlreadySettled(BoardcampError):
    """Raised when a return is recorded for a rental that was already returned."""

    def __init__(self, rental_id: int):
        super().__init__(
            message=f"Rental {rental_id} was already returned",
            details={"rental_id": rental_id},
        )


class Conflict(BoardcampError):
    """Raised when a unique field (category/game name, customer cpf) is taken."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            message=f"{resource} with {field} {value!r} already exists",
            details={"resource": resource, "field": field, "value": value},
        )


class StorageError(BoardcampError):
    """Raised when the database is unavailable or a transaction is aborted."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Storage failure during {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
