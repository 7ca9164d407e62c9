"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError


class CarHireError(Exception):
    """Base class for errors reported back to the caller as ``{success, message}``."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CarHireError):
    """Malformed, missing or illogical input."""

    status_code = 400


class NotFoundError(CarHireError):
    status_code = 404


class ForbiddenError(CarHireError):
    """The referenced client is not allowed to hold bookings."""

    status_code = 403


class ConflictError(CarHireError):
    """The requested interval overlaps an active booking for the same vehicle."""

    status_code = 400


class PersistenceError(CarHireError):
    """The storage layer failed. The message is logged, never shown to callers."""

    status_code = 500


def validation_message(exc: PydanticValidationError) -> str:
    """Flatten the first pydantic error into ``"field: reason"``."""
    first = exc.errors()[0]
    reason = first["msg"].removeprefix("Value error, ")
    field = ".".join(str(part) for part in first["loc"] if part != "body")
    return f"{field}: {reason}" if field else reason
