"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass

VALIDATION_ERROR_CODE = "E422"
DEFAULT_ERROR_CODE = "E400"


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


class ValidationError(ServiceError):
    """Caller input violates a documented precondition."""

    def __init__(self, message: str) -> None:
        super().__init__(code=VALIDATION_ERROR_CODE, message=message, status_code=422)


class DefaultError(ServiceError):
    """Internal post-condition failure or a failing collaborator (image IO, rendering)."""

    def __init__(self, message: str) -> None:
        super().__init__(code=DEFAULT_ERROR_CODE, message=message, status_code=400)


def err_bad_payload(message: str | None = None) -> ValidationError:
    return ValidationError(message or "QR code must be a non-empty string")


def err_invalid_crc(message: str | None = None) -> ValidationError:
    return ValidationError(message or "Invalid QR code CRC16")


def err_bad_amount(message: str | None = None) -> ValidationError:
    return ValidationError(message or "Amount must be a positive integer")


def err_bad_fee(message: str | None = None) -> ValidationError:
    return ValidationError(message or "Fee must be a non-negative number")


def err_internal(message: str | None = None) -> DefaultError:
    return DefaultError(message or "Failed to generate valid QR code, please try again")
