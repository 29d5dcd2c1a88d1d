"""Service-level errors and their HTTP status mapping."""

from enum import StrEnum

from fastapi import status


class ErrorKind(StrEnum):
    """Categories of failure a service operation can report."""

    VALIDATION = "validation"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    ASSET_TOO_LARGE = "asset_too_large"
    STORAGE = "storage"
    UPDATE_FAILED = "update_failed"
    REGISTRATION_FAILED = "registration_failed"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_CREDENTIALS: 422,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.ASSET_TOO_LARGE: 422,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UPDATE_FAILED: 422,
    ErrorKind.REGISTRATION_FAILED: 422,
}


class ServiceError(Exception):
    """A failed service operation.

    Services raise this with an explicit ``kind``; only the application
    boundary turns it into an HTTP response.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        """HTTP status code for this error's kind."""
        return STATUS_BY_KIND.get(self.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
