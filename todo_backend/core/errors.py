"""Typed failures raised by the service layer and their HTTP rendering."""

from enum import StrEnum

from pydantic import BaseModel

from todo_backend.core.config import Constants


class ErrorKind(StrEnum):
    """Every failure a core operation can report."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    INVALID_CREDENTIAL = "invalid_credential"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_SESSION_EXPIRED = "ERR_SESSION_EXPIRED"
    ERR_FORBIDDEN = "ERR_FORBIDDEN"
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_CONFLICT = "ERR_CONFLICT"
    ERR_INVALID_CREDENTIAL = "ERR_INVALID_CREDENTIAL"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: Constants.HTTP_NOT_FOUND,
    ErrorKind.EXPIRED: Constants.HTTP_LOGIN_TIMEOUT,
    ErrorKind.FORBIDDEN: Constants.HTTP_FORBIDDEN,
    ErrorKind.INVALID_INPUT: Constants.HTTP_BAD_REQUEST,
    ErrorKind.CONFLICT: Constants.HTTP_CONFLICT,
    ErrorKind.INVALID_CREDENTIAL: Constants.HTTP_UNAUTHORIZED,
}

_CODE_BY_KIND: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: ErrorCode.ERR_NOT_FOUND,
    ErrorKind.EXPIRED: ErrorCode.ERR_SESSION_EXPIRED,
    ErrorKind.FORBIDDEN: ErrorCode.ERR_FORBIDDEN,
    ErrorKind.INVALID_INPUT: ErrorCode.ERR_INVALID_INPUT,
    ErrorKind.CONFLICT: ErrorCode.ERR_CONFLICT,
    ErrorKind.INVALID_CREDENTIAL: ErrorCode.ERR_INVALID_CREDENTIAL,
}


class ErrorResponse(BaseModel):
    """Structured error body returned over HTTP."""

    error: str
    code: str


class AppError(Exception):
    """A typed failure carrying its kind and a human-readable message."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    @property
    def code(self) -> str:
        return _CODE_BY_KIND[self.kind]

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.message, code=self.code)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r})"


def not_found(message: str) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message)


def invalid_input(message: str) -> AppError:
    return AppError(ErrorKind.INVALID_INPUT, message)


def server_error_response() -> ErrorResponse:
    """Generic body for failures that are not an AppError."""
    return ErrorResponse(error="Server error", code=ErrorCode.ERR_UNKNOWN)
