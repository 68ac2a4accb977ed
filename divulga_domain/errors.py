from __future__ import annotations


class DivulgaError(Exception):
    category: str = "unknown"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FetchError(DivulgaError):
    category = "fetch"


class WriteError(DivulgaError):
    category = "write"


class NotFoundError(WriteError):
    category = "not_found"


class ValidationError(DivulgaError):
    category = "validation"


class PermissionDeniedError(DivulgaError):
    category = "permission"
