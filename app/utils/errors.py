"""Custom exception hierarchy for the bookmark ledger API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str, code: str = "INVALID_INPUT") -> None:
        super().__init__(message=reason, code=code, status_code=400)


class InvalidAmountError(InvalidInputError):
    """Raised when a token amount is not a positive finite integer."""

    def __init__(self, reason: str = "Amount must be a positive integer") -> None:
        super().__init__(reason, code="INVALID_AMOUNT")


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class ForbiddenError(AppError):
    """Raised when the user lacks permission for the action."""

    def __init__(self, reason: str = "You don't have permission") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str, code: str = "NOT_FOUND") -> None:
        super().__init__(message=f"{resource} not found", code=code, status_code=404)


class SchemaNotFoundError(NotFoundError):
    """Raised when no metadata schema is registered for a content type."""

    def __init__(self, content_type: str) -> None:
        super().__init__(f"Schema for content type '{content_type}'", code="SCHEMA_NOT_FOUND")
        self.content_type = content_type


class MethodNotAllowedError(AppError):
    """Raised when a route exists but not for the requested method."""

    def __init__(self, reason: str = "Method not allowed") -> None:
        super().__init__(message=reason, code="METHOD_NOT_ALLOWED", status_code=405)


class StoreError(AppError):
    """Raised when the backing database rejects or fails a request.

    The message is generic; the underlying error is chained.
    """

    def __init__(self, reason: str = "Database request failed", code: str = "STORE_ERROR") -> None:
        super().__init__(message=reason, code=code, status_code=500)


class LedgerWriteFailedError(StoreError):
    """Raised when a ledger unit of work could not be committed."""

    def __init__(self, reason: str = "Ledger write failed") -> None:
        super().__init__(reason, code="LEDGER_WRITE_FAILED")
