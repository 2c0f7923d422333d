from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {'detail': self.message}


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(CustomBaseError):
    """Rejected input, raised before the store is touched. Not retryable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class StoreError(CustomBaseError):
    """Transaction failed and was rolled back. Safe to retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)
