"""
HTTP exception classes for the asset-ledger API.
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Raised when a request violates a business rule (missing warehouse, stock exceeded...)."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message
        )


class NotFoundError(HTTPException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} {resource_id} not found",
        )


class ExternalServiceError(HTTPException):
    """Raised when an external service call (attachment storage) fails."""

    def __init__(self, service_name: str, message: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{service_name} service error: {message}",
        )


class UnauthorizedError(HTTPException):
    """Raised when a request carries no valid bearer token."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)
