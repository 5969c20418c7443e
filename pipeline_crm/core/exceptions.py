"""Custom exceptions for the Pipeline CRM application."""

from __future__ import annotations


class PipelineCRMException(Exception):
    """Base exception for Pipeline CRM application."""

    pass


class ValidationError(PipelineCRMException):
    """Raised when validation fails."""

    pass


class NotFoundError(PipelineCRMException):
    """Raised when a resource is not found."""

    pass


class GatewayError(PipelineCRMException):
    """Raised when the persistence gateway rejects or fails an operation."""

    def __init__(self, message: str, status_code: int | None = None, table: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.table = table


class RowNotFoundError(GatewayError, NotFoundError):
    """Raised when an update or delete matches no row."""

    pass


class ConfigurationError(PipelineCRMException):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(PipelineCRMException):
    """Raised when authentication fails."""

    pass

