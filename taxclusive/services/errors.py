"""
Service-layer errors.
Routes never catch these; handlers registered in main.py map them to responses.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Required input missing or malformed. `errors` maps field name to message."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class NotFoundError(ServiceError):
    """Referenced record does not exist."""


class StorageError(ServiceError):
    """The database rejected or failed an operation."""
