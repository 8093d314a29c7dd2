"""
Service-layer error hierarchy.

Every service raises one of these; routes translate them to
{"error": message, "details": {...}} with the class's status code.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base for domain errors raised by services."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "details": self.details}


class ValidationError(ServiceError):
    """400-level input problem."""
    status_code = 400


class InvalidStateError(ServiceError):
    """Operation not allowed in the entity's current status."""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """409-level business rule conflict (stock, payment, overlap, duplicates)."""
    status_code = 409


class PermissionDeniedError(ServiceError):
    """Caller may see the entity but not act on it."""
    status_code = 403
