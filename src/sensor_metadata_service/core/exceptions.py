"""Service and repository exceptions."""
from __future__ import annotations


class ServiceError(Exception):
    """Base error for service layer."""


class RepositoryError(ServiceError):
    """Raised when repository operations fail."""


class NotFoundError(RepositoryError):
    """Raised when requested entity is missing."""


class InvalidCoordinatesError(RepositoryError):
    """Raised when the database cannot interpret supplied coordinates as numbers."""


class GeocodingError(ServiceError):
    """Raised when the geocoding provider cannot be reached or answers garbage."""
