"""datapond exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure class maps onto one category of pond, index, or view fault.
"""

from __future__ import annotations


class PondError(Exception):
    """Base exception for all datapond failures."""


class PondConfigError(PondError):
    """Raised for invalid runtime configuration."""


class PondNotFoundError(PondError):
    """Raised when no view or metadata exists for a requested name."""


class PondInvalidViewError(PondError):
    """Raised when a view record exists but lacks required fields."""


class PondUnsupportedTypeError(PondError):
    """Raised when an incoming file extension is not recognized."""


class PondIOError(PondError):
    """Raised for read, write, rename, extract, and hashing failures."""


class PondInvalidArgumentError(PondError):
    """Raised for bad representation tags or malformed inputs."""


class PondConversionError(PondError):
    """Raised when a derived representation cannot be produced."""


class PondDependencyError(PondError):
    """Raised when an optional runtime dependency is missing."""


class PondUnreadableContentError(PondIOError):
    """Raised when a file's bytes cannot be parsed for its schema."""
