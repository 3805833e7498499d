"""Exceptions raised by identity provider adapters.

Routers translate these into HTTP responses; services let them propagate.
"""

from __future__ import annotations

from typing import Any


class IdentityError(Exception):
    """Base exception for all identity-provider errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class InvalidCredentials(IdentityError):
    """Raised when an email/password pair or access token is rejected."""


class UserAlreadyExists(IdentityError):
    """Raised when signing up with an email that is already registered."""


class MembershipConflict(IdentityError):
    """Raised when the user already belongs to the organization."""


class IdentityUnavailable(IdentityError):
    """Raised when the identity provider cannot be reached or misbehaves."""
