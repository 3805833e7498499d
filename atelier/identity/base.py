from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field


class Role(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


INVITABLE_ROLES = (Role.ADMIN, Role.EDITOR, Role.VIEWER)
INVITER_ROLES = (Role.OWNER, Role.ADMIN)


class AuthUser(BaseModel):
    id: str
    email: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuthSession(BaseModel):
    access_token: str
    user: AuthUser


class MembershipRecord(BaseModel):
    user_id: str
    org_id: str
    role: Role


class IdentityProvider:
    """Capability interface over the third-party identity provider.

    The app only needs to create accounts, sign them in, resolve a session
    token back to a user and manage organization memberships.  Adapters
    raise :mod:`atelier.identity.exceptions` errors on failure.
    """

    def sign_up(
        self, email: str, password: str, *, metadata: dict[str, Any] | None = None
    ) -> AuthUser:
        raise NotImplementedError

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    def get_user(self, access_token: str) -> AuthUser:
        raise NotImplementedError

    def insert_membership(self, user_id: str, org_id: str, role: Role | str) -> MembershipRecord:
        raise NotImplementedError

    def get_membership(self, user_id: str, org_id: str) -> MembershipRecord | None:
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources held by the adapter."""

    def __enter__(self) -> IdentityProvider:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
