"""Database-backed identity provider for development and tests.

Stores users, session tokens and memberships in the application database
so the sign-up / invite flows can run without a live Supabase project.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from atelier.identity.base import (
    AuthSession,
    AuthUser,
    IdentityProvider,
    MembershipRecord,
    Role,
)
from atelier.identity.exceptions import (
    IdentityError,
    InvalidCredentials,
    MembershipConflict,
    UserAlreadyExists,
)
from atelier.models import AuthSession as AuthSessionRow
from atelier.models import Membership, User

PBKDF2_ITERATIONS = 120_000


def hash_password(password: str, *, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        _, iterations, salt, expected = encoded.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


def _to_auth_user(user: User) -> AuthUser:
    return AuthUser(id=str(user.id), email=user.email, metadata=dict(user.metadata_json or {}))


def _parse_user_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(user_id))
    except ValueError as exc:
        raise IdentityError(f"Invalid user id: {user_id}", details={"user_id": user_id}) from exc


class LocalIdentityProvider(IdentityProvider):
    def __init__(self, db: Session) -> None:
        self._db = db

    def sign_up(
        self, email: str, password: str, *, metadata: dict[str, Any] | None = None
    ) -> AuthUser:
        email = email.strip().lower()
        existing = self._db.execute(select(User).where(User.email == email)).scalars().first()
        if existing is not None:
            raise UserAlreadyExists("User already registered", details={"email": email})

        user = User(email=email, password_hash=hash_password(password), metadata_json=metadata or {})
        self._db.add(user)
        self._db.commit()
        self._db.refresh(user)
        return _to_auth_user(user)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        user = self._db.execute(select(User).where(User.email == email)).scalars().first()
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid login credentials")

        session_row = AuthSessionRow(access_token=secrets.token_urlsafe(32), user_id=user.id)
        self._db.add(session_row)
        self._db.commit()
        return AuthSession(access_token=session_row.access_token, user=_to_auth_user(user))

    def get_user(self, access_token: str) -> AuthUser:
        session_row = self._db.get(AuthSessionRow, access_token)
        if session_row is None:
            raise InvalidCredentials("Invalid or expired session")
        return _to_auth_user(session_row.user)

    def insert_membership(self, user_id: str, org_id: str, role: Role | str) -> MembershipRecord:
        role = Role(role)
        uid = _parse_user_id(user_id)
        if self._db.get(User, uid) is None:
            raise IdentityError("User not found", details={"user_id": str(user_id)})
        if self.get_membership(str(uid), org_id) is not None:
            raise MembershipConflict(
                "User already belongs to this organization",
                details={"user_id": str(uid), "org_id": org_id},
            )

        membership = Membership(user_id=uid, org_id=org_id, role=role.value)
        self._db.add(membership)
        self._db.commit()
        return MembershipRecord(user_id=str(uid), org_id=org_id, role=role)

    def get_membership(self, user_id: str, org_id: str) -> MembershipRecord | None:
        uid = _parse_user_id(user_id)
        membership = (
            self._db.execute(
                select(Membership).where(Membership.user_id == uid, Membership.org_id == org_id)
            )
            .scalars()
            .first()
        )
        if membership is None:
            return None
        return MembershipRecord(user_id=str(uid), org_id=org_id, role=Role(membership.role))
