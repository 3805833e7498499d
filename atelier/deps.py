"""Shared FastAPI dependencies.

Process-wide state (the audit store and the mailer) lives on
``app.state`` and is reached through these functions so tests can swap it
with ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from atelier.db import get_db
from atelier.identity import (
    AuthUser,
    IdentityProvider,
    IdentityUnavailable,
    InvalidCredentials,
    get_identity_provider,
)
from atelier.services.audit import AuditLogStore
from atelier.services.mailer import Mailer


def get_audit_store(request: Request) -> AuditLogStore:
    return request.app.state.audit_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_identity(db: Session = Depends(get_db)):
    provider = get_identity_provider(db)
    try:
        yield provider
    finally:
        provider.close()


def get_current_user(
    authorization: str | None = Header(default=None),
    provider: IdentityProvider = Depends(get_identity),
) -> AuthUser:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized. Please sign in.")
    token = authorization.split(" ", 1)[1].strip()
    try:
        return provider.get_user(token)
    except InvalidCredentials as exc:
        raise HTTPException(status_code=401, detail="Unauthorized. Please sign in.") from exc
    except IdentityUnavailable as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
