"""FastAPI router for sign-up, sign-in, invitations and memberships.

Identity failures are translated to HTTP status codes here; the services
and adapters only raise.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from atelier.deps import get_audit_store, get_current_user, get_identity, get_mailer
from atelier.identity import (
    AuthUser,
    IdentityError,
    IdentityProvider,
    IdentityUnavailable,
    InvalidCredentials,
    MembershipConflict,
    UserAlreadyExists,
    get_auth_status,
)
from atelier.schemas import (
    AcceptInviteRequest,
    AcceptInviteResponse,
    AuthStatusOut,
    AuthUserOut,
    InviteRequest,
    InviteResponse,
    MembershipOut,
    SessionOut,
    SignInRequest,
    SignUpRequest,
)
from atelier.services.audit import AuditLogStore
from atelier.services.invitations import (
    InsufficientRole,
    InvalidInviteRequest,
    InvalidInviteToken,
    InviteDeliveryFailed,
    InviteExpired,
    NotAMember,
    PasswordValidationError,
    accept_invite,
    invite_member,
    validate_new_password,
)
from atelier.services.email_templates import render_welcome
from atelier.services.mailer import EmailMessage, Mailer
from atelier.settings import settings

logger = logging.getLogger(__name__)

auth_router = APIRouter(tags=["auth"])


def _identity_http_error(exc: IdentityError) -> HTTPException:
    if isinstance(exc, InvalidCredentials):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, (UserAlreadyExists, MembershipConflict)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, IdentityUnavailable):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@auth_router.get("/auth/status", response_model=AuthStatusOut)
def auth_status():
    return AuthStatusOut.model_validate(get_auth_status())


@auth_router.post("/auth/sign-up", response_model=AuthUserOut)
def sign_up(
    payload: SignUpRequest,
    provider: IdentityProvider = Depends(get_identity),
    mailer: Mailer = Depends(get_mailer),
):
    try:
        validate_new_password(payload.password, payload.confirm_password)
    except PasswordValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        user = provider.sign_up(payload.email, payload.password)
    except IdentityError as exc:
        raise _identity_http_error(exc) from exc

    # Welcome email is best-effort; the account already exists.
    result = mailer.send(
        EmailMessage(
            to=user.email,
            subject="Bienvenido a Atelier",
            html=render_welcome(user.email.split("@")[0], app_url=settings.APP_URL),
        )
    )
    if not result.success:
        logger.warning("Welcome email to %s not sent: %s", user.email, result.error)
    return AuthUserOut.model_validate(user)


@auth_router.post("/auth/sign-in", response_model=SessionOut)
def sign_in(payload: SignInRequest, provider: IdentityProvider = Depends(get_identity)):
    try:
        session = provider.sign_in_with_password(payload.email, payload.password)
    except IdentityError as exc:
        raise _identity_http_error(exc) from exc
    return SessionOut.model_validate(session)


@auth_router.post("/auth/accept-invite", response_model=AcceptInviteResponse)
def accept_invitation(
    payload: AcceptInviteRequest, provider: IdentityProvider = Depends(get_identity)
):
    try:
        user, membership = accept_invite(
            provider, payload.token, payload.password, payload.confirm_password
        )
    except InvalidInviteToken as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except InviteExpired as exc:
        raise HTTPException(status_code=410, detail=str(exc)) from exc
    except PasswordValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except IdentityError as exc:
        logger.warning("Invite acceptance failed for token holder: %s", exc)
        raise _identity_http_error(exc) from exc

    return AcceptInviteResponse(
        user=AuthUserOut.model_validate(user),
        membership=MembershipOut(
            user_id=membership.user_id, org_id=membership.org_id, role=membership.role.value
        ),
    )


@auth_router.post("/members/invite", response_model=InviteResponse)
def invite(
    payload: InviteRequest,
    user: AuthUser = Depends(get_current_user),
    provider: IdentityProvider = Depends(get_identity),
    mailer: Mailer = Depends(get_mailer),
    audit_store: AuditLogStore = Depends(get_audit_store),
):
    try:
        outcome = invite_member(
            provider,
            mailer,
            audit_store,
            inviter=user,
            email=payload.email,
            role=payload.role,
            org_id=payload.org_id,
            org_name=payload.org_name,
            app_url=settings.APP_URL,
            ttl_days=settings.INVITE_TTL_DAYS,
        )
    except InvalidInviteRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (NotAMember, InsufficientRole) as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except InviteDeliveryFailed as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except IdentityError as exc:
        raise _identity_http_error(exc) from exc

    return InviteResponse(
        success=True,
        message=f"Invitation sent to {payload.email}",
        invite_url=outcome.invite_url,
    )
