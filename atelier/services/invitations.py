"""Organization invitations.

An invite is a self-contained base64url token carrying the invitee, the
role, the organization and an expiry timestamp in epoch milliseconds.
Accepting it signs the invitee up with the identity provider and then
creates the membership.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass

from atelier.identity import (
    INVITABLE_ROLES,
    INVITER_ROLES,
    AuthUser,
    IdentityProvider,
    MembershipRecord,
    Role,
)
from atelier.services.audit import AuditLogStore
from atelier.services.email_templates import render_invitation
from atelier.services.mailer import EmailMessage, Mailer

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
DAY_MS = 24 * 60 * 60 * 1000


class InviteError(Exception):
    """Base exception for invitation failures."""


class InvalidInviteRequest(InviteError):
    """Missing fields or a role that cannot be invited."""


class InvalidInviteToken(InviteError):
    """Token could not be decoded."""


class InviteExpired(InviteError):
    """Token decoded but its expiry is in the past."""


class PasswordValidationError(InviteError):
    """Password and confirmation do not match or are too short."""


class NotAMember(InviteError):
    """Inviter does not belong to the organization."""


class InsufficientRole(InviteError):
    """Inviter belongs to the organization but may not invite."""


class InviteDeliveryFailed(InviteError):
    """The invitation email could not be handed off."""


@dataclass(frozen=True)
class InviteData:
    email: str
    role: str
    org_id: str
    invited_by: str
    expires: int  # epoch ms

    def to_payload(self) -> dict:
        return {
            "email": self.email,
            "role": self.role,
            "orgId": self.org_id,
            "invitedBy": self.invited_by,
            "expires": self.expires,
        }


@dataclass(frozen=True)
class InviteOutcome:
    invite_url: str
    message_id: str | None
    invite: InviteData


def _now_ms() -> int:
    return int(time.time() * 1000)


def create_invite_token(
    email: str,
    role: str,
    org_id: str,
    invited_by: str,
    *,
    ttl_days: int = 7,
    now_ms: int | None = None,
) -> tuple[str, InviteData]:
    now_ms = _now_ms() if now_ms is None else now_ms
    invite = InviteData(
        email=email,
        role=role,
        org_id=org_id,
        invited_by=invited_by,
        expires=now_ms + ttl_days * DAY_MS,
    )
    raw = json.dumps(invite.to_payload(), separators=(",", ":")).encode("utf-8")
    token = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    return token, invite


def decode_invite_token(token: str, *, now_ms: int | None = None) -> InviteData:
    if not token:
        raise InvalidInviteToken("No se encontró token de invitación.")
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
        invite = InviteData(
            email=payload["email"],
            role=payload["role"],
            org_id=payload["orgId"],
            invited_by=payload["invitedBy"],
            expires=int(payload["expires"]),
        )
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise InvalidInviteToken("Token de invitación inválido.") from exc

    now_ms = _now_ms() if now_ms is None else now_ms
    if invite.expires < now_ms:
        raise InviteExpired("Esta invitación ha expirado. Solicita una nueva invitación.")
    return invite


def build_invite_url(token: str, app_url: str) -> str:
    return f"{app_url.rstrip('/')}/auth/accept-invite?token={token}"


def validate_new_password(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise PasswordValidationError("Las contraseñas no coinciden")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
        )


def accept_invite(
    provider: IdentityProvider,
    token: str,
    password: str,
    confirm_password: str,
    *,
    now_ms: int | None = None,
) -> tuple[AuthUser, MembershipRecord]:
    invite = decode_invite_token(token, now_ms=now_ms)
    validate_new_password(password, confirm_password)

    user = provider.sign_up(
        invite.email,
        password,
        metadata={"invited_to_org": invite.org_id, "invited_role": invite.role},
    )
    membership = provider.insert_membership(user.id, invite.org_id, invite.role)
    return user, membership


def invite_member(
    provider: IdentityProvider,
    mailer: Mailer,
    audit_store: AuditLogStore,
    *,
    inviter: AuthUser,
    email: str,
    role: str,
    org_id: str,
    org_name: str | None,
    app_url: str,
    ttl_days: int = 7,
) -> InviteOutcome:
    """Issue an invitation on behalf of *inviter*.

    Only owners and admins of *org_id* may invite.  The audit entry is
    best-effort: a failure there is logged and the invite still succeeds.
    """
    if not email or not role or not org_id:
        raise InvalidInviteRequest("Missing required fields: email, role, orgId")
    if role not in {r.value for r in INVITABLE_ROLES}:
        raise InvalidInviteRequest("Invalid role. Must be admin, editor, or viewer")

    membership = provider.get_membership(inviter.id, org_id)
    if membership is None:
        raise NotAMember("You do not belong to this organization")
    if membership.role not in INVITER_ROLES:
        raise InsufficientRole("Only owners and admins can invite members")

    token, invite = create_invite_token(
        email, role, org_id, inviter.email or inviter.id, ttl_days=ttl_days
    )
    invite_url = build_invite_url(token, app_url)
    org_label = org_name or "la organización"

    result = mailer.send(
        EmailMessage(
            to=email,
            subject=f"Invitación a {org_label}",
            html=render_invitation(
                inviter.email or "Un miembro del equipo", org_label, invite_url, role
            ),
        )
    )
    if not result.success:
        logger.error("Error sending invitation email to %s: %s", email, result.error)
        raise InviteDeliveryFailed(
            "Failed to send invitation email. The invite link has been generated but not sent."
        )

    try:
        audit_store.record(
            {
                "user_id": inviter.id,
                "user_name": inviter.email,
                "action": "invite_member",
                "entity_type": "membership",
                "entity_id": org_id,
                "entity_title": email,
                "tags": [f"role:{Role(role).value}"],
            }
        )
    except Exception:
        logger.exception("Error creating audit log entry for invite to %s", email)

    return InviteOutcome(invite_url=invite_url, message_id=result.message_id, invite=invite)

