"""Tests for invite tokens, acceptance and member invitations."""

from __future__ import annotations

import base64
import json

import pytest

from atelier.identity import InvalidCredentials, LocalIdentityProvider, MembershipConflict, Role
from atelier.services.audit import AuditLogStore
from atelier.services.invitations import (
    DAY_MS,
    InsufficientRole,
    InvalidInviteRequest,
    InvalidInviteToken,
    InviteDeliveryFailed,
    InviteExpired,
    NotAMember,
    PasswordValidationError,
    accept_invite,
    build_invite_url,
    create_invite_token,
    decode_invite_token,
    invite_member,
    validate_new_password,
)
from atelier.services.mailer import DryRunMailer

NOW_MS = 1_760_000_000_000
APP_URL = "https://app.atelier.mx"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TestInviteTokens:
    def test_token_round_trip(self):
        token, invite = create_invite_token(
            "ana@estudio.mx", "editor", "org-1", "diego@estudio.mx", now_ms=NOW_MS
        )
        assert "=" not in token
        assert invite.expires == NOW_MS + 7 * DAY_MS
        assert decode_invite_token(token, now_ms=NOW_MS) == invite

    def test_payload_uses_camel_case_keys(self):
        token, _ = create_invite_token("a@b.mx", "viewer", "org-1", "owner@b.mx", now_ms=NOW_MS)
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        assert set(json.loads(raw)) == {"email", "role", "orgId", "invitedBy", "expires"}

    def test_expired_token(self):
        token, _ = create_invite_token(
            "a@b.mx", "viewer", "org-1", "owner@b.mx", ttl_days=1, now_ms=NOW_MS
        )
        decode_invite_token(token, now_ms=NOW_MS + DAY_MS)
        with pytest.raises(InviteExpired):
            decode_invite_token(token, now_ms=NOW_MS + DAY_MS + 1)

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "@@not-base64@@",
            base64.urlsafe_b64encode(b"not json").decode(),
            base64.urlsafe_b64encode(b'{"email": "a@b.mx"}').decode(),
        ],
    )
    def test_invalid_tokens(self, token):
        with pytest.raises(InvalidInviteToken):
            decode_invite_token(token, now_ms=NOW_MS)

    def test_invite_url(self):
        assert build_invite_url("abc", APP_URL + "/") == f"{APP_URL}/auth/accept-invite?token=abc"

    def test_password_rules(self):
        validate_new_password("secreto", "secreto")
        with pytest.raises(PasswordValidationError, match="no coinciden"):
            validate_new_password("secreto", "secretO")
        with pytest.raises(PasswordValidationError, match="6 caracteres"):
            validate_new_password("abc", "abc")


# ---------------------------------------------------------------------------
# Acceptance
# ---------------------------------------------------------------------------


class TestAcceptInvite:
    def test_accept_creates_user_and_membership(self, db):
        provider = LocalIdentityProvider(db)
        token, _ = create_invite_token("nuevo@estudio.mx", "editor", "org-1", "owner@estudio.mx")

        user, membership = accept_invite(provider, token, "secreto", "secreto")
        assert user.email == "nuevo@estudio.mx"
        assert user.metadata == {"invited_to_org": "org-1", "invited_role": "editor"}
        assert membership.role is Role.EDITOR
        assert provider.get_membership(user.id, "org-1") is not None

    def test_password_checked_before_sign_up(self, db):
        provider = LocalIdentityProvider(db)
        token, _ = create_invite_token("nuevo@estudio.mx", "editor", "org-1", "owner@estudio.mx")
        with pytest.raises(PasswordValidationError):
            accept_invite(provider, token, "secreto", "distinto")
        with pytest.raises(InvalidCredentials):
            provider.sign_in_with_password("nuevo@estudio.mx", "secreto")

    def test_expired_invite_is_rejected(self, db):
        provider = LocalIdentityProvider(db)
        token, _ = create_invite_token(
            "nuevo@estudio.mx", "editor", "org-1", "owner@estudio.mx", now_ms=NOW_MS
        )
        with pytest.raises(InviteExpired):
            accept_invite(provider, token, "secreto", "secreto", now_ms=NOW_MS + 8 * DAY_MS)

    def test_existing_member_conflict(self, db):
        provider = LocalIdentityProvider(db)
        token, _ = create_invite_token("nuevo@estudio.mx", "editor", "org-1", "owner@estudio.mx")
        accept_invite(provider, token, "secreto", "secreto")

        class ReusingProvider(LocalIdentityProvider):
            def sign_up(self, email, password, *, metadata=None):
                return self.sign_in_with_password(email, password).user

        with pytest.raises(MembershipConflict):
            accept_invite(ReusingProvider(db), token, "secreto", "secreto")


# ---------------------------------------------------------------------------
# Inviting
# ---------------------------------------------------------------------------


@pytest.fixture()
def org(db):
    """An organization with an owner, an admin and a viewer."""
    provider = LocalIdentityProvider(db)
    members = {}
    for role in ("owner", "admin", "viewer"):
        user = provider.sign_up(f"{role}@estudio.mx", "secreto")
        provider.insert_membership(user.id, "org-1", role)
        members[role] = user
    return provider, members


def _invite(provider, inviter, *, mailer=None, audit_store=None, **overrides):
    kwargs = {
        "inviter": inviter,
        "email": "nuevo@estudio.mx",
        "role": "editor",
        "org_id": "org-1",
        "org_name": "Estudio <Norte>",
        "app_url": APP_URL,
    }
    kwargs.update(overrides)
    return invite_member(
        provider,
        mailer or DryRunMailer(),
        audit_store if audit_store is not None else AuditLogStore(),
        **kwargs,
    )


class TestInviteMember:
    @pytest.mark.parametrize("role", ["owner", "admin"])
    def test_owner_and_admin_can_invite(self, org, role):
        provider, members = org
        mailer = DryRunMailer()
        audit_store = AuditLogStore()

        outcome = _invite(provider, members[role], mailer=mailer, audit_store=audit_store)

        assert outcome.invite_url.startswith(f"{APP_URL}/auth/accept-invite?token=")
        assert outcome.message_id.startswith("dryrun-")
        assert outcome.invite.invited_by == f"{role}@estudio.mx"

        (message,) = mailer.outbox
        assert message.to == "nuevo@estudio.mx"
        assert message.subject == "Invitación a Estudio <Norte>"
        assert "Estudio &lt;Norte&gt;" in message.html

        (entry,) = audit_store.recent(10)
        assert entry.action == "invite_member"
        assert entry.entity_type == "membership"
        assert entry.entity_title == "nuevo@estudio.mx"
        assert entry.tags == ["role:editor"]

    def test_token_in_url_is_accepted(self, org):
        provider, members = org
        outcome = _invite(provider, members["owner"], role="viewer")
        token = outcome.invite_url.split("token=", 1)[1]
        user, membership = accept_invite(provider, token, "secreto", "secreto")
        assert user.email == "nuevo@estudio.mx"
        assert membership.role is Role.VIEWER

    def test_viewer_cannot_invite(self, org):
        provider, members = org
        mailer = DryRunMailer()
        with pytest.raises(InsufficientRole):
            _invite(provider, members["viewer"], mailer=mailer)
        assert mailer.outbox == []

    def test_non_member_cannot_invite(self, org):
        provider, members = org
        with pytest.raises(NotAMember):
            _invite(provider, members["owner"], org_id="org-2")

    @pytest.mark.parametrize(
        "overrides",
        [{"email": ""}, {"role": ""}, {"org_id": ""}, {"role": "owner"}, {"role": "superuser"}],
    )
    def test_invalid_requests(self, org, overrides):
        provider, members = org
        with pytest.raises(InvalidInviteRequest):
            _invite(provider, members["owner"], **overrides)

    def test_delivery_failure(self, org, failing_mailer):
        provider, members = org
        mailer = failing_mailer
        audit_store = AuditLogStore()
        with pytest.raises(InviteDeliveryFailed):
            _invite(provider, members["owner"], mailer=mailer, audit_store=audit_store)
        assert len(mailer.attempts) == 1
        assert len(audit_store) == 0

    def test_audit_failure_does_not_block_invite(self, org):
        provider, members = org

        class BrokenStore(AuditLogStore):
            def record(self, payload):
                raise RuntimeError("store offline")

        mailer = DryRunMailer()
        outcome = _invite(provider, members["admin"], mailer=mailer, audit_store=BrokenStore())
        assert outcome.invite_url
        assert len(mailer.outbox) == 1
