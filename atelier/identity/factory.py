from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from atelier.identity.base import IdentityProvider
from atelier.identity.local import LocalIdentityProvider
from atelier.settings import Settings, settings as default_settings

PLACEHOLDER_SUPABASE_URL = "https://placeholder.supabase.co"


@dataclass(frozen=True)
class AuthStatus:
    enabled: bool
    feature_flag: bool
    has_credentials: bool
    message: str | None = None


def get_auth_status(config: Settings | None = None) -> AuthStatus:
    """Report whether the hosted identity provider is switched on and configured."""
    config = config or default_settings
    feature_flag = config.FEATURE_AUTH == "on"
    has_credentials = bool(
        config.SUPABASE_URL
        and config.SUPABASE_ANON_KEY
        and config.SUPABASE_URL != PLACEHOLDER_SUPABASE_URL
    )

    if not feature_flag:
        return AuthStatus(
            enabled=False,
            feature_flag=False,
            has_credentials=has_credentials,
            message="Authentication is disabled via feature flag",
        )
    if not has_credentials:
        return AuthStatus(
            enabled=False,
            feature_flag=True,
            has_credentials=False,
            message=(
                "Missing Supabase credentials. Configure SUPABASE_URL and "
                "SUPABASE_ANON_KEY in your environment."
            ),
        )
    return AuthStatus(enabled=True, feature_flag=True, has_credentials=True)


def get_identity_provider(db: Session, *, config: Settings | None = None) -> IdentityProvider:
    """Return the Supabase adapter when auth is enabled, else the local one."""
    config = config or default_settings
    if get_auth_status(config).enabled:
        from atelier.identity.supabase import SupabaseIdentityProvider

        return SupabaseIdentityProvider(
            url=config.SUPABASE_URL,
            anon_key=config.SUPABASE_ANON_KEY,
            service_role_key=config.SUPABASE_SERVICE_ROLE_KEY,
            timeout=config.SUPABASE_TIMEOUT_SECONDS,
        )
    return LocalIdentityProvider(db)
