from atelier.identity.base import (
    INVITABLE_ROLES,
    INVITER_ROLES,
    AuthSession,
    AuthUser,
    IdentityProvider,
    MembershipRecord,
    Role,
)
from atelier.identity.exceptions import (
    IdentityError,
    IdentityUnavailable,
    InvalidCredentials,
    MembershipConflict,
    UserAlreadyExists,
)
from atelier.identity.factory import AuthStatus, get_auth_status, get_identity_provider
from atelier.identity.local import LocalIdentityProvider
from atelier.identity.supabase import SupabaseIdentityProvider

__all__ = [
    "INVITABLE_ROLES",
    "INVITER_ROLES",
    "AuthSession",
    "AuthStatus",
    "AuthUser",
    "IdentityError",
    "IdentityProvider",
    "IdentityUnavailable",
    "InvalidCredentials",
    "LocalIdentityProvider",
    "MembershipConflict",
    "MembershipRecord",
    "Role",
    "SupabaseIdentityProvider",
    "UserAlreadyExists",
    "get_auth_status",
    "get_identity_provider",
]
