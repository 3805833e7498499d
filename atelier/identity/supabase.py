"""Supabase identity adapter.

Talks to the GoTrue auth API (``/auth/v1``) for accounts and sessions and
to PostgREST (``/rest/v1``) for the ``memberships`` table.  Membership
writes use the service-role key; everything else uses the anon key.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from atelier.identity.base import (
    AuthSession,
    AuthUser,
    IdentityProvider,
    MembershipRecord,
    Role,
)
from atelier.identity.exceptions import (
    IdentityUnavailable,
    InvalidCredentials,
    MembershipConflict,
    UserAlreadyExists,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


def _to_auth_user(payload: dict[str, Any]) -> AuthUser:
    return AuthUser(
        id=str(payload["id"]),
        email=payload.get("email", ""),
        metadata=payload.get("user_metadata") or {},
    )


class SupabaseIdentityProvider(IdentityProvider):
    def __init__(
        self,
        url: str,
        anon_key: str,
        service_role_key: str = "",
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._service_role_key = service_role_key or anon_key
        # close() leaves an injected client open
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        bearer: str | None = None,
        service_role: bool = False,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        key = self._service_role_key if service_role else self._anon_key
        request_headers = {
            "apikey": key,
            "Authorization": f"Bearer {bearer or key}",
        }
        request_headers.update(headers or {})
        try:
            return self._client.request(
                method, f"{self._url}{path}", headers=request_headers, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("Supabase request %s %s failed: %s", method, path, exc)
            raise IdentityUnavailable(
                f"Identity provider unreachable: {exc}",
                details={"path": path, "error": str(exc)},
            ) from exc

    def _unexpected(self, response: httpx.Response, path: str) -> IdentityUnavailable:
        message = _error_message(response)
        logger.error(
            "Unexpected Supabase response on %s: %s %s", path, response.status_code, message
        )
        return IdentityUnavailable(
            message, details={"path": path, "status_code": response.status_code}
        )

    # ------------------------------------------------------------------
    # auth
    # ------------------------------------------------------------------

    def sign_up(
        self, email: str, password: str, *, metadata: dict[str, Any] | None = None
    ) -> AuthUser:
        path = "/auth/v1/signup"
        response = self._request(
            "POST", path, json={"email": email, "password": password, "data": metadata or {}}
        )
        if response.status_code in (400, 422):
            message = _error_message(response)
            if "already" in message.lower():
                raise UserAlreadyExists(message, details={"email": email})
            raise InvalidCredentials(message, details={"email": email})
        if response.is_error:
            raise self._unexpected(response, path)

        body = response.json()
        # With email confirmation enabled GoTrue returns the bare user object
        return _to_auth_user(body.get("user") or body)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        path = "/auth/v1/token"
        response = self._request(
            "POST",
            path,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401):
            raise InvalidCredentials(_error_message(response), details={"email": email})
        if response.is_error:
            raise self._unexpected(response, path)

        body = response.json()
        return AuthSession(access_token=body["access_token"], user=_to_auth_user(body["user"]))

    def get_user(self, access_token: str) -> AuthUser:
        path = "/auth/v1/user"
        response = self._request("GET", path, bearer=access_token)
        if response.status_code in (401, 403):
            raise InvalidCredentials(_error_message(response))
        if response.is_error:
            raise self._unexpected(response, path)
        return _to_auth_user(response.json())

    # ------------------------------------------------------------------
    # memberships
    # ------------------------------------------------------------------

    def insert_membership(self, user_id: str, org_id: str, role: Role | str) -> MembershipRecord:
        role = Role(role)
        path = "/rest/v1/memberships"
        response = self._request(
            "POST",
            path,
            service_role=True,
            headers={"Prefer": "return=representation"},
            json={"user_id": user_id, "org_id": org_id, "role": role.value},
        )
        if response.status_code == 409:
            raise MembershipConflict(
                _error_message(response), details={"user_id": user_id, "org_id": org_id}
            )
        if response.is_error:
            raise self._unexpected(response, path)
        return MembershipRecord(user_id=user_id, org_id=org_id, role=role)

    def get_membership(self, user_id: str, org_id: str) -> MembershipRecord | None:
        path = "/rest/v1/memberships"
        response = self._request(
            "GET",
            path,
            service_role=True,
            params={
                "select": "user_id,org_id,role",
                "user_id": f"eq.{user_id}",
                "org_id": f"eq.{org_id}",
            },
        )
        if response.is_error:
            raise self._unexpected(response, path)

        rows = response.json()
        if not rows:
            return None
        row = rows[0]
        return MembershipRecord(user_id=str(row["user_id"]), org_id=row["org_id"], role=row["role"])
