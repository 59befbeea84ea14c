# This project was developed with assistance from AI tools.
"""
Bearer-token identity for Keycloak-issued JWTs.

The engine trusts whatever identity this dependency hands it: the subject
becomes ``applicant_id`` / ``decision_by`` and the realm role picks the data
scope.  Tokens are verified against the realm's JWKS, which is cached and
refreshed on key rotation.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from fastapi import Depends, HTTPException, Request, status
from scholarship_db.enums import UserRole

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import TokenPayload, UserContext

logger = logging.getLogger(__name__)

# Most privileged first; a user holding several realm roles acts as the first match.
_ROLE_PRIORITY = (UserRole.ADMIN, UserRole.REVIEWER, UserRole.SPONSOR, UserRole.STUDENT)

_jwks_cache: dict = {"keys": None, "fetched_at": 0.0}


def _realm_url() -> str:
    return f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"


def _load_jwks(force_refresh: bool = False) -> jwt.PyJWKSet:
    """Return the realm key set, fetching it when stale or forced."""
    age = time.time() - _jwks_cache["fetched_at"]
    if _jwks_cache["keys"] is None or force_refresh or age > settings.JWKS_CACHE_TTL:
        response = httpx.get(f"{_realm_url()}/protocol/openid-connect/certs", timeout=5)
        response.raise_for_status()
        _jwks_cache["keys"] = response.json()
        _jwks_cache["fetched_at"] = time.time()
    return jwt.PyJWKSet.from_dict(_jwks_cache["keys"])


def _signing_key(token: str) -> jwt.PyJWK:
    kid = jwt.get_unverified_header(token).get("kid")
    try:
        for refresh in (False, True):
            for key in _load_jwks(force_refresh=refresh).keys:
                if key.key_id == kid:
                    return key
    except httpx.HTTPError as exc:
        logger.error("Failed to fetch JWKS from Keycloak: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from exc
    raise jwt.InvalidTokenError(f"No signing key for kid={kid}")


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        return token
    return None


def _decode_token(token: str) -> TokenPayload:
    payload = jwt.decode(
        token,
        _signing_key(token).key,
        algorithms=["RS256"],
        issuer=_realm_url(),
        options={"verify_aud": False},
    )
    return TokenPayload(**payload)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Pick the most privileged known role from realm_access.roles."""
    granted = set(token_payload.realm_access.get("roles", []))
    for role in _ROLE_PRIORITY:
        if role.value in granted:
            return role
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No recognized role assigned",
    )


_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@scholarships.local",
    name="Dev User",
    data_scope=build_data_scope(UserRole.ADMIN, "dev-user"),
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate the bearer token and return a UserContext."""
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _bearer_token(request)
    if not token:
        raise _unauthorized("Missing authentication token")

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    role = _resolve_role(payload)
    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=payload.name or payload.preferred_username,
        data_scope=build_data_scope(role, payload.sub),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific roles."""

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "RBAC denied: user=%s role=%s attempted route requiring %s",
                user.user_id,
                user.role.value,
                [r.value for r in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check
