"""
Pluggable authorization for gallery write endpoints.

Every authorizer exposes ``authorize(credential) -> AuthResult``. Two
credential kinds are understood:

- a shared admin password, checked by ``SharedSecretAuthorizer``
- a signed bearer token, checked by ``TokenAuthorizer``

``CompositeAuthorizer`` tries them in order. All of them fail closed when
their secret is not configured.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from fastapi import Depends, Header, HTTPException, Request, status

from affiliate_gallery.utils.auth import admin_secret_configured, verify_admin_password
from affiliate_gallery.utils.jwt_auth import TokenError, bearer_token_from_header, decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """What the caller presented. Either field may be absent."""
    bearer_token: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.bearer_token is None and self.password is None


@dataclass(frozen=True)
class Principal:
    user_id: Optional[int]
    role: str
    username: Optional[str] = None


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    principal: Optional[Principal] = None
    # "unauthenticated" (401) or "forbidden" (403) when ok is False
    failure: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def allow(cls, principal: Principal) -> "AuthResult":
        return cls(ok=True, principal=principal)

    @classmethod
    def deny(cls, failure: str, message: str) -> "AuthResult":
        return cls(ok=False, failure=failure, message=message)


class Authorizer(Protocol):
    def authorize(self, credential: Credential) -> AuthResult:
        ...


SHARED_SECRET_PRINCIPAL = Principal(user_id=None, role="admin", username="admin")


class SharedSecretAuthorizer:
    """Accepts the shared admin password."""

    def authorize(self, credential: Credential) -> AuthResult:
        if credential.password is None:
            return AuthResult.deny("unauthenticated", "Authentication required")
        if not admin_secret_configured():
            return AuthResult.deny("forbidden", "Forbidden: Invalid password.")
        if verify_admin_password(credential.password):
            return AuthResult.allow(SHARED_SECRET_PRINCIPAL)
        return AuthResult.deny("forbidden", "Forbidden: Invalid password.")


class TokenAuthorizer:
    """Accepts signed, unexpired access tokens, optionally restricted to some roles."""

    def __init__(self, roles: Optional[Sequence[str]] = None):
        self.roles = tuple(roles) if roles else None

    def authorize(self, credential: Credential) -> AuthResult:
        if not credential.bearer_token:
            return AuthResult.deny("unauthenticated", "Missing or invalid Authorization header")
        try:
            payload = decode_access_token(credential.bearer_token)
        except TokenError as e:
            message = "Token expired" if "expired" in str(e).lower() else "Invalid token"
            return AuthResult.deny("unauthenticated", message)

        principal = Principal(
            user_id=int(payload["sub"]),
            role=payload["role"],
            username=payload.get("username"),
        )
        if self.roles and principal.role not in self.roles:
            return AuthResult.deny("forbidden", "Forbidden: insufficient role")
        return AuthResult.allow(principal)


class CompositeAuthorizer:
    """
    Bearer token first, shared secret second.

    A presented token is authoritative: a bad token is not rescued by a
    password sent alongside it.
    """

    def __init__(self, token: Authorizer, shared_secret: Authorizer):
        self.token = token
        self.shared_secret = shared_secret

    def authorize(self, credential: Credential) -> AuthResult:
        if credential.is_empty:
            return AuthResult.deny("unauthenticated", "Authentication required")
        if credential.bearer_token:
            return self.token.authorize(credential)
        return self.shared_secret.authorize(credential)


def get_authorizer() -> Authorizer:
    """FastAPI dependency returning the authorizer used for gallery writes."""
    return CompositeAuthorizer(TokenAuthorizer(), SharedSecretAuthorizer())


async def _password_from_body(request: Request) -> Optional[str]:
    body = await request.body()
    if not body:
        return None
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(data, dict) and "password" in data:
        password = data["password"]
        return password if isinstance(password, str) else ""
    return None


async def extract_credential(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer token for authentication"),
    x_admin_password: Optional[str] = Header(None, alias="X-Admin-Password", description="Shared admin password"),
) -> Credential:
    """
    FastAPI dependency collecting whatever credential the caller sent.
    The password may come from the X-Admin-Password header or the JSON body.
    """
    password = x_admin_password
    if password is None:
        password = await _password_from_body(request)
    return Credential(bearer_token=bearer_token_from_header(authorization), password=password)


def enforce(result: AuthResult) -> Principal:
    """Translate a failed AuthResult into the matching HTTP error."""
    if result.ok:
        return result.principal

    if result.failure == "forbidden":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": result.message}
        )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": result.message},
        headers={"WWW-Authenticate": "Bearer"}
    )


async def require_editor(
    credential: Credential = Depends(extract_credential),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Principal:
    """
    FastAPI dependency gating gallery writes (password or bearer token).

    Raises:
        HTTPException: 401 for missing or invalid tokens, 403 for a wrong password
    """
    principal = enforce(authorizer.authorize(credential))
    logger.debug(f"Authorized {principal.role} {principal.username or principal.user_id}")
    return principal
