from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, HTTPException, status

from checkout_api.auth.tokens import AccessTokenError, decode_access_token
from checkout_api.config import allowed_roles_list, settings

BACKOFFICE_ROLES = ("OPS", "ADMIN")


@dataclass
class AuthContext:
    user_id: str
    role: str

    @property
    def is_backoffice(self) -> bool:
        return self.role in BACKOFFICE_ROLES


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _context_from_header(authorization: str) -> AuthContext:
    if not authorization.startswith("Bearer "):
        raise _unauthorized("Missing bearer token")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        claims = decode_access_token(token, settings.auth_token_secret)
    except AccessTokenError as err:
        raise _unauthorized("Invalid access token") from err

    if claims.role not in allowed_roles_list():
        raise _unauthorized("Invalid access token claims")
    return AuthContext(user_id=claims.subject, role=claims.role)


def get_optional_auth_context(
    authorization: str | None = Header(default=None),
) -> AuthContext | None:
    # Guest checkout sends no header; a malformed one is still rejected.
    if not authorization:
        return None
    return _context_from_header(authorization)


def get_auth_context(
    authorization: str | None = Header(default=None),
) -> AuthContext:
    if not authorization:
        raise _unauthorized("Missing bearer token")
    return _context_from_header(authorization)


def require_roles(*roles: str) -> Callable[[AuthContext], AuthContext]:
    def dependency(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if auth.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return auth

    return dependency


require_backoffice = require_roles(*BACKOFFICE_ROLES)
