import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass

TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}
DEFAULT_TOKEN_TTL_S = 3600


class AccessTokenError(Exception):
    pass


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    role: str
    expires_at: int


def _encode_segment(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _decode_segment(segment: str) -> dict:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        value = json.loads(base64.urlsafe_b64decode(padded))
    except ValueError as err:
        raise AccessTokenError("Malformed token segment") from err
    if not isinstance(value, dict):
        raise AccessTokenError("Malformed token segment")
    return value


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def issue_access_token(
    subject: str,
    role: str,
    secret: str,
    expires_in_s: int = DEFAULT_TOKEN_TTL_S,
) -> str:
    claims = {"sub": subject, "role": role, "exp": int(time.time()) + expires_in_s}
    signing_input = f"{_encode_segment(TOKEN_HEADER)}.{_encode_segment(claims)}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def decode_access_token(token: str, secret: str) -> TokenClaims:
    parts = token.split(".")
    if len(parts) != 3:
        raise AccessTokenError("Malformed token")
    header_segment, claims_segment, signature = parts

    expected = _sign(f"{header_segment}.{claims_segment}", secret)
    if not hmac.compare_digest(expected.encode(), signature.encode()):
        raise AccessTokenError("Invalid token signature")
    if _decode_segment(header_segment).get("alg") != "HS256":
        raise AccessTokenError("Unsupported token algorithm")

    claims = _decode_segment(claims_segment)
    subject, role, expires_at = claims.get("sub"), claims.get("role"), claims.get("exp")
    if not isinstance(expires_at, int) or expires_at < int(time.time()):
        raise AccessTokenError("Expired token")
    if not isinstance(subject, str) or not subject or not isinstance(role, str):
        raise AccessTokenError("Invalid token claims")
    return TokenClaims(subject=subject, role=role, expires_at=expires_at)
