"""Bearer token minting and verification (identity provider stand-in).

The token only proves who the caller is (sub = user id). The role claim is
informational; authorization always re-reads the user's current role from
app_user so a role change applies on the very next request.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings
from app.shared.utils.datetime import utc_now


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of an access token."""

    user_id: str
    role: str | None
    payload: dict[str, Any]


def create_access_token(
    user_id: str,
    role: str | None = None,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed access token for user_id.

    Args:
        user_id: Subject (app_user.id).
        role: Optional role claim, for clients only.
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.
        extra_claims: Additional claims to embed.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode.update({"sub": user_id, "exp": utc_now() + ttl, "iat": utc_now()})
    if role is not None:
        to_encode["role"] = role
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> TokenClaims:
    """Verify and decode a JWT.

    Raises:
        ValueError: If the token is invalid, expired, or has no usable sub claim.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise ValueError("Token missing required claim: sub")
    role = payload.get("role")
    return TokenClaims(
        user_id=sub, role=role if isinstance(role, str) else None, payload=payload
    )
