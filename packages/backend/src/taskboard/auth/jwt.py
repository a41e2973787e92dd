"""Local JWT token creation and verification (the token service).

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (15min), presented as the bearer credential
- Refresh token: long-lived (7 days), only accepted by /auth/refresh

The subject is the account *email*, not the user id. User ids can change
when an account gets linked to a federated identity, emails can't.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskboard.auth.errors import TokenExpired, TokenMalformed
from taskboard.config import settings

ACCESS = "access"
REFRESH = "refresh"

_REQUIRED_CLAIMS = ["sub", "exp", "iat", "type"]


def _encode(
    email: str,
    token_type: str,
    expires: timedelta,
    secret: Optional[str],
    algorithm: Optional[str],
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": email,
        "type": token_type,
        "iat": now,
        "exp": now + expires,
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def create_access_token(
    email: str,
    expires_minutes: Optional[int] = None,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Create a JWT access token."""
    expires = timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    return _encode(email, ACCESS, expires, secret, algorithm)


def create_refresh_token(
    email: str,
    expires_days: Optional[int] = None,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """Create a JWT refresh token."""
    expires = timedelta(days=expires_days or settings.refresh_token_expire_days)
    return _encode(email, REFRESH, expires, secret, algorithm)


def create_token_pair(email: str) -> dict[str, str]:
    return {
        "access_token": create_access_token(email),
        "refresh_token": create_refresh_token(email),
    }


def decode_token(
    token: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> dict:
    """Verify and decode a local JWT.

    Returns the payload dict on success. Checks signature, expiry, and that
    sub/exp/iat/type are all present, but NOT the type value; callers
    decide whether they want an access or a refresh token.

    Raises TokenExpired or TokenMalformed.
    """
    try:
        return jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.jwt_algorithm],
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenMalformed(f"Invalid token: {e}")
