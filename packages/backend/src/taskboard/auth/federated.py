"""Federated identity token verification.

Learn: The identity provider (Firebase-style) issues RS256-signed ID tokens.
We never mint these, we only check them:
- header: alg must be RS256 and carry a kid (which public key signed it)
- signature: against the provider's published JWKS, fetched over HTTPS
  and cached by PyJWKClient
- claims: aud == our project id, iss == issuer prefix + project id,
  exp/iat/sub present

The JWKS fetch is blocking urllib I/O, so verification runs in a worker
thread under asyncio.wait_for. A slow or unreachable provider is a
verification failure, never a hung request.
"""

import asyncio
from typing import Any, Callable, Optional

import jwt
import structlog

from taskboard.auth.errors import FederatedVerificationFailed
from taskboard.auth.principal import Principal, TokenScheme

logger = structlog.get_logger()

# Given the raw token, return the key that should verify its signature.
KeyResolver = Callable[[str], Any]

ALGORITHM = "RS256"


def jwks_key_resolver(jwks_url: str, timeout_seconds: float) -> KeyResolver:
    """Key resolver backed by the provider's JWKS endpoint."""
    client = jwt.PyJWKClient(
        jwks_url,
        cache_keys=True,
        lifespan=3600,
        timeout=timeout_seconds,
    )

    def resolve(token: str) -> Any:
        return client.get_signing_key_from_jwt(token).key

    return resolve


class FederatedTokenVerifier:
    """Verifies identity-provider ID tokens and extracts a Principal."""

    scheme = TokenScheme.FEDERATED

    def __init__(
        self,
        project_id: str,
        issuer: str,
        key_resolver: Optional[KeyResolver] = None,
        jwks_url: Optional[str] = None,
        timeout_seconds: float = 5.0,
    ):
        self.project_id = project_id
        self.issuer = issuer
        self.timeout_seconds = timeout_seconds
        if key_resolver is None and jwks_url:
            key_resolver = jwks_key_resolver(jwks_url, timeout_seconds)
        self._key_resolver = key_resolver

    @property
    def configured(self) -> bool:
        return bool(self.project_id) and self._key_resolver is not None

    async def verify(self, token: str) -> Principal:
        if not self.configured:
            raise FederatedVerificationFailed("Federated identity provider not configured")

        try:
            claims = await asyncio.wait_for(
                asyncio.to_thread(self._decode, token),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("auth.federated.timeout", timeout=self.timeout_seconds)
            raise FederatedVerificationFailed("Identity provider timed out")

        return Principal(
            subject_id=claims["sub"],
            scheme=TokenScheme.FEDERATED,
            email=claims.get("email"),
            display_name=claims.get("name"),
        )

    def _decode(self, token: str) -> dict:
        # Header check first: a local HS256 token must never reach the
        # JWKS fetch.
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise FederatedVerificationFailed(f"Malformed token: {e}")
        if header.get("alg") != ALGORITHM or not header.get("kid"):
            raise FederatedVerificationFailed("Not an identity provider token")

        # An unreachable or garbled JWKS endpoint fails this scheme only.
        try:
            key = self._key_resolver(token)
        except (jwt.PyJWTError, ValueError, OSError) as e:
            logger.warning("auth.federated.jwks_error", error=repr(e))
            raise FederatedVerificationFailed(f"Signing key unavailable: {e}")

        try:
            return jwt.decode(
                token,
                key,
                algorithms=[ALGORITHM],
                audience=self.project_id,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise FederatedVerificationFailed("Federated token has expired")
        except jwt.InvalidTokenError as e:
            raise FederatedVerificationFailed(f"Invalid federated token: {e}")
