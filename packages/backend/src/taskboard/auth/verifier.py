"""Credential verification across both token schemes.

Learn: A bearer token is either a local HS256 JWT or a federated RS256 ID
token. Clients don't say which, so we try each scheme in a fixed order:

    LOCAL → FEDERATED → InvalidCredentials

Each scheme verifier either returns a Principal or raises a SchemeError.
The loop below is the only place a Principal leaves this module, and the
only way out of the loop without one is InvalidCredentials. There is no
path where a failed local parse gets "assumed federated".
"""

from functools import lru_cache
from typing import Protocol

import structlog

from taskboard.auth.errors import InvalidCredentials, SchemeError, TokenWrongType
from taskboard.auth.federated import FederatedTokenVerifier
from taskboard.auth.jwt import ACCESS, decode_token
from taskboard.auth.principal import Principal, TokenScheme
from taskboard.config import settings

logger = structlog.get_logger()


class SchemeVerifier(Protocol):
    scheme: TokenScheme

    async def verify(self, token: str) -> Principal: ...


class LocalTokenVerifier:
    """Verifies locally minted access tokens."""

    scheme = TokenScheme.LOCAL

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        claims = decode_token(token, secret=self.secret, algorithm=self.algorithm)
        if claims["type"] != ACCESS:
            raise TokenWrongType(f"Expected an access token, got {claims['type']!r}")
        return Principal(
            subject_id=claims["sub"],
            scheme=TokenScheme.LOCAL,
            email=claims["sub"],
        )


class CredentialVerifier:
    """Routes a bearer token through every scheme, in order."""

    SCHEME_ORDER = (TokenScheme.LOCAL, TokenScheme.FEDERATED)

    def __init__(self, local: SchemeVerifier, federated: SchemeVerifier):
        self._verifiers: dict[TokenScheme, SchemeVerifier] = {
            TokenScheme.LOCAL: local,
            TokenScheme.FEDERATED: federated,
        }

    async def verify(self, token: str) -> Principal:
        failures: dict[TokenScheme, SchemeError] = {}
        for scheme in self.SCHEME_ORDER:
            try:
                principal = await self._verifiers[scheme].verify(token)
            except SchemeError as e:
                failures[scheme] = e
                continue
            logger.debug("auth.verified", scheme=scheme.value)
            return principal
        raise InvalidCredentials(failures)


@lru_cache
def get_credential_verifier() -> CredentialVerifier:
    """FastAPI dependency: the verifier built from settings.

    Cached so the JWKS client (and its key cache) lives for the process.
    Tests override this dependency with fixed keys.
    """
    return CredentialVerifier(
        local=LocalTokenVerifier(settings.jwt_secret, settings.jwt_algorithm),
        federated=FederatedTokenVerifier(
            project_id=settings.federated_project_id,
            issuer=settings.federated_issuer,
            jwks_url=settings.federated_jwks_url,
            timeout_seconds=settings.federated_timeout_seconds,
        ),
    )
