"""Auth gate — the per-request authentication pass.

Learn: Installed as a router-level dependency on /api/v1, so it runs
before every handler. Each request ends in exactly one of three states:

    PASSTHROUGH    public route or CORS preflight, nothing verified
    REJECTED       401, the handler never runs
    AUTHENTICATED  request.state carries the canonical identity

Verify + resolve is bounded by auth_timeout_seconds. If the identity
provider or the database stalls, the request is rejected. A link
transaction cut off by the timeout was never committed, and the session
rolls it back on close.
"""

import asyncio
import enum
from typing import Iterable, Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.errors import (
    AuthError,
    LinkFailed,
    MissingEmail,
    StoreUnavailable,
    UserNotFound,
    VerificationError,
)
from taskboard.auth.principal import CurrentIdentity
from taskboard.auth.verifier import CredentialVerifier, get_credential_verifier
from taskboard.config import settings
from taskboard.db.engine import get_db
from taskboard.services.identity_service import IdentityResolver

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


class GateOutcome(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    PASSTHROUGH = "passthrough"


class AuthGate:
    """Public-route policy plus the verify → resolve pipeline."""

    def __init__(
        self,
        public_paths: Iterable[str] = (),
        public_prefixes: Iterable[str] = (),
        timeout_seconds: float = 10.0,
    ):
        self.public_paths = frozenset(public_paths)
        self.public_prefixes = tuple(public_prefixes)
        self.timeout_seconds = timeout_seconds

    def is_public(self, method: str, path: str) -> bool:
        if method == "OPTIONS":
            return True
        if path in self.public_paths:
            return True
        return any(path.startswith(prefix) for prefix in self.public_prefixes)

    @staticmethod
    def extract_bearer(authorization: Optional[str]) -> Optional[str]:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None
        token = authorization[len(BEARER_PREFIX):].strip()
        return token or None

    async def authenticate(
        self,
        token: str,
        verifier: CredentialVerifier,
        db: AsyncSession,
    ) -> CurrentIdentity:
        """Verify then resolve. Raises AuthError or asyncio.TimeoutError."""

        async def _pass() -> CurrentIdentity:
            principal = await verifier.verify(token)
            return await IdentityResolver(db).resolve(principal)

        return await asyncio.wait_for(_pass(), timeout=self.timeout_seconds)


auth_gate = AuthGate(
    public_paths=settings.public_paths,
    public_prefixes=settings.public_prefixes,
    timeout_seconds=settings.auth_timeout_seconds,
)


def get_auth_gate() -> AuthGate:
    return auth_gate


def _rejection_reason(error: AuthError) -> str:
    # Verification failures get one generic message: which scheme came
    # closest is nobody's business.
    if isinstance(error, VerificationError):
        return "Invalid token"
    if isinstance(error, UserNotFound):
        return "User not found"
    if isinstance(error, MissingEmail):
        return "Identity has no email"
    if isinstance(error, LinkFailed):
        return "Account linking failed"
    if isinstance(error, StoreUnavailable):
        return "User store unavailable"
    return "Authentication failed"


def _reject(request: Request, reason: str) -> HTTPException:
    request.state.auth_outcome = GateOutcome.REJECTED
    logger.info("auth.rejected", path=request.url.path, reason=reason)
    return HTTPException(
        status_code=401,
        detail=reason,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def enforce_auth_gate(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    gate: AuthGate = Depends(get_auth_gate),
) -> Optional[CurrentIdentity]:
    """Router-level dependency: authenticate the request or reject it."""
    request.state.identity = None

    if gate.is_public(request.method, request.url.path):
        request.state.auth_outcome = GateOutcome.PASSTHROUGH
        return None

    token = gate.extract_bearer(authorization)
    if token is None:
        raise _reject(request, "Authentication required")

    try:
        identity = await gate.authenticate(token, verifier, db)
    except asyncio.TimeoutError:
        logger.warning("auth.timeout", timeout=gate.timeout_seconds)
        raise _reject(request, "Authentication timed out")
    except AuthError as e:
        logger.debug("auth.failed", error=str(e))
        raise _reject(request, _rejection_reason(e))

    request.state.auth_outcome = GateOutcome.AUTHENTICATED
    request.state.identity = identity
    request.state.authenticated_user_id = identity.user_id
    request.state.authenticated_user_email = identity.email
    structlog.contextvars.bind_contextvars(user_id=identity.user_id)
    return identity
