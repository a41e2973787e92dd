"""Authentication error taxonomy.

Learn: Two families, mirroring the two stages of a request's auth pass.

VerificationError: the token itself didn't check out.
    SchemeError subclasses record *why one scheme* rejected the token.
    They never reach the client on their own: the verifier collects them
    and raises a single InvalidCredentials once every scheme has failed.

ResolutionError: the token was fine, but it doesn't map to a usable
local user (deleted account, linking failure, ...).

Everything here becomes a 401 at the gate.
"""

from taskboard.auth.principal import TokenScheme


class AuthError(Exception):
    """Base class for authentication failures."""


# ─── Verification ────────────────────────────────────────


class VerificationError(AuthError):
    """The bearer token could not be verified."""


class SchemeError(VerificationError):
    """One scheme rejected the token."""

    scheme: TokenScheme = TokenScheme.LOCAL


class TokenMalformed(SchemeError):
    """Not a structurally valid local token (bad signature, claims, encoding)."""


class TokenExpired(SchemeError):
    """A correctly signed local token past its exp."""


class TokenWrongType(SchemeError):
    """A correctly signed local token of the wrong type (e.g. refresh as access)."""


class FederatedVerificationFailed(SchemeError):
    """The identity provider's token didn't verify (includes network/timeouts)."""

    scheme = TokenScheme.FEDERATED


class InvalidCredentials(VerificationError):
    """Every scheme rejected the token.

    failures maps each attempted scheme to its rejection, for logs and
    tests. The HTTP response never says which scheme came closest.
    """

    def __init__(self, failures: dict[TokenScheme, SchemeError]):
        self.failures = failures
        summary = ", ".join(f"{s.value}: {e}" for s, e in failures.items())
        super().__init__(f"Invalid credentials ({summary})")


# ─── Resolution ──────────────────────────────────────────


class ResolutionError(AuthError):
    """A verified principal could not be resolved to a local user."""


class UserNotFound(ResolutionError):
    """A valid local token whose email matches no user."""


class MissingEmail(ResolutionError):
    """A new federated identity without an email can't be provisioned or linked."""


class LinkFailed(ResolutionError):
    """Account linking failed and was rolled back."""


class IdentityRejected(ResolutionError):
    """Federated claims that can't be stored (e.g. an oversized subject)."""


class StoreUnavailable(ResolutionError):
    """The user store errored or timed out while resolving."""


class LinkError(Exception):
    """Raised by the account linker when the migration transaction fails."""
