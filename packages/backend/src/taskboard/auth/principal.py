"""Identity value types shared by the verifier, resolver, and gate.

Learn: Two stages, two types.
- Principal: what a token *claims*, after its signature checked out but
  before we've looked anything up. Request-scoped, thrown away after
  resolution.
- CurrentIdentity: the canonical local user the principal resolved to.
  This is what handlers see.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class TokenScheme(str, enum.Enum):
    """The closed set of credential formats the gate accepts."""

    LOCAL = "local"  # HS256 JWT minted by our own token service
    FEDERATED = "federated"  # RS256 ID token minted by the identity provider


@dataclass(frozen=True)
class Principal:
    """A verified-but-unresolved identity claim.

    For LOCAL tokens subject_id is the account email. For FEDERATED tokens
    it is the provider's user id, and email/display_name come from claims.
    """

    subject_id: str
    scheme: TokenScheme
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request (post-resolution)."""

    user_id: str
    email: str
    scheme: TokenScheme
