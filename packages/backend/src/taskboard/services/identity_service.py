"""Identity resolver — map a verified Principal to one canonical local user.

Learn: The two schemes resolve differently.

LOCAL (subject = email)
    Look the email up. Missing → UserNotFound. A valid signature for a
    deleted account is never auto-provisioned.

FEDERATED (subject = provider user id)
    1. users.id == subject          → done (the common case)
    2. users.email == claims.email  → link that account onto the subject id
    3. nothing                      → provision User(id=subject, password_hash="")

Email is the only thing that ties a federated identity to an existing
password account. Anyone the provider vouches for with that email is
treated as the same person. The provider is trusted for email ownership.
"""

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.errors import (
    IdentityRejected,
    LinkError,
    LinkFailed,
    MissingEmail,
    ResolutionError,
    StoreUnavailable,
    UserNotFound,
)
from taskboard.auth.principal import CurrentIdentity, Principal, TokenScheme
from taskboard.db.models import User
from taskboard.services.account_linker import AccountLinker
from taskboard.services.user_store import UserStore

logger = structlog.get_logger()

DEFAULT_DISPLAY_NAME = "Unnamed"

_users = User.__table__
MAX_SUBJECT_LENGTH = _users.c.id.type.length
MAX_EMAIL_LENGTH = _users.c.email.type.length
MAX_NAME_LENGTH = _users.c.name.type.length


class IdentityResolver:
    """Find-or-create (or link) the local user behind a principal."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = UserStore(db)
        self.linker = AccountLinker(db)

    async def resolve(self, principal: Principal) -> CurrentIdentity:
        if principal.scheme is TokenScheme.LOCAL:
            step = self._resolve_local(principal)
        elif principal.scheme is TokenScheme.FEDERATED:
            step = self._resolve_federated(principal)
        else:
            raise ValueError(f"Unknown token scheme: {principal.scheme!r}")

        # Database errors and timeouts reject the request as a 401.
        try:
            return await step
        except SQLAlchemyError as e:
            logger.error(
                "auth.resolve.store_error",
                scheme=principal.scheme.value,
                error=repr(e),
            )
            raise StoreUnavailable("User store unavailable") from e

    # ─── Local ──────────────────────────────────────────

    async def _resolve_local(self, principal: Principal) -> CurrentIdentity:
        user = await self.store.find_by_email(principal.subject_id)
        if user is None:
            logger.warning("auth.resolve.user_not_found", email=principal.subject_id)
            raise UserNotFound("User not found")
        return _identity(user, TokenScheme.LOCAL)

    # ─── Federated ──────────────────────────────────────

    async def _resolve_federated(
        self, principal: Principal, allow_provision: bool = True
    ) -> CurrentIdentity:
        subject = principal.subject_id
        if len(subject) > MAX_SUBJECT_LENGTH:
            raise IdentityRejected("Federated subject id is too long")

        user = await self.store.find_by_id(subject)
        if user is not None:
            return _identity(user, TokenScheme.FEDERATED)

        if not principal.email:
            raise MissingEmail("Federated identity has no email")
        if len(principal.email) > MAX_EMAIL_LENGTH:
            raise IdentityRejected("Federated email is too long")

        existing = await self.store.find_by_email(principal.email)
        if existing is not None:
            if existing.id == subject:
                # A concurrent login linked it between our two lookups.
                return _identity(existing, TokenScheme.FEDERATED)
            return await self._link(existing, subject)

        if not allow_provision:
            raise ResolutionError("Could not provision federated user")
        return await self._provision(principal)

    async def _link(self, existing: User, subject: str) -> CurrentIdentity:
        old_id = existing.id
        # The row is about to change primary key underneath the ORM.
        self.db.expunge(existing)

        logger.info("auth.link.started", old_id=old_id, new_id=subject)
        try:
            outcome = await self.linker.link(old_id, subject)
        except LinkError as e:
            logger.error(
                "auth.link.failed",
                old_id=old_id,
                new_id=subject,
                error=str(e.__cause__ or e),
            )
            raise LinkFailed("Account linking failed") from e

        user = await self.store.find_by_id(subject)
        if user is None:
            logger.error(
                "auth.link.missing_after_link",
                old_id=old_id,
                new_id=subject,
                outcome=outcome.value,
            )
            raise LinkFailed("Account linking failed")
        return _identity(user, TokenScheme.FEDERATED)

    async def _provision(self, principal: Principal) -> CurrentIdentity:
        try:
            user = await self.store.create(
                user_id=principal.subject_id,
                email=principal.email,
                name=_display_name(principal),
                password_hash="",
            )
        except IntegrityError:
            # Lost a race with a concurrent first login (same id) or a
            # registration (same email). Start over from the top, once.
            await self.db.rollback()
            logger.info("auth.provision.conflict", subject=principal.subject_id)
            return await self._resolve_federated(principal, allow_provision=False)

        logger.info("auth.provision.created", user_id=user.id)
        return _identity(user, TokenScheme.FEDERATED)


def _display_name(principal: Principal) -> str:
    return (principal.display_name or DEFAULT_DISPLAY_NAME)[:MAX_NAME_LENGTH]


def _identity(user: User, scheme: TokenScheme) -> CurrentIdentity:
    return CurrentIdentity(user_id=user.id, email=user.email, scheme=scheme)
