"""Account linker — move a password account onto a federated user id.

Learn: When someone who registered with email/password later signs in
through the identity provider, the provider's subject id becomes their
canonical id. Everything that points at the old id has to move with it,
all or nothing:

    1. boards.owner_id          old → new
    2. cards.assigned_user_id   old → new
    3. users.id                 old → new   (rowcount-checked)

One transaction, committed once. The user-referencing FKs are
DEFERRABLE INITIALLY DEFERRED, so steps 1-2 may point at an id that only
exists after step 3; the database checks the final state at COMMIT.

Concurrency: two first-time federated logins for the same email can both
reach this code. Under read-committed the loser's UPDATEs wait for the
winner's commit, then match zero rows. Step 3 affecting 0 rows is
therefore "already linked": roll back (nothing to undo) and let the
caller re-read by the new id. Not an error.
"""

import enum

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.errors import LinkError
from taskboard.services.user_store import UserStore

logger = structlog.get_logger()


class LinkOutcome(str, enum.Enum):
    LINKED = "linked"
    ALREADY_LINKED = "already_linked"


class AccountLinker:
    """Atomic identity migration across users, boards, and cards."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = UserStore(db)

    async def link(self, old_id: str, new_id: str) -> LinkOutcome:
        if old_id == new_id:
            raise ValueError("Cannot link a user id to itself")

        try:
            boards = await self.store.repoint_board_owner(old_id, new_id)
            cards = await self.store.repoint_card_assignee(old_id, new_id)
            renamed = await self.store.reassign_id(old_id, new_id)

            if renamed == 0:
                await self.db.rollback()
                logger.info("auth.link.already_linked", old_id=old_id, new_id=new_id)
                return LinkOutcome.ALREADY_LINKED

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise LinkError(f"Failed to link user {old_id} to {new_id}") from e

        logger.info(
            "auth.link.completed",
            old_id=old_id,
            new_id=new_id,
            boards=boards,
            cards=cards,
        )
        return LinkOutcome.LINKED
