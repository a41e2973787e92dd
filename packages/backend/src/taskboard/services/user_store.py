"""User persistence operations needed by the auth core.

Learn: Most reads/writes go through the ORM. The exception is
reassign_id(): a primary key isn't something the ORM lets you mutate on a
mapped object, so it's a Core-level conditional UPDATE against the users
table. It returns the affected row count; 0 means the old id no longer
exists, which the account linker reads as "someone already linked it".

None of these commit except create(). The linker owns the transaction
around the three linking writes.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import Board, Card, User

_users = User.__table__


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def create(
        self, user_id: str, email: str, name: str, password_hash: str = ""
    ) -> User:
        """Insert and commit a user. IntegrityError propagates on id/email clash."""
        user = User(id=user_id, email=email, name=name, password_hash=password_hash)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    # ─── Linking writes (caller owns the transaction) ───

    async def repoint_board_owner(self, old_id: str, new_id: str) -> int:
        result = await self.db.execute(
            update(Board).where(Board.owner_id == old_id).values(owner_id=new_id)
        )
        return result.rowcount

    async def repoint_card_assignee(self, old_id: str, new_id: str) -> int:
        result = await self.db.execute(
            update(Card)
            .where(Card.assigned_user_id == old_id)
            .values(assigned_user_id=new_id)
        )
        return result.rowcount

    async def reassign_id(self, old_id: str, new_id: str) -> int:
        result = await self.db.execute(
            _users.update().where(_users.c.id == old_id).values(id=new_id)
        )
        return result.rowcount
