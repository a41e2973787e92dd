"""Board service — boards, lists, and cards.

Learn: Service layer separates business logic from HTTP routing.
Routers check access with auth/policy.py, then call in here. Nothing in
this module knows about tokens; owner and assignee are plain user ids,
which is exactly what the account linker repoints.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.db.models import DEFAULT_LIST_NAMES, Board, Card, TaskList


class BoardService:
    """Business logic for boards and cards."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Boards ─────────────────────────────────────────

    async def create_board(
        self,
        name: str,
        owner_id: str,
        owner_name: Optional[str] = None,
        is_private: bool = False,
    ) -> Board:
        """Create a board with the default set of lists.

        Learn: A new board is immediately usable. It comes with the
        five standard columns, in order.
        """
        board = Board(
            name=name,
            owner_id=owner_id,
            owner_name=owner_name,
            is_private=is_private,
            lists=[
                TaskList(name=list_name, position=i, cards=[])
                for i, list_name in enumerate(DEFAULT_LIST_NAMES)
            ],
        )
        self.db.add(board)
        await self.db.commit()
        return await self.get_board(board.id)

    async def list_boards(self) -> list[Board]:
        result = await self.db.execute(select(Board).order_by(Board.id))
        return list(result.scalars().all())

    async def list_owned(self, owner_id: str) -> list[Board]:
        result = await self.db.execute(
            select(Board).where(Board.owner_id == owner_id).order_by(Board.id)
        )
        return list(result.scalars().all())

    async def get_board(self, board_id: int) -> Board | None:
        result = await self.db.execute(
            select(Board)
            .where(Board.id == board_id)
            .options(selectinload(Board.lists).selectinload(TaskList.cards))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    # ─── Lists & cards ──────────────────────────────────

    async def get_list(self, list_id: int) -> TaskList | None:
        return await self.db.get(TaskList, list_id)

    async def create_card(
        self,
        task_list: TaskList,
        title: str,
        description: Optional[str] = None,
        label: Optional[str] = None,
        due_date: Optional[str] = None,
        assigned_user_id: Optional[str] = None,
    ) -> Card:
        card = Card(
            list_id=task_list.id,
            title=title,
            description=description,
            label=label,
            due_date=due_date,
            current_state=task_list.name,
            assigned_user_id=assigned_user_id,
        )
        self.db.add(card)
        await self.db.commit()
        await self.db.refresh(card)
        return card

    async def get_card(self, card_id: int) -> Card | None:
        result = await self.db.execute(
            select(Card)
            .where(Card.id == card_id)
            .options(selectinload(Card.task_list).selectinload(TaskList.board))
        )
        return result.scalars().first()

    async def assign_card(self, card: Card, user_id: Optional[str]) -> Card:
        card.assigned_user_id = user_id
        await self.db.commit()
        await self.db.refresh(card)
        return card

    async def list_assigned_cards(self, user_id: str) -> list[Card]:
        result = await self.db.execute(
            select(Card)
            .where(Card.assigned_user_id == user_id)
            .order_by(Card.id)
        )
        return list(result.scalars().all())
