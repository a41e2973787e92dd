"""Cards API — assignment."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.policy import require_board_access
from taskboard.auth.principal import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.schemas.board import CardAssign, CardRead
from taskboard.services.board_service import BoardService
from taskboard.services.user_store import UserStore

router = APIRouter()


@router.get("/cards/assigned", response_model=list[CardRead])
async def list_assigned_cards(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cards assigned to the caller, across every board."""
    return await BoardService(db).list_assigned_cards(identity.user_id)


@router.patch("/cards/{card_id}/assignee", response_model=CardRead)
async def assign_card(
    card_id: int,
    body: CardAssign,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = BoardService(db)
    card = await svc.get_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    require_board_access(identity.user_id, card.task_list.board, write=True)

    if body.user_id and not await UserStore(db).find_by_id(body.user_id):
        raise HTTPException(status_code=404, detail="Assignee not found")

    return await svc.assign_card(card, body.user_id)
