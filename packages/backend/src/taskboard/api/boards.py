"""Boards API — create, list, fetch, add cards.

Learn: Every route here sits behind the auth gate, so get_current_user
always succeeds. Visibility is checked per board with auth/policy.py:
private boards are owner-only, and a private board you don't own is a
403 rather than a 404.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.policy import require_board_access, visible_boards
from taskboard.auth.principal import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.schemas.board import (
    BoardCreate,
    BoardDetail,
    BoardRead,
    CardCreate,
    CardRead,
)
from taskboard.services.board_service import BoardService
from taskboard.services.user_store import UserStore

router = APIRouter()


@router.post("/boards", response_model=BoardDetail, status_code=201)
async def create_board(
    body: BoardCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a board owned by the caller, with the default lists."""
    owner = await UserStore(db).find_by_id(identity.user_id)
    svc = BoardService(db)
    return await svc.create_board(
        name=body.name,
        owner_id=identity.user_id,
        owner_name=owner.name if owner else None,
        is_private=body.is_private,
    )


@router.get("/boards", response_model=list[BoardRead])
async def list_boards(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Public boards plus the caller's own private boards."""
    boards = await BoardService(db).list_boards()
    return visible_boards(identity.user_id, boards)


@router.get("/boards/mine", response_model=list[BoardRead])
async def list_my_boards(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await BoardService(db).list_owned(identity.user_id)


@router.get("/boards/{board_id}", response_model=BoardDetail)
async def get_board(
    board_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    board = await BoardService(db).get_board(board_id)
    return require_board_access(identity.user_id, board)


@router.post(
    "/boards/{board_id}/lists/{list_id}/cards",
    response_model=CardRead,
    status_code=201,
)
async def create_card(
    board_id: int,
    list_id: int,
    body: CardCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = BoardService(db)
    board = await svc.get_board(board_id)
    require_board_access(identity.user_id, board, write=True)

    task_list = await svc.get_list(list_id)
    if not task_list or task_list.board_id != board_id:
        raise HTTPException(status_code=404, detail="List not found")

    if body.assigned_user_id and not await UserStore(db).find_by_id(body.assigned_user_id):
        raise HTTPException(status_code=404, detail="Assignee not found")

    return await svc.create_card(
        task_list,
        title=body.title,
        description=body.description,
        label=body.label,
        due_date=body.due_date,
        assigned_user_id=body.assigned_user_id,
    )
