"""Board access policy.

Public boards are open to any authenticated user, for reading and for
adding lists/cards. Private boards are owner-only.
"""

from typing import Iterable, Optional

from fastapi import HTTPException

from taskboard.db.models import Board


def can_view_board(user_id: Optional[str], board: Board) -> bool:
    if not board.is_private:
        return True
    return user_id is not None and board.owner_id == user_id


def can_modify_board(user_id: Optional[str], board: Board) -> bool:
    if user_id is None:
        return False
    return not board.is_private or board.owner_id == user_id


def visible_boards(user_id: Optional[str], boards: Iterable[Board]) -> list[Board]:
    return [b for b in boards if can_view_board(user_id, b)]


def require_board_access(
    user_id: Optional[str], board: Optional[Board], write: bool = False
) -> Board:
    """Return the board, or raise 404 (missing) / 403 (denied)."""
    if board is None:
        raise HTTPException(status_code=404, detail="Board not found")
    allowed = can_modify_board(user_id, board) if write else can_view_board(user_id, board)
    if not allowed:
        raise HTTPException(
            status_code=403,
            detail="Access denied: private board",
        )
    return board
