"""Board access policy — pure functions, no database."""

import pytest
from fastapi import HTTPException

from taskboard.auth.policy import (
    can_modify_board,
    can_view_board,
    require_board_access,
    visible_boards,
)
from taskboard.db.models import Board


def board(owner="owner-1", private=False, board_id=1):
    return Board(id=board_id, name="B", owner_id=owner, is_private=private)


@pytest.mark.parametrize(
    "user_id, private, can_view, can_modify",
    [
        ("owner-1", False, True, True),
        ("owner-1", True, True, True),
        ("other", False, True, True),
        ("other", True, False, False),
        (None, False, True, False),
        (None, True, False, False),
    ],
)
def test_access_matrix(user_id, private, can_view, can_modify):
    b = board(private=private)
    assert can_view_board(user_id, b) is can_view
    assert can_modify_board(user_id, b) is can_modify


def test_visible_boards():
    boards = [
        board(private=False, board_id=1),
        board(private=True, board_id=2),
        board(owner="other", private=True, board_id=3),
    ]
    assert [b.id for b in visible_boards("owner-1", boards)] == [1, 2]
    assert [b.id for b in visible_boards("other", boards)] == [1, 3]


def test_require_board_access():
    b = board(private=True)
    assert require_board_access("owner-1", b) is b

    with pytest.raises(HTTPException) as exc:
        require_board_access("other", b)
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        require_board_access("owner-1", None)
    assert exc.value.status_code == 404


def test_require_write_access_on_public_board():
    b = board(private=False)
    assert require_board_access("other", b, write=True) is b
    with pytest.raises(HTTPException):
        require_board_access(None, b, write=True)
