"""Pydantic schemas for boards, lists, and cards.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ─── Cards ──────────────────────────────────────────────

class CardCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    label: Optional[str] = Field(None, max_length=50)
    due_date: Optional[str] = Field(None, max_length=32)
    assigned_user_id: Optional[str] = None


class CardAssign(BaseModel):
    user_id: Optional[str] = Field(None, description="None clears the assignee")


class CardRead(BaseModel):
    id: int
    list_id: int
    title: str
    description: Optional[str] = None
    label: Optional[str] = None
    due_date: Optional[str] = None
    current_state: Optional[str] = None
    assigned_user_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Lists ──────────────────────────────────────────────

class TaskListRead(BaseModel):
    id: int
    name: str
    position: int
    cards: list[CardRead] = []

    model_config = {"from_attributes": True}


# ─── Boards ─────────────────────────────────────────────

class BoardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    is_private: bool = False


class BoardRead(BaseModel):
    id: int
    name: str
    owner_id: str
    owner_name: Optional[str] = None
    is_private: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BoardDetail(BoardRead):
    """Board with its lists and their cards."""
    lists: list[TaskListRead] = []
