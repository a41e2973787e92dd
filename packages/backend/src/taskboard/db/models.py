"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing these
models to the actual DB.

Key concepts:
- String user ids. A user's id is either a locally generated "user_<hex>"
  or the federated provider's subject id, and it can change exactly once,
  when the Account Linker moves a password account onto a federated id.
- Foreign keys pointing at users.id are DEFERRABLE INITIALLY DEFERRED.
  Linking repoints boards and cards first and renames the user last, so
  the constraint is only meaningful at commit time.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _user_fk() -> ForeignKey:
    return ForeignKey("users.id", deferrable=True, initially="DEFERRED")


DEFAULT_LIST_NAMES = ("To Do", "In Progress", "Blocked", "Review", "Done")


class User(Base):
    """A person who can log in.

    Learn: password_hash is "" (not NULL) for accounts that only ever
    signed in through the federated provider. Login treats an empty hash
    as "no password set" and always refuses.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Board(Base):
    """A board owned by one user. Private boards are visible to the owner only."""

    __tablename__ = "boards"
    __table_args__ = (
        Index("ix_boards_owner_id", "owner_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(128), _user_fk(), nullable=False)
    owner_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    lists: Mapped[list["TaskList"]] = relationship(
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="TaskList.position",
    )


class TaskList(Base):
    """A column on a board ("To Do", "Done", ...)."""

    __tablename__ = "task_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    board_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    board: Mapped["Board"] = relationship(back_populates="lists")
    cards: Mapped[list["Card"]] = relationship(
        back_populates="task_list",
        cascade="all, delete-orphan",
        order_by="Card.id",
    )


class Card(Base):
    """A card within a list, optionally assigned to a user."""

    __tablename__ = "cards"
    __table_args__ = (
        Index("ix_cards_assigned_user_id", "assigned_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    label: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    due_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    current_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    assigned_user_id: Mapped[Optional[str]] = mapped_column(
        String(128), _user_fk(), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    task_list: Mapped["TaskList"] = relationship(back_populates="cards")
