"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    board: Mapped[list[list[Optional[dict[str, str]]]]] = mapped_column(JSON)
    side_to_move: Mapped[str]
    last_move: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    castling_flags: Mapped[list[str]] = mapped_column(JSON, default=list)
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    pending_promotion: Mapped[Optional[list[int]]] = mapped_column(JSON, nullable=True)
    sandbox: Mapped[bool] = mapped_column(default=False)
    registered_players: Mapped[dict[str, str]] = mapped_column(JSON)
    # Derived by the game on every change. Only stored so records can be queried by it.
    status: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
