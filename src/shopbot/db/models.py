"""SQLAlchemy models representing shopbot persistence tables."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class for shopbot ORM models."""


class ShoppingListItemORM(Base):
    """Shopping list entry keyed by the platform message that renders it."""

    __tablename__ = "shopping_list_items"

    message_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    guild_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    item: Mapped[str] = mapped_column(String(200), nullable=False)
    personal: Mapped[bool] = mapped_column(Boolean, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    store: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_shopping_list_items_user_created", "user_id", "created_at"),
        Index("ix_shopping_list_items_created", "created_at"),
        Index("ix_shopping_list_items_status", "status"),
    )


__all__ = ["Base", "ShoppingListItemORM"]
