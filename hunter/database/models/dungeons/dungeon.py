"""
DungeonCategory, Dungeon & UserDungeonCompletion — workout challenges and
their completions.
Schema only.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, TimestampMixin, utc_now


class DungeonCategory(Base, IdMixin):
    __tablename__ = "dungeon_categories"

    category_name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    category_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Dungeon(Base, IdMixin, TimestampMixin):
    """
    A completable workout challenge.

    Visible to a hunter whose rank order is at least that of
    ``required_rank_id`` and whose level is at least ``required_level``,
    while today falls inside ``start_date``..``end_date`` (an open bound
    never excludes).
    """

    __tablename__ = "dungeons"
    __table_args__ = (
        Index("ix_dungeons_category_difficulty", "category_id", "difficulty_level"),
    )

    dungeon_name: Mapped[str] = mapped_column(String(100), nullable=False)
    dungeon_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("dungeon_categories.id", ondelete="RESTRICT"),
        nullable=False,
    )
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    required_rank_id: Mapped[int] = mapped_column(
        ForeignKey("hunter_ranks.id", ondelete="RESTRICT"),
        nullable=False,
    )
    required_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    base_experience: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Suggested experience for a completion; the client reports the actual gain",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class UserDungeonCompletion(Base, IdMixin):
    __tablename__ = "user_dungeon_completions"
    __table_args__ = (
        Index("ix_user_dungeon_completions_user_date", "user_id", "completion_date"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    dungeon_id: Mapped[int] = mapped_column(
        ForeignKey("dungeons.id", ondelete="CASCADE"),
        nullable=False,
    )

    completion_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    completion_time: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Seconds taken to clear the dungeon",
    )

    experience_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    strength_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    endurance_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    agility_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discipline_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recovery_gained: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    user_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
