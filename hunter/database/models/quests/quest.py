"""
Quest & QuestObjective — quest definitions.
Schema only.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, TimestampMixin


class Quest(Base, IdMixin, TimestampMixin):
    """
    A multi-objective task.

    Rewards are granted once, when every objective of a user's instance is
    complete: ``experience_reward`` through the experience ledger and
    ``stat_reward_amount`` of ``reward_stat_id`` through the stat accumulator.
    """

    __tablename__ = "quests"

    quest_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quest_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    required_rank_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("hunter_ranks.id", ondelete="SET NULL"),
        nullable=True,
        doc="Minimum rank; NULL means open to every rank",
    )

    experience_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    reward_stat_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("stats.id", ondelete="SET NULL"),
        nullable=True,
    )
    stat_reward_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class QuestObjective(Base, IdMixin):
    __tablename__ = "quest_objectives"

    quest_id: Mapped[int] = mapped_column(
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    objective_description: Mapped[str] = mapped_column(Text, nullable=False)
    objective_type: Mapped[str] = mapped_column(String(30), nullable=False)
    required_amount: Mapped[int] = mapped_column(Integer, nullable=False)
