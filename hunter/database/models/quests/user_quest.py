"""
UserQuest & UserQuestObjective — per-user quest instances and progress.

Rows are created when a quest is started and never deleted; they are the
user's quest history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, utc_now


class UserQuest(Base, IdMixin):
    """
    A quest started by a user.

    ``is_completed`` is set by the objective tracker once every
    ``UserQuestObjective`` row of this instance is completed.
    """

    __tablename__ = "user_quests"
    __table_args__ = (
        Index("ix_user_quests_user_active", "user_id", "is_active", "is_completed"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    quest_id: Mapped[int] = mapped_column(
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    completion_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


class UserQuestObjective(Base, IdMixin):
    """
    Progress on one objective of a user's quest instance.

    ``current_progress`` stays within ``[0, required_amount]``; ``is_completed``
    never flips back to False.
    """

    __tablename__ = "user_quest_objectives"
    __table_args__ = (
        UniqueConstraint(
            "user_quest_id",
            "objective_id",
            name="uq_user_quest_objectives_quest_objective",
        ),
    )

    user_quest_id: Mapped[int] = mapped_column(
        ForeignKey("user_quests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    objective_id: Mapped[int] = mapped_column(
        ForeignKey("quest_objectives.id", ondelete="CASCADE"),
        nullable=False,
    )

    current_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
