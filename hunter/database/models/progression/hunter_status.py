"""
HunterStatus Model
==================

Level, rank and experience totals for a single user.

Schema-only representation of:
- Current rank reference
- Current level
- Lifetime experience total (never reset)
- Experience accrued toward the current level and its threshold

All behavior and game rules live in ``hunter.modules.progression``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, TimestampMixin


class HunterStatus(Base, IdMixin, TimestampMixin):
    """
    One row per user.

    ``level_experience < experience_to_next_level`` holds whenever the
    level evaluator has run to completion; it may be exceeded transiently
    between an experience deposit and evaluation inside one transaction.
    """

    # ========================================================================
    # TABLE CONFIGURATION
    # ========================================================================

    __tablename__ = "user_hunter_status"
    __table_args__ = (
        Index("ix_user_hunter_status_level", "current_level"),
    )

    # ========================================================================
    # OWNER & RANK
    # ========================================================================

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
        index=True,
        doc="Owning user account",
    )

    current_rank_id: Mapped[int] = mapped_column(
        ForeignKey("hunter_ranks.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Reference to the hunter's current rank",
    )

    # ========================================================================
    # LEVEL & EXPERIENCE
    # ========================================================================

    current_level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Current level (>= 1)",
    )

    total_experience: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Lifetime experience; monotonically non-decreasing",
    )

    level_experience: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Experience accrued toward the next level",
    )

    experience_to_next_level: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=100,
        doc="Threshold of level experience that triggers a level-up",
    )

    last_level_up: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    last_rank_up: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<HunterStatus user={self.user_id} level={self.current_level} "
            f"exp={self.level_experience}/{self.experience_to_next_level}>"
        )
