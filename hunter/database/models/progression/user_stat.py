"""
UserStat — accumulated value of one stat for one user.
Schema only.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, utc_now


class UserStat(Base, IdMixin):
    """
    One row per (user, stat).

    Created on first contribution; later gains are added to ``stat_value``,
    never written over it.
    """

    __tablename__ = "user_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "stat_id", name="uq_user_stats_user_stat"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    stat_id: Mapped[int] = mapped_column(
        ForeignKey("stats.id", ondelete="CASCADE"),
        nullable=False,
    )

    stat_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
