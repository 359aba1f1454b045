"""
UserActivityLog — append-only audit of progression events.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin, utc_now


class UserActivityLog(Base, IdMixin):
    """
    Write-only from the engine's perspective.

    ``activity_type`` holds an ``ActivityType`` value; ``activity_id`` points
    at the dungeon or quest involved when there is one.
    """

    __tablename__ = "user_activity_logs"
    __table_args__ = (
        Index("ix_user_activity_logs_user_date", "user_id", "log_date"),
    )

    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    activity_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    activity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    log_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    experience_change: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
