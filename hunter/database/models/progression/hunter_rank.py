"""
HunterRank — ordered rank tiers (E through S).
Reference data, seeded at bootstrap.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin


class HunterRank(Base, IdMixin):
    """
    A rank tier in the total order defined by ``rank_order``.

    ``required_experience`` is compared against the hunter's **level**, not
    their experience total, when evaluating promotion.
    """

    __tablename__ = "hunter_ranks"

    rank_name: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        unique=True,
        doc="Display name (E, D, C, B, A, S)",
    )

    rank_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
        index=True,
        doc="Strictly increasing position in the rank ladder",
    )

    required_experience: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Minimum level for promotion into this rank",
    )

    rank_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<HunterRank {self.rank_name} order={self.rank_order}>"
