"""
Stat — attribute definitions (strength, endurance, agility, discipline, recovery).
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin


class Stat(Base, IdMixin):
    __tablename__ = "stats"

    stat_name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    stat_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Stat {self.stat_name}>"
