"""
ExerciseType, Exercise & DungeonExercise — the exercise catalogue and the
ordered routine of each dungeon.
Schema only.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hunter.core.database.base import Base, IdMixin


class ExerciseType(Base, IdMixin):
    __tablename__ = "exercise_types"

    type_name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class Exercise(Base, IdMixin):
    __tablename__ = "exercises"

    type_id: Mapped[int] = mapped_column(
        ForeignKey("exercise_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    exercise_name: Mapped[str] = mapped_column(String(100), nullable=False)
    exercise_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    equipment_required: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    primary_muscle_group: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    secondary_muscle_groups: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    demonstration_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class DungeonExercise(Base, IdMixin):
    """
    One step of a dungeon's routine.

    ``exercise_order`` is unique within a dungeon; routines are read in
    ascending order.
    """

    __tablename__ = "dungeon_exercises"
    __table_args__ = (
        UniqueConstraint("dungeon_id", "exercise_order"),
    )

    dungeon_id: Mapped[int] = mapped_column(
        ForeignKey("dungeons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="RESTRICT"),
        nullable=False,
    )
    exercise_order: Mapped[int] = mapped_column(Integer, nullable=False)

    sets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reps: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rest_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
