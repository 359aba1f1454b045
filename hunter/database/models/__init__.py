"""
Database Models Package
========================

All SQLAlchemy ORM models for the Hunter progression backend, organized by
domain:

- progression: ranks, hunter status, stats, user stats, activity log
- quests: quest definitions, objectives and per-user progress
- dungeons: categories, dungeon definitions, exercise routines and completions
- enums: shared string enumerations

Models are schema-only; rules live in ``hunter.modules``.
"""

from hunter.core.database.base import Base

from .dungeons import (
    Dungeon,
    DungeonCategory,
    DungeonExercise,
    Exercise,
    ExerciseType,
    UserDungeonCompletion,
)
from .progression import (
    HunterRank,
    HunterStatus,
    Stat,
    UserActivityLog,
    UserStat,
)
from .quests import Quest, QuestObjective, UserQuest, UserQuestObjective

from . import enums

__all__ = [
    "Base",
    "Dungeon",
    "DungeonCategory",
    "DungeonExercise",
    "Exercise",
    "ExerciseType",
    "UserDungeonCompletion",
    "HunterRank",
    "HunterStatus",
    "Stat",
    "UserActivityLog",
    "UserStat",
    "Quest",
    "QuestObjective",
    "UserQuest",
    "UserQuestObjective",
    "enums",
]
