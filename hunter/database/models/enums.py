"""
Database Model Enums
====================

Lightweight enumerations for categorical columns. Stored as their string
values so rows stay readable in SQL consoles.
"""

from __future__ import annotations

import enum


class ActivityType(str, enum.Enum):
    """
    Kinds of entries written to ``user_activity_logs``.

    The log is append-only and never read back by the progression engine.
    """

    DUNGEON = "dungeon"
    QUEST_START = "quest_start"
    QUEST_COMPLETE = "quest_complete"
    LEVEL_UP = "level_up"
    RANK_UP = "rank_up"


class ObjectiveType(str, enum.Enum):
    """How a quest objective is measured by the client."""

    REPETITIONS = "repetitions"
    DURATION = "duration"
    DISTANCE = "distance"
    SESSIONS = "sessions"
