"""
Quest models: definitions, objectives and per-user progress.
"""

from .quest import Quest, QuestObjective
from .user_quest import UserQuest, UserQuestObjective

__all__ = [
    "Quest",
    "QuestObjective",
    "UserQuest",
    "UserQuestObjective",
]
