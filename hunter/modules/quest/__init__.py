"""Quest lifecycle and objective tracking."""

from hunter.modules.quest.service import ObjectiveProgress, QuestService, QuestStart

__all__ = ["ObjectiveProgress", "QuestService", "QuestStart"]
