"""Dungeons and dungeon completions."""

from hunter.modules.dungeon.service import (
    DungeonCompletionInput,
    DungeonCompletionResult,
    DungeonService,
)

__all__ = ["DungeonCompletionInput", "DungeonCompletionResult", "DungeonService"]
