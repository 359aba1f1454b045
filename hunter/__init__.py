"""Hunter progression backend: experience, stats, levels, ranks, quests and dungeons."""

__version__ = "1.0.0"
