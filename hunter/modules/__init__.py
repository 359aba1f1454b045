"""Domain modules: progression engine, quests, dungeons and hunter registration."""
