"""
In-process event system.

Event names published by the progression engine:

- ``progression.level_up``: ``user_id``, ``old_level``, ``new_level``
- ``progression.rank_up``: ``user_id``, ``old_rank``, ``new_rank``
- ``quest.completed``: ``user_id``, ``user_quest_id``, ``quest_id``
- ``dungeon.completed``: ``user_id``, ``dungeon_id``, ``completion_id``
- ``hunter.registered``: ``user_id``, ``rank``
"""

from hunter.core.event.bus import (
    EventBus,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = ["EventBus", "EventListener", "EventPayload", "ListenerPriority"]
