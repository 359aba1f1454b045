"""
Base Service Foundation

Purpose
-------
Foundational class for the domain services. Services implement business
logic, own their transaction boundaries through ``DatabaseService`` and
emit domain events once their transaction has committed.

This base class provides:
- Structured logging with operation context
- Safe config access
- Event emission

What this class does NOT do:
- Open sessions or transactions (each public method does that itself)
- Contain progression rules

Usage
-----
    class DungeonService(BaseService):
        async def record_completion(self, user_id, dungeon_id, completion):
            async with DatabaseService.get_transaction() as session:
                ...
            await self.emit_event("dungeon.completed", {...})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from hunter.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from hunter.core.config.manager import ConfigManager
    from hunter.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Configuration manager (the ``ConfigManager`` class)
        event_bus: Event bus for post-commit notifications
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Retrieve a configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(self, event_type: str, data: Dict[str, Any]) -> None:
        await self._events.publish(event_type, data)

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

