"""
Hunter Registration
===================

Creates a user's ``HunterStatus`` at the starting rank and level, and seeds
one ``UserStat`` per defined stat at the configured baseline value.

Config keys
-----------
- progression.starting_level
- progression.starting_rank_order
- progression.initial_experience_to_next_level
- progression.baseline_stat_value
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from hunter.core.database.service import DatabaseService
from hunter.core.logging.logger import get_logger
from hunter.database.models import HunterRank, HunterStatus, Stat
from hunter.modules.progression.stats import StatAccumulator
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.base_service import BaseService
from hunter.modules.shared.exceptions import InvalidOperationError, NotFoundError
from hunter.modules.shared.validators import validate_identifier

if TYPE_CHECKING:
    from logging import Logger

    from hunter.core.config.manager import ConfigManager
    from hunter.core.event.bus import EventBus


class HunterRegistrationService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        accumulator: Optional[StatAccumulator] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._accumulator = accumulator or StatAccumulator()

        self._status_repo: BaseRepository[HunterStatus] = BaseRepository(
            HunterStatus, get_logger(f"{__name__}.HunterStatusRepository")
        )
        self._rank_repo: BaseRepository[HunterRank] = BaseRepository(
            HunterRank, get_logger(f"{__name__}.HunterRankRepository")
        )
        self._stat_repo: BaseRepository[Stat] = BaseRepository(
            Stat, get_logger(f"{__name__}.StatRepository")
        )

    async def create_hunter(self, user_id: int) -> Dict[str, Any]:
        """
        Register ``user_id`` as a hunter.

        Returns:
            Dict with the new status fields, the starting rank name and the
            number of stats seeded

        Raises:
            InvalidOperationError: the user is already registered
            NotFoundError: the starting rank is not defined
        """
        validate_identifier(user_id, "user_id")
        self.log_operation("create_hunter", user_id=user_id)

        starting_level = int(self.get_config("progression.starting_level", 1))
        starting_rank_order = int(self.get_config("progression.starting_rank_order", 1))
        threshold = int(
            self.get_config("progression.initial_experience_to_next_level", required=True)
        )
        baseline = int(self.get_config("progression.baseline_stat_value", 0))

        async with DatabaseService.get_transaction() as session:
            if await self._status_repo.exists(session, HunterStatus.user_id == user_id):
                raise InvalidOperationError("create_hunter", "Hunter already registered")

            rank = await self._rank_repo.find_one_where(
                session, HunterRank.rank_order == starting_rank_order
            )
            if rank is None:
                raise NotFoundError("HunterRank", f"rank_order={starting_rank_order}")

            status = self._status_repo.add(
                session,
                HunterStatus(
                    user_id=user_id,
                    current_rank_id=rank.id,
                    current_level=starting_level,
                    total_experience=0,
                    level_experience=0,
                    experience_to_next_level=threshold,
                ),
            )
            await self._status_repo.flush(session)

            stats = await self._stat_repo.find_many_where(session, order_by=[Stat.id])
            seeded = 0
            for stat in stats:
                if await self._accumulator.apply_stat_gain(session, user_id, stat.id, baseline):
                    seeded += 1

            created = {
                "user_id": status.user_id,
                "current_level": status.current_level,
                "total_experience": status.total_experience,
                "level_experience": status.level_experience,
                "experience_to_next_level": status.experience_to_next_level,
                "rank_id": rank.id,
                "rank_name": rank.rank_name,
                "stats_seeded": seeded,
            }

        self.log.info(
            "Hunter registered",
            extra={"user_id": user_id, "rank": rank.rank_name, "stats_seeded": seeded},
        )
        await self.emit_event(
            "hunter.registered", {"user_id": user_id, "rank": rank.rank_name}
        )
        return created
