"""
Progression Service
===================

Public entry points to the progression engine, each in its own transaction.

Public Methods
--------------
- apply_experience() -> Deposit experience, evaluate level and rank
- apply_stat_gain() -> Create-or-update one stat row
- evaluate_level_up() -> Re-run level (and rank) evaluation
- evaluate_rank_up() -> Single-step rank evaluation
- get_hunter_status() -> Status joined with its rank
- get_user_stats() -> Stat rows joined with their definitions

Write operations use ``DatabaseService.get_transaction()``; events are
published only after the transaction commits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import select

from hunter.core.database.service import DatabaseService
from hunter.core.logging.logger import get_logger
from hunter.database.models import HunterRank, HunterStatus, Stat, UserStat
from hunter.modules.progression.level import LevelEvaluation
from hunter.modules.progression.pipeline import ProgressionOutcome, ProgressionPipeline
from hunter.modules.progression.rank import RankUp
from hunter.modules.progression.stats import StatWrite
from hunter.modules.shared.base_service import BaseService
from hunter.modules.shared.exceptions import NotFoundError
from hunter.modules.shared.validators import validate_identifier

if TYPE_CHECKING:
    from logging import Logger

    from hunter.core.config.manager import ConfigManager
    from hunter.core.event.bus import EventBus


class ProgressionService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        pipeline: Optional[ProgressionPipeline] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self.pipeline = pipeline or ProgressionPipeline(config_manager)

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def apply_experience(self, user_id: int, amount: int) -> ProgressionOutcome:
        """
        Deposit experience and evaluate level-ups and rank promotion.

        Args:
            user_id: Rewarded user
            amount: Experience gain (>= 0); 0 changes nothing

        Returns:
            ProgressionOutcome with the final level, threshold and rank

        Raises:
            NotFoundError: the user has no hunter status
            ValidationError: amount is negative

        Example:
            >>> outcome = await service.apply_experience(7, 250)
            >>> (outcome.level, outcome.level_experience, outcome.experience_to_next_level)
            (2, 150, 300)
        """
        validate_identifier(user_id, "user_id")
        self.log_operation("apply_experience", user_id=user_id, amount=amount)

        async with DatabaseService.get_transaction() as session:
            outcome = await self.pipeline.grant(session, user_id, experience=amount)

        await self.publish_outcome(outcome)
        return outcome

    async def apply_stat_gain(
        self, user_id: int, stat_id: int, amount: int
    ) -> Optional[StatWrite]:
        """
        Add points to one stat. Returns None when amount is 0.

        Raises:
            NotFoundError: unknown stat
            ValidationError: amount is negative
        """
        validate_identifier(user_id, "user_id")
        self.log_operation("apply_stat_gain", user_id=user_id, stat_id=stat_id, amount=amount)

        async with DatabaseService.get_transaction() as session:
            return await self.pipeline.accumulator.apply_stat_gain(
                session, user_id, stat_id, amount
            )

    async def evaluate_level_up(self, user_id: int) -> ProgressionOutcome:
        """
        Run level evaluation (and rank evaluation if a level was gained)
        without depositing experience.
        """
        validate_identifier(user_id, "user_id")
        self.log_operation("evaluate_level_up", user_id=user_id)

        async with DatabaseService.get_transaction() as session:
            level_evaluation, rank_ups = await self.pipeline.evaluate(session, user_id)
            outcome = self._outcome_from_status(
                await self.pipeline.ledger.load_status(session, user_id, for_update=False),
                level_evaluation=level_evaluation,
                rank_ups=rank_ups,
            )

        await self.publish_outcome(outcome)
        return outcome

    async def evaluate_rank_up(self, user_id: int) -> Optional[RankUp]:
        """Single-step rank evaluation. Returns None when nothing changes."""
        validate_identifier(user_id, "user_id")
        self.log_operation("evaluate_rank_up", user_id=user_id)

        async with DatabaseService.get_transaction() as session:
            rank_up = await self.pipeline.rank_evaluator.evaluate_rank_up(session, user_id)

        if rank_up is not None:
            await self.emit_event(
                "progression.rank_up",
                {
                    "user_id": user_id,
                    "old_rank": rank_up.old_rank_name,
                    "new_rank": rank_up.new_rank_name,
                    "level": rank_up.level,
                },
            )
        return rank_up

    async def publish_outcome(self, outcome: ProgressionOutcome) -> None:
        for event_name, payload in outcome.events():
            await self.emit_event(event_name, payload)

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_hunter_status(self, user_id: int) -> Dict[str, Any]:
        """
        Hunter status joined with its rank.

        Raises:
            NotFoundError: the user has no hunter status
        """
        async with DatabaseService.get_session() as session:
            result = await session.execute(
                select(HunterStatus, HunterRank)
                .join(HunterRank, HunterStatus.current_rank_id == HunterRank.id)
                .where(HunterStatus.user_id == user_id)
            )
            row = result.one_or_none()

        if row is None:
            raise NotFoundError("HunterStatus", user_id)

        status, rank = row
        return {
            "user_id": status.user_id,
            "current_level": status.current_level,
            "total_experience": status.total_experience,
            "level_experience": status.level_experience,
            "experience_to_next_level": status.experience_to_next_level,
            "rank_id": rank.id,
            "rank_name": rank.rank_name,
            "rank_order": rank.rank_order,
            "rank_description": rank.rank_description,
        }

    async def get_user_stats(self, user_id: int) -> List[Dict[str, Any]]:
        async with DatabaseService.get_session() as session:
            result = await session.execute(
                select(UserStat, Stat)
                .join(Stat, UserStat.stat_id == Stat.id)
                .where(UserStat.user_id == user_id)
                .order_by(Stat.id)
            )
            rows = result.all()

        return [
            {
                "stat_id": stat.id,
                "stat_name": stat.stat_name,
                "stat_description": stat.stat_description,
                "stat_value": user_stat.stat_value,
                "last_updated": user_stat.last_updated,
            }
            for user_stat, stat in rows
        ]

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _outcome_from_status(
        status: HunterStatus,
        *,
        level_evaluation: LevelEvaluation,
        rank_ups: List[RankUp],
    ) -> ProgressionOutcome:
        return ProgressionOutcome(
            user_id=status.user_id,
            experience_gained=0,
            total_experience=status.total_experience,
            level=status.current_level,
            level_experience=status.level_experience,
            experience_to_next_level=status.experience_to_next_level,
            rank_id=status.current_rank_id,
            level_evaluation=level_evaluation,
            rank_ups=rank_ups,
        )
