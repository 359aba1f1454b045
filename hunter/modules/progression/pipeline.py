"""
Progression Pipeline
====================

Ordered, transactional chain of progression steps for one reward event:

    ledger deposit -> stat gains -> level evaluation -> rank evaluation

Every step runs in the session handed in by the caller, so the caller's
``DatabaseService.get_transaction()`` block is the single unit of work: if
any step raises, every earlier step is rolled back with it and no partial
reward survives. The pipeline never commits.

Step conditions
---------------
- Level evaluation runs only after a positive experience deposit.
- Rank evaluation runs only when at least one level was gained.
- Rank evaluation is one step per level evaluation unless
  ``progression.cascade_rank_promotions`` is true, in which case it repeats
  until no further promotion applies.

The result is a ``ProgressionOutcome`` describing everything that changed,
including the events to publish once the transaction has committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from hunter.core.logging.logger import get_logger
from hunter.modules.progression.activity import ActivityLogWriter
from hunter.modules.progression.ledger import ExperienceLedger
from hunter.modules.progression.level import LevelEvaluation, LevelEvaluator
from hunter.modules.progression.rank import RankEvaluator, RankUp
from hunter.modules.progression.stats import StatAccumulator, StatWrite
from hunter.modules.shared.validators import validate_non_negative_amount

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hunter.core.config.manager import ConfigManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgressionOutcome:
    """Composite result of one pipeline run."""

    user_id: int
    experience_gained: int
    total_experience: int
    level: int
    level_experience: int
    experience_to_next_level: int
    rank_id: int
    stat_writes: List[StatWrite] = field(default_factory=list)
    level_evaluation: Optional[LevelEvaluation] = None
    rank_ups: List[RankUp] = field(default_factory=list)

    @property
    def levels_gained(self) -> int:
        if self.level_evaluation is None:
            return 0
        return self.level_evaluation.levels_gained

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0

    @property
    def ranked_up(self) -> bool:
        return bool(self.rank_ups)

    def events(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Events describing this outcome, in the order they happened."""
        published: List[Tuple[str, Dict[str, Any]]] = []
        if self.leveled_up and self.level_evaluation is not None:
            published.append(
                (
                    "progression.level_up",
                    {
                        "user_id": self.user_id,
                        "old_level": self.level_evaluation.old_level,
                        "new_level": self.level_evaluation.new_level,
                        "levels_gained": self.levels_gained,
                    },
                )
            )
        for rank_up in self.rank_ups:
            published.append(
                (
                    "progression.rank_up",
                    {
                        "user_id": self.user_id,
                        "old_rank": rank_up.old_rank_name,
                        "new_rank": rank_up.new_rank_name,
                        "level": rank_up.level,
                    },
                )
            )
        return published


class ProgressionPipeline:
    """
    Wires the engine components together.

    Components can be injected for tests; by default the pipeline builds its
    own, sharing one ledger and one activity writer.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        *,
        ledger: Optional[ExperienceLedger] = None,
        accumulator: Optional[StatAccumulator] = None,
        level_evaluator: Optional[LevelEvaluator] = None,
        rank_evaluator: Optional[RankEvaluator] = None,
        activity: Optional[ActivityLogWriter] = None,
    ) -> None:
        self._config = config_manager
        self.activity = activity or ActivityLogWriter()
        self.ledger = ledger or ExperienceLedger()
        self.accumulator = accumulator or StatAccumulator()
        self.level_evaluator = level_evaluator or LevelEvaluator(
            config_manager, self.ledger, self.activity
        )
        self.rank_evaluator = rank_evaluator or RankEvaluator(self.ledger, self.activity)

    async def grant(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        experience: int = 0,
        stat_gains: Optional[Mapping[int, int]] = None,
    ) -> ProgressionOutcome:
        """
        Apply a reward and evaluate its consequences.

        Args:
            session: Session of the caller's open transaction
            user_id: Rewarded user
            experience: Experience to deposit (>= 0)
            stat_gains: ``{stat_id: amount}``; zero amounts are skipped

        Raises:
            NotFoundError: the user has no HunterStatus, or a stat id is unknown
            ValidationError: a negative amount
            ConstraintViolationError: the store rejected a write
        """
        experience = validate_non_negative_amount(experience, "experience")
        gains = dict(stat_gains or {})
        for amount in gains.values():
            validate_non_negative_amount(amount, "stat_amount")

        await self.ledger.apply_experience(session, user_id, experience)

        stat_writes: List[StatWrite] = []
        for stat_id, amount in gains.items():
            write = await self.accumulator.apply_stat_gain(session, user_id, stat_id, amount)
            if write is not None:
                stat_writes.append(write)

        level_evaluation: Optional[LevelEvaluation] = None
        rank_ups: List[RankUp] = []
        if experience > 0:
            level_evaluation, rank_ups = await self.evaluate(session, user_id)

        return await self._snapshot(
            session,
            user_id,
            experience_gained=experience,
            stat_writes=stat_writes,
            level_evaluation=level_evaluation,
            rank_ups=rank_ups,
        )

    async def evaluate(
        self, session: AsyncSession, user_id: int
    ) -> Tuple[LevelEvaluation, List[RankUp]]:
        """Level evaluation, then rank evaluation if any level was gained."""
        level_evaluation = await self.level_evaluator.evaluate_level_up(session, user_id)

        rank_ups: List[RankUp] = []
        if level_evaluation.levels_gained > 0:
            rank_ups = await self.promote(session, user_id)

        return level_evaluation, rank_ups

    async def promote(self, session: AsyncSession, user_id: int) -> List[RankUp]:
        cascade = bool(self._config.get("progression.cascade_rank_promotions", False))

        rank_ups: List[RankUp] = []
        while True:
            rank_up = await self.rank_evaluator.evaluate_rank_up(session, user_id)
            if rank_up is None:
                break
            rank_ups.append(rank_up)
            if not cascade:
                break

        return rank_ups

    async def _snapshot(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        experience_gained: int,
        stat_writes: List[StatWrite],
        level_evaluation: Optional[LevelEvaluation],
        rank_ups: List[RankUp],
    ) -> ProgressionOutcome:
        status = await self.ledger.load_status(session, user_id, for_update=False)

        outcome = ProgressionOutcome(
            user_id=user_id,
            experience_gained=experience_gained,
            total_experience=status.total_experience,
            level=status.current_level,
            level_experience=status.level_experience,
            experience_to_next_level=status.experience_to_next_level,
            rank_id=status.current_rank_id,
            stat_writes=stat_writes,
            level_evaluation=level_evaluation,
            rank_ups=rank_ups,
        )

        logger.debug(
            "Progression pipeline completed",
            extra={
                "user_id": user_id,
                "experience_gained": experience_gained,
                "stat_writes": len(stat_writes),
                "levels_gained": outcome.levels_gained,
                "rank_ups": len(rank_ups),
            },
        )
        return outcome
