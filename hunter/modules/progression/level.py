"""
Level Evaluator
===============

Runs after every experience deposit, inside the same transaction.

While ``level_experience >= experience_to_next_level`` the evaluator:

1. increments the level,
2. subtracts the old threshold from ``level_experience`` (excess carries over),
3. recomputes the threshold as ``threshold_base + threshold_per_level * level``,
4. appends a ``level_up`` activity row.

A single large gain can cross several thresholds; the loop runs to
fixpoint, so afterwards ``level_experience < experience_to_next_level``.
Worked example with the default curve: level 1, 0/100, gain 250 gives
level 2 with 150/300.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from hunter.core.database.base import utc_now
from hunter.core.logging.logger import get_logger
from hunter.database.models.enums import ActivityType
from hunter.modules.progression.activity import ActivityLogWriter
from hunter.modules.progression.formulas import resolve_level_ups
from hunter.modules.progression.ledger import ExperienceLedger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hunter.core.config.manager import ConfigManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class LevelUp:
    new_level: int
    consumed_experience: int
    experience_to_next_level: int


@dataclass(frozen=True)
class LevelEvaluation:
    user_id: int
    old_level: int
    new_level: int
    level_experience: int
    experience_to_next_level: int
    level_ups: List[LevelUp] = field(default_factory=list)

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.old_level


class LevelEvaluator:
    def __init__(
        self,
        config_manager: ConfigManager,
        ledger: ExperienceLedger,
        activity: ActivityLogWriter,
    ) -> None:
        self._config = config_manager
        self._ledger = ledger
        self._activity = activity

    async def evaluate_level_up(self, session: AsyncSession, user_id: int) -> LevelEvaluation:
        """
        Level the user up as many times as their level experience allows.

        Raises:
            NotFoundError: the user has no HunterStatus row
        """
        status = await self._ledger.load_status(session, user_id)
        old_level = status.current_level

        base = int(self._config.get("progression.threshold_base", 100))
        per_level = int(self._config.get("progression.threshold_per_level", 100))

        new_level, level_experience, threshold, steps = resolve_level_ups(
            status.current_level,
            status.level_experience,
            status.experience_to_next_level,
            base=base,
            per_level=per_level,
        )

        level_ups: List[LevelUp] = []
        # Thresholds after each step, for the per-level audit trail
        for index, (level, consumed) in enumerate(steps):
            next_threshold = steps[index + 1][1] if index + 1 < len(steps) else threshold
            level_ups.append(
                LevelUp(
                    new_level=level,
                    consumed_experience=consumed,
                    experience_to_next_level=next_threshold,
                )
            )
            self._activity.record(
                session,
                user_id,
                ActivityType.LEVEL_UP,
                notes=f"Leveled up to {level}",
            )

        if level_ups:
            status.current_level = new_level
            status.level_experience = level_experience
            status.experience_to_next_level = threshold
            status.last_level_up = utc_now()

            logger.info(
                "Hunter leveled up",
                extra={
                    "user_id": user_id,
                    "old_level": old_level,
                    "new_level": new_level,
                    "levels_gained": len(level_ups),
                    "level_experience": level_experience,
                    "experience_to_next_level": threshold,
                },
            )

        return LevelEvaluation(
            user_id=user_id,
            old_level=old_level,
            new_level=status.current_level,
            level_experience=status.level_experience,
            experience_to_next_level=status.experience_to_next_level,
            level_ups=level_ups,
        )
