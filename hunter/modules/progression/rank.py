"""
Rank Evaluator
==============

Promotes a hunter to the immediate successor rank when their level has
reached that rank's ``required_experience`` (a level threshold, despite the
column name).

Each call evaluates exactly one step of the rank ladder. At the top rank,
or below the successor's threshold, the call changes nothing and records
nothing. Whether several promotions may follow one level gain is decided by
the progression pipeline (``progression.cascade_rank_promotions``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from hunter.core.database.base import utc_now
from hunter.core.logging.logger import get_logger
from hunter.database.models import HunterRank
from hunter.database.models.enums import ActivityType
from hunter.modules.progression.activity import ActivityLogWriter
from hunter.modules.progression.ledger import ExperienceLedger
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class RankUp:
    old_rank_id: int
    old_rank_name: str
    new_rank_id: int
    new_rank_name: str
    new_rank_order: int
    level: int


class RankEvaluator:
    def __init__(self, ledger: ExperienceLedger, activity: ActivityLogWriter) -> None:
        self._ledger = ledger
        self._activity = activity
        self._rank_repo: BaseRepository[HunterRank] = BaseRepository(
            HunterRank, get_logger(f"{__name__}.HunterRankRepository")
        )

    async def evaluate_rank_up(self, session: AsyncSession, user_id: int) -> Optional[RankUp]:
        """
        Promote by one rank if eligible.

        Returns:
            The promotion, or None when no promotion applies.

        Raises:
            NotFoundError: missing HunterStatus, or its rank row is missing
        """
        status = await self._ledger.load_status(session, user_id)

        current = await self._rank_repo.get(session, status.current_rank_id)
        if current is None:
            raise NotFoundError("HunterRank", status.current_rank_id)

        successor = await self._rank_repo.find_one_where(
            session,
            HunterRank.rank_order == current.rank_order + 1,
        )
        if successor is None:
            logger.debug(
                "Hunter at maximum rank",
                extra={"user_id": user_id, "rank": current.rank_name},
            )
            return None

        if status.current_level < successor.required_experience:
            logger.debug(
                "Rank promotion threshold not reached",
                extra={
                    "user_id": user_id,
                    "level": status.current_level,
                    "next_rank": successor.rank_name,
                    "required_level": successor.required_experience,
                },
            )
            return None

        status.current_rank_id = successor.id
        status.last_rank_up = utc_now()

        self._activity.record(
            session,
            user_id,
            ActivityType.RANK_UP,
            notes=f"Promoted to {successor.rank_name}-Rank",
        )

        logger.info(
            "Hunter promoted",
            extra={
                "user_id": user_id,
                "old_rank": current.rank_name,
                "new_rank": successor.rank_name,
                "level": status.current_level,
            },
        )

        return RankUp(
            old_rank_id=current.id,
            old_rank_name=current.rank_name,
            new_rank_id=successor.id,
            new_rank_name=successor.rank_name,
            new_rank_order=successor.rank_order,
            level=status.current_level,
        )
