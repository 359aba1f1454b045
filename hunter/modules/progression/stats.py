"""
Stat Accumulator
================

Adds per-attribute points to a user's ``UserStat`` rows.

``apply_stat_gain`` is an explicit create-or-update: the first contribution
for a (user, stat) pair creates the row with ``stat_value = amount``; later
contributions add to the stored value. The caller learns which branch ran
through ``StatWrite.kind``.

Gains are additive and order-independent, but **not** idempotent: calling
twice with the same amount applies it twice. Callers guarantee at-most-once
invocation per reward event.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from hunter.core.database.base import utc_now
from hunter.core.logging.logger import get_logger
from hunter.database.models import Stat, UserStat
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.exceptions import NotFoundError
from hunter.modules.shared.validators import validate_non_negative_amount

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class StatWriteKind(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class StatWrite:
    """Result of one create-or-update against ``user_stats``."""

    kind: StatWriteKind
    user_stat_id: int
    user_id: int
    stat_id: int
    amount: int
    stat_value: int

    @property
    def created(self) -> bool:
        return self.kind is StatWriteKind.CREATED


class StatAccumulator:
    def __init__(self) -> None:
        self._stat_repo: BaseRepository[Stat] = BaseRepository(
            Stat, get_logger(f"{__name__}.StatRepository")
        )
        self._user_stat_repo: BaseRepository[UserStat] = BaseRepository(
            UserStat, get_logger(f"{__name__}.UserStatRepository")
        )

    async def apply_stat_gain(
        self,
        session: AsyncSession,
        user_id: int,
        stat_id: int,
        amount: int,
    ) -> Optional[StatWrite]:
        """
        Add ``amount`` points of ``stat_id`` to the user's stat row.

        Returns:
            The write performed, or None when ``amount`` is 0 (nothing is
            written and no row is created).

        Raises:
            ValidationError: amount is negative
            NotFoundError: stat_id does not exist
            ConstraintViolationError: the store rejected the insert
        """
        amount = validate_non_negative_amount(amount, "amount")
        if amount == 0:
            return None

        user_stat = await self._user_stat_repo.find_one_where(
            session,
            UserStat.user_id == user_id,
            UserStat.stat_id == stat_id,
            for_update=True,
        )

        if user_stat is None:
            if await self._stat_repo.get(session, stat_id) is None:
                raise NotFoundError("Stat", stat_id)

            user_stat = self._user_stat_repo.add(
                session,
                UserStat(
                    user_id=user_id,
                    stat_id=stat_id,
                    stat_value=amount,
                    last_updated=utc_now(),
                ),
            )
            await self._user_stat_repo.flush(session)
            kind = StatWriteKind.CREATED
        else:
            user_stat.stat_value += amount
            user_stat.last_updated = utc_now()
            kind = StatWriteKind.UPDATED

        logger.info(
            "Stat gain applied",
            extra={
                "user_id": user_id,
                "stat_id": stat_id,
                "amount": amount,
                "stat_value": user_stat.stat_value,
                "write_kind": kind.value,
            },
        )

        return StatWrite(
            kind=kind,
            user_stat_id=user_stat.id,
            user_id=user_id,
            stat_id=stat_id,
            amount=amount,
            stat_value=user_stat.stat_value,
        )
