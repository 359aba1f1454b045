"""
Experience Ledger
=================

Applies non-negative experience gains to a hunter's running totals.

A deposit adds the amount to both ``total_experience`` (lifetime, never
reset) and ``level_experience`` (consumed by level-ups). It mutates exactly
one ``HunterStatus`` row, locked with SELECT FOR UPDATE, inside the
caller's transaction. The deposit does not evaluate level-ups; the
progression pipeline runs the level evaluator afterwards.

Raises
------
NotFoundError
    The user has no ``HunterStatus`` row. The enclosing transaction rolls
    back: a user without hunter status is an inconsistent account.
ValidationError
    The amount is negative or not an integer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hunter.core.logging.logger import get_logger
from hunter.database.models import HunterStatus
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.exceptions import NotFoundError
from hunter.modules.shared.validators import validate_non_negative_amount

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    user_id: int
    amount: int
    total_experience: int
    level_experience: int


class ExperienceLedger:
    def __init__(self) -> None:
        self._status_repo: BaseRepository[HunterStatus] = BaseRepository(
            HunterStatus, get_logger(f"{__name__}.HunterStatusRepository")
        )

    async def load_status(
        self, session: AsyncSession, user_id: int, *, for_update: bool = True
    ) -> HunterStatus:
        """Fetch the user's HunterStatus row or raise NotFoundError."""
        status = await self._status_repo.find_one_where(
            session,
            HunterStatus.user_id == user_id,
            for_update=for_update,
        )
        if status is None:
            raise NotFoundError("HunterStatus", user_id)
        return status

    async def apply_experience(
        self, session: AsyncSession, user_id: int, amount: int
    ) -> LedgerEntry:
        amount = validate_non_negative_amount(amount, "amount")
        status = await self.load_status(session, user_id)

        if amount > 0:
            status.total_experience += amount
            status.level_experience += amount

            logger.info(
                "Experience applied",
                extra={
                    "user_id": user_id,
                    "amount": amount,
                    "total_experience": status.total_experience,
                    "level_experience": status.level_experience,
                },
            )

        return LedgerEntry(
            user_id=user_id,
            amount=amount,
            total_experience=status.total_experience,
            level_experience=status.level_experience,
        )
