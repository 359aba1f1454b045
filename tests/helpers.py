"""Database lookups shared by the integration tests."""

from __future__ import annotations

from typing import List

from sqlalchemy import func, select

from hunter.core.database.service import DatabaseService
from hunter.database.models import (
    HunterRank,
    HunterStatus,
    Stat,
    UserActivityLog,
    UserStat,
)


async def rank_id_for(order: int) -> int:
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(HunterRank.id).where(HunterRank.rank_order == order)
        )
        return result.scalar_one()


async def stat_id_for(name: str) -> int:
    async with DatabaseService.get_session() as session:
        result = await session.execute(select(Stat.id).where(Stat.stat_name == name))
        return result.scalar_one()


async def load_status(user_id: int) -> HunterStatus:
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(HunterStatus).where(HunterStatus.user_id == user_id)
        )
        return result.scalar_one()


async def stat_value(user_id: int, stat_id: int):
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(UserStat.stat_value).where(
                UserStat.user_id == user_id, UserStat.stat_id == stat_id
            )
        )
        return result.scalar_one_or_none()


async def activity_types(user_id: int) -> List[str]:
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(UserActivityLog.activity_type)
            .where(UserActivityLog.user_id == user_id)
            .order_by(UserActivityLog.id)
        )
        return list(result.scalars().all())


async def count_rows(model, *conditions) -> int:
    async with DatabaseService.get_session() as session:
        result = await session.execute(
            select(func.count()).select_from(model).where(*conditions)
        )
        return int(result.scalar_one())
