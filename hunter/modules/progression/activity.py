"""
Activity log sink.

Appends rows to ``user_activity_logs`` inside the caller's transaction. The
progression engine only ever writes here; nothing in the engine reads the
log back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from hunter.core.logging.logger import get_logger
from hunter.database.models import UserActivityLog
from hunter.database.models.enums import ActivityType
from hunter.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class ActivityLogWriter:
    def __init__(self) -> None:
        self._repo: BaseRepository[UserActivityLog] = BaseRepository(
            UserActivityLog, get_logger(f"{__name__}.UserActivityLogRepository")
        )

    def record(
        self,
        session: AsyncSession,
        user_id: int,
        activity_type: ActivityType,
        *,
        activity_id: Optional[int] = None,
        experience_change: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> UserActivityLog:
        entry = self._repo.add(
            session,
            UserActivityLog(
                user_id=user_id,
                activity_type=activity_type.value,
                activity_id=activity_id,
                experience_change=experience_change,
                notes=notes,
            ),
        )
        logger.debug(
            "Activity recorded",
            extra={
                "user_id": user_id,
                "activity_type": activity_type.value,
                "activity_id": activity_id,
            },
        )
        return entry
