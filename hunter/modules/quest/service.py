"""
Quest Service
=============

Quest lifecycle and the objective tracker.

Public Methods
--------------
- get_available_quests() -> Quests the hunter's rank may start today
- get_active_quests() -> Started, unfinished quests with objective progress
- start_quest() -> Create a quest instance with zeroed objectives
- advance_objective() -> Record progress; complete and reward the quest

Objective state machine
-----------------------
``in_progress`` (initial, progress 0) -> ``completed`` once progress reaches
``required_amount``. Progress is clamped, so it never exceeds the required
amount, and a completed objective never returns to ``in_progress``.

When the last objective of an instance completes, the instance is marked
completed and deactivated, the quest reward goes through the progression
pipeline, and a ``quest_complete`` activity row is written. All of it happens
in one transaction: a failure anywhere rolls back the objective update too.

User-facing rejections (quest not owned or not active, objective not part
of the quest, quest already started or not open to the hunter) come back as
unsuccessful results and write nothing. Missing hunter status or quest
definitions raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import or_, select

from hunter.core.database.base import utc_now
from hunter.core.database.service import DatabaseService
from hunter.core.logging.logger import get_logger
from hunter.database.models import (
    HunterRank,
    HunterStatus,
    Quest,
    QuestObjective,
    Stat,
    UserQuest,
    UserQuestObjective,
)
from hunter.database.models.enums import ActivityType
from hunter.modules.progression.formulas import clamp_progress
from hunter.modules.progression.pipeline import ProgressionOutcome, ProgressionPipeline
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.base_service import BaseService
from hunter.modules.shared.exceptions import NotFoundError
from hunter.modules.shared.validators import (
    validate_identifier,
    validate_non_negative_amount,
)

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from hunter.core.config.manager import ConfigManager
    from hunter.core.event.bus import EventBus


QUEST_NOT_AVAILABLE = "Quest not found or not active"
OBJECTIVE_NOT_FOUND = "Objective not found"
QUEST_ALREADY_ACTIVE = "Quest already active"
QUEST_NOT_OPEN = "Quest not available"


@dataclass(frozen=True)
class QuestStart:
    success: bool
    user_quest_id: Optional[int] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ObjectiveProgress:
    """
    Result of ``advance_objective``.

    ``objective_completed`` is the objective's state after the update;
    ``quest_completed`` is True only for the call that completed the quest.
    """

    success: bool
    progress: int = 0
    objective_completed: bool = False
    quest_completed: bool = False
    message: Optional[str] = None
    outcome: Optional[ProgressionOutcome] = None

    @classmethod
    def rejected(cls, message: str) -> "ObjectiveProgress":
        return cls(success=False, message=message)


class QuestService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        pipeline: Optional[ProgressionPipeline] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self.pipeline = pipeline or ProgressionPipeline(config_manager)

        self._quest_repo: BaseRepository[Quest] = BaseRepository(
            Quest, get_logger(f"{__name__}.QuestRepository")
        )
        self._objective_repo: BaseRepository[QuestObjective] = BaseRepository(
            QuestObjective, get_logger(f"{__name__}.QuestObjectiveRepository")
        )
        self._user_quest_repo: BaseRepository[UserQuest] = BaseRepository(
            UserQuest, get_logger(f"{__name__}.UserQuestRepository")
        )
        self._user_objective_repo: BaseRepository[UserQuestObjective] = BaseRepository(
            UserQuestObjective, get_logger(f"{__name__}.UserQuestObjectiveRepository")
        )

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_available_quests(
        self, user_id: int, today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Active quests whose date window contains ``today`` and whose rank
        requirement is empty or at most the hunter's rank order.

        Raises:
            NotFoundError: the user has no hunter status
        """
        today = today or date.today()

        async with DatabaseService.get_session() as session:
            rank_order = await self._current_rank_order(session, user_id)

            required_rank = HunterRank.__table__.alias("required_rank")
            result = await session.execute(
                select(Quest, Stat.stat_name)
                .outerjoin(required_rank, Quest.required_rank_id == required_rank.c.id)
                .outerjoin(Stat, Quest.reward_stat_id == Stat.id)
                .where(
                    Quest.is_active.is_(True),
                    or_(
                        Quest.required_rank_id.is_(None),
                        required_rank.c.rank_order <= rank_order,
                    ),
                    or_(Quest.start_date.is_(None), Quest.start_date <= today),
                    or_(Quest.end_date.is_(None), Quest.end_date >= today),
                )
                .order_by(Quest.category, Quest.difficulty_level, Quest.id)
            )
            rows = result.all()

            quests: List[Dict[str, Any]] = []
            for quest, reward_stat_name in rows:
                objectives = await self._objective_repo.find_many_where(
                    session,
                    QuestObjective.quest_id == quest.id,
                    order_by=[QuestObjective.id],
                )
                quests.append(
                    {
                        **self._quest_summary(quest, reward_stat_name),
                        "objectives": [
                            {
                                "objective_id": objective.id,
                                "objective_description": objective.objective_description,
                                "objective_type": objective.objective_type,
                                "required_amount": objective.required_amount,
                            }
                            for objective in objectives
                        ],
                    }
                )

        return quests

    async def get_active_quests(self, user_id: int) -> List[Dict[str, Any]]:
        async with DatabaseService.get_session() as session:
            result = await session.execute(
                select(UserQuest, Quest, Stat.stat_name)
                .join(Quest, UserQuest.quest_id == Quest.id)
                .outerjoin(Stat, Quest.reward_stat_id == Stat.id)
                .where(
                    UserQuest.user_id == user_id,
                    UserQuest.is_active.is_(True),
                    UserQuest.is_completed.is_(False),
                )
                .order_by(UserQuest.start_date, UserQuest.id)
            )
            rows = result.all()

            active: List[Dict[str, Any]] = []
            for user_quest, quest, reward_stat_name in rows:
                progress = await session.execute(
                    select(UserQuestObjective, QuestObjective)
                    .join(QuestObjective, UserQuestObjective.objective_id == QuestObjective.id)
                    .where(UserQuestObjective.user_quest_id == user_quest.id)
                    .order_by(QuestObjective.id)
                )
                active.append(
                    {
                        "user_quest_id": user_quest.id,
                        "start_date": user_quest.start_date,
                        **self._quest_summary(quest, reward_stat_name),
                        "objectives": [
                            {
                                "objective_id": objective.id,
                                "objective_description": objective.objective_description,
                                "objective_type": objective.objective_type,
                                "required_amount": objective.required_amount,
                                "current_progress": user_objective.current_progress,
                                "is_completed": user_objective.is_completed,
                            }
                            for user_objective, objective in progress.all()
                        ],
                    }
                )

        return active

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def start_quest(
        self, user_id: int, quest_id: int, today: Optional[date] = None
    ) -> QuestStart:
        """
        Start ``quest_id`` for the user.

        Returns an unsuccessful ``QuestStart`` when an active instance of the
        quest already exists, or when ``get_available_quests`` would not list
        the quest (inactive, outside its date window, or above the hunter's
        rank).

        Raises:
            NotFoundError: the user has no hunter status, or unknown quest
        """
        validate_identifier(user_id, "user_id")
        today = today or date.today()
        self.log_operation("start_quest", user_id=user_id, quest_id=quest_id)

        async with DatabaseService.get_transaction() as session:
            rank_order = await self._current_rank_order(session, user_id)

            already_active = await self._user_quest_repo.exists(
                session,
                UserQuest.user_id == user_id,
                UserQuest.quest_id == quest_id,
                UserQuest.is_active.is_(True),
            )
            if already_active:
                self.log.info(
                    "Quest start rejected: already active",
                    extra={"user_id": user_id, "quest_id": quest_id},
                )
                return QuestStart(success=False, message=QUEST_ALREADY_ACTIVE)

            quest = await self._quest_repo.get(session, quest_id)
            if quest is None:
                raise NotFoundError("Quest", quest_id)

            if not await self._is_open_to(session, quest, rank_order, today):
                self.log.info(
                    "Quest start rejected: not available",
                    extra={"user_id": user_id, "quest_id": quest_id},
                )
                return QuestStart(success=False, message=QUEST_NOT_OPEN)

            user_quest =self._user_quest_repo.add(
                session,
                UserQuest(
                    user_id=user_id,
                    quest_id=quest_id,
                    is_active=True,
                    is_completed=False,
                    start_date=utc_now(),
                ),
            )
            await self._user_quest_repo.flush(session)

            objectives = await self._objective_repo.find_many_where(
                session, QuestObjective.quest_id == quest_id
            )
            self._user_objective_repo.add_many(
                session,
                [
                    UserQuestObjective(
                        user_quest_id=user_quest.id,
                        objective_id=objective.id,
                        current_progress=0,
                        is_completed=False,
                    )
                    for objective in objectives
                ],
            )

            self.pipeline.activity.record(
                session,
                user_id,
                ActivityType.QUEST_START,
                activity_id=quest_id,
                notes=f"Started quest ID: {quest_id}",
            )
            await self._user_objective_repo.flush(session)
            user_quest_id = user_quest.id

        return QuestStart(success=True, user_quest_id=user_quest_id)

    async def advance_objective(
        self,
        user_id: int,
        user_quest_id: int,
        objective_id: int,
        delta: int,
    ) -> ObjectiveProgress:
        """
        Add ``delta`` progress to one objective of a user's quest.

        Args:
            user_id: Requesting user
            user_quest_id: The user's quest instance
            objective_id: The ``QuestObjective`` being advanced
            delta: Progress to add (>= 0)

        Returns:
            ObjectiveProgress; unsuccessful when the instance is not owned by
            the user, not active, or has no such objective.

        Raises:
            ValidationError: negative delta
            NotFoundError: the user has no hunter status when rewards apply
            ConstraintViolationError: the store rejected a write

        Example:
            >>> result = await quests.advance_objective(7, 12, 3, delta=5)
            >>> (result.progress, result.objective_completed)
            (3, True)
        """
        validate_identifier(user_id, "user_id")
        delta = validate_non_negative_amount(delta, "delta")

        self.log_operation(
            "advance_objective",
            user_id=user_id,
            user_quest_id=user_quest_id,
            objective_id=objective_id,
            delta=delta,
        )

        async with DatabaseService.get_transaction() as session:
            user_quest = await self._user_quest_repo.find_one_where(
                session,
                UserQuest.id == user_quest_id,
                UserQuest.user_id == user_id,
                UserQuest.is_active.is_(True),
                for_update=True,
            )
            if user_quest is None:
                self.log.info(
                    "Objective update rejected: quest not available",
                    extra={"user_id": user_id, "user_quest_id": user_quest_id},
                )
                return ObjectiveProgress.rejected(QUEST_NOT_AVAILABLE)

            row = (
                await session.execute(
                    select(UserQuestObjective, QuestObjective.required_amount)
                    .join(QuestObjective, UserQuestObjective.objective_id == QuestObjective.id)
                    .where(
                        UserQuestObjective.user_quest_id == user_quest_id,
                        UserQuestObjective.objective_id == objective_id,
                    )
                    .with_for_update(of=UserQuestObjective)
                )
            ).one_or_none()
            if row is None:
                self.log.info(
                    "Objective update rejected: objective not found",
                    extra={
                        "user_id": user_id,
                        "user_quest_id": user_quest_id,
                        "objective_id": objective_id,
                    },
                )
                return ObjectiveProgress.rejected(OBJECTIVE_NOT_FOUND)

            user_objective, required_amount = row

            new_progress = clamp_progress(user_objective.current_progress, delta, required_amount)
            user_objective.current_progress = new_progress
            user_objective.is_completed = user_objective.is_completed or (
                new_progress >= required_amount
            )
            user_objective.last_updated = utc_now()
            objective_completed = user_objective.is_completed

            remaining = await self._user_objective_repo.count(
                session,
                UserQuestObjective.user_quest_id == user_quest_id,
                UserQuestObjective.is_completed.is_(False),
            )

            outcome: Optional[ProgressionOutcome] = None
            quest_completed = remaining == 0
            if quest_completed:
                outcome = await self._complete_quest(session, user_id, user_quest)

        if quest_completed:
            await self.emit_event(
                "quest.completed",
                {
                    "user_id": user_id,
                    "user_quest_id": user_quest_id,
                    "quest_id": user_quest.quest_id,
                },
            )
            if outcome is not None:
                for event_name, payload in outcome.events():
                    await self.emit_event(event_name, payload)

        return ObjectiveProgress(
            success=True,
            progress=new_progress,
            objective_completed=objective_completed,
            quest_completed=quest_completed,
            outcome=outcome,
        )

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _complete_quest(
        self, session: AsyncSession, user_id: int, user_quest: UserQuest
    ) -> ProgressionOutcome:
        """Mark the instance completed and grant the quest reward once."""
        quest = await self._quest_repo.get(session, user_quest.quest_id)
        if quest is None:
            raise NotFoundError("Quest", user_quest.quest_id)

        user_quest.is_completed = True
        user_quest.is_active = False
        user_quest.completion_date = utc_now()

        stat_gains: Dict[int, int] = {}
        if quest.reward_stat_id is not None and quest.stat_reward_amount > 0:
            stat_gains[quest.reward_stat_id] = quest.stat_reward_amount

        outcome = await self.pipeline.grant(
            session,
            user_id,
            experience=max(quest.experience_reward, 0),
            stat_gains=stat_gains,
        )

        self.pipeline.activity.record(
            session,
            user_id,
            ActivityType.QUEST_COMPLETE,
            activity_id=quest.id,
            experience_change=quest.experience_reward,
            notes=f"Completed quest ID: {quest.id}",
        )

        self.log.info(
            "Quest completed",
            extra={
                "user_id": user_id,
                "user_quest_id": user_quest.id,
                "quest_id": quest.id,
                "experience_reward": quest.experience_reward,
                "levels_gained": outcome.levels_gained,
            },
        )
        return outcome

    async def _is_open_to(
        self, session: AsyncSession, quest: Quest, rank_order: int, today: date
    ) -> bool:
        """Python form of the ``get_available_quests`` filter for one quest."""
        if not quest.is_active:
            return False
        if quest.start_date is not None and quest.start_date > today:
            return False
        if quest.end_date is not None and quest.end_date < today:
            return False
        if quest.required_rank_id is None:
            return True

        required_order = (
            await session.execute(
                select(HunterRank.rank_order).where(HunterRank.id == quest.required_rank_id)
            )
        ).scalar_one_or_none()
        return required_order is not None and required_order <= rank_order

    async def _current_rank_order(self, session: AsyncSession, user_id: int) -> int:
        result = await session.execute(
            select(HunterRank.rank_order)
            .join(HunterStatus, HunterStatus.current_rank_id == HunterRank.id)
            .where(HunterStatus.user_id == user_id)
        )
        rank_order = result.scalar_one_or_none()
        if rank_order is None:
            raise NotFoundError("HunterStatus", user_id)
        return rank_order

    @staticmethod
    def _quest_summary(quest: Quest, reward_stat_name: Optional[str]) -> Dict[str, Any]:
        return {
            "quest_id": quest.id,
            "quest_name": quest.quest_name,
            "quest_description": quest.quest_description,
            "category": quest.category,
            "difficulty_level": quest.difficulty_level,
            "experience_reward": quest.experience_reward,
            "reward_stat_id": quest.reward_stat_id,
            "reward_stat_name": reward_stat_name,
            "stat_reward_amount": quest.stat_reward_amount,
        }
