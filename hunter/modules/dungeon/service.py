"""
Dungeon Service
===============

Workout challenges ("dungeons") and their completions.

Public Methods
--------------
- get_available_dungeons() -> Dungeons the hunter's rank and level unlock today
- get_dungeon() -> One dungeon with its required rank and exercise routine
- get_completed_dungeons() -> Completion history, newest first
- record_completion() -> Store a completion and grant its rewards

A completion reports the experience and per-stat gains the client measured.
``record_completion`` stores the completion row, sends the gains through the
progression pipeline and writes a ``dungeon`` activity row, all in one
transaction. ``dungeon.completed`` and any progression events are published
after commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import func, or_, select

from hunter.core.database.service import DatabaseService
from hunter.core.logging.logger import get_logger
from hunter.database.models import (
    Dungeon,
    DungeonCategory,
    DungeonExercise,
    Exercise,
    ExerciseType,
    HunterRank,
    HunterStatus,
    Stat,
    UserDungeonCompletion,
)
from hunter.database.models.enums import ActivityType
from hunter.modules.progression.pipeline import ProgressionOutcome, ProgressionPipeline
from hunter.modules.shared.base_repository import BaseRepository
from hunter.modules.shared.base_service import BaseService
from hunter.modules.shared.exceptions import InvalidOperationError, NotFoundError
from hunter.modules.shared.validators import (
    validate_identifier,
    validate_non_negative_amount,
)

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from hunter.core.config.manager import ConfigManager
    from hunter.core.event.bus import EventBus


STAT_GAIN_FIELDS = ("strength", "endurance", "agility", "discipline", "recovery")


@dataclass(frozen=True)
class DungeonCompletionInput:
    """Measured results of one dungeon run."""

    experience_gained: int = 0
    strength_gained: int = 0
    endurance_gained: int = 0
    agility_gained: int = 0
    discipline_gained: int = 0
    recovery_gained: int = 0
    completion_time: int = 0
    user_rating: Optional[int] = None
    user_notes: Optional[str] = None

    def stat_gains(self) -> Dict[str, int]:
        """``{stat_name: amount}`` for every stat column."""
        return {name: getattr(self, f"{name}_gained") for name in STAT_GAIN_FIELDS}


@dataclass(frozen=True)
class DungeonCompletionResult:
    completion_id: int
    outcome: ProgressionOutcome


class DungeonService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        pipeline: Optional[ProgressionPipeline] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self.pipeline = pipeline or ProgressionPipeline(config_manager)

        self._dungeon_repo: BaseRepository[Dungeon] = BaseRepository(
            Dungeon, get_logger(f"{__name__}.DungeonRepository")
        )
        self._completion_repo: BaseRepository[UserDungeonCompletion] = BaseRepository(
            UserDungeonCompletion, get_logger(f"{__name__}.UserDungeonCompletionRepository")
        )
        self._status_repo: BaseRepository[HunterStatus] = BaseRepository(
            HunterStatus, get_logger(f"{__name__}.HunterStatusRepository")
        )

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_available_dungeons(
        self, user_id: int, today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Active dungeons whose rank and level requirements the hunter meets
        and whose availability window contains ``today``, ordered by
        category then difficulty.

        Raises:
            NotFoundError: the user has no hunter status
        """
        today = today or date.today()

        async with DatabaseService.get_session() as session:
            status, rank = await self._status_with_rank(session, user_id)

            result = await session.execute(
                select(Dungeon, DungeonCategory.category_name, HunterRank)
                .join(DungeonCategory, Dungeon.category_id == DungeonCategory.id)
                .join(HunterRank, Dungeon.required_rank_id == HunterRank.id)
                .where(
                    Dungeon.is_active.is_(True),
                    HunterRank.rank_order <= rank.rank_order,
                    Dungeon.required_level <= status.current_level,
                    or_(Dungeon.start_date.is_(None), Dungeon.start_date <= today),
                    or_(Dungeon.end_date.is_(None), Dungeon.end_date >= today),
                )
                .order_by(Dungeon.category_id, Dungeon.difficulty_level, Dungeon.id)
            )
            rows = result.all()

        return [
            self._dungeon_summary(dungeon, category_name, required_rank)
            for dungeon, category_name, required_rank in rows
        ]

    async def get_dungeon(self, dungeon_id: int) -> Dict[str, Any]:
        """
        One dungeon with its routine under ``exercises``, in ``exercise_order``.

        Raises:
            NotFoundError: unknown dungeon
        """
        async with DatabaseService.get_session() as session:
            result = await session.execute(
                select(Dungeon, DungeonCategory.category_name, HunterRank)
                .join(DungeonCategory, Dungeon.category_id == DungeonCategory.id)
                .join(HunterRank, Dungeon.required_rank_id == HunterRank.id)
                .where(Dungeon.id == dungeon_id)
            )
            row = result.one_or_none()
            if row is None:
                raise NotFoundError("Dungeon", dungeon_id)

            routine = await session.execute(
                select(DungeonExercise, Exercise, ExerciseType.type_name)
                .join(Exercise, DungeonExercise.exercise_id == Exercise.id)
                .join(ExerciseType, Exercise.type_id == ExerciseType.id)
                .where(DungeonExercise.dungeon_id == dungeon_id)
                .order_by(DungeonExercise.exercise_order)
            )
            steps = routine.all()

        dungeon, category_name, required_rank = row
        return {
            **self._dungeon_summary(dungeon, category_name, required_rank),
            "exercises": [
                {
                    "exercise_id": exercise.id,
                    "exercise_order": step.exercise_order,
                    "exercise_name": exercise.exercise_name,
                    "exercise_description": exercise.exercise_description,
                    "type_name": type_name,
                    "difficulty_level": exercise.difficulty_level,
                    "equipment_required": exercise.equipment_required,
                    "primary_muscle_group": exercise.primary_muscle_group,
                    "secondary_muscle_groups": exercise.secondary_muscle_groups,
                    "demonstration_url": exercise.demonstration_url,
                    "instructions": exercise.instructions,
                    "sets": step.sets,
                    "reps": step.reps,
                    "duration_seconds": step.duration_seconds,
                    "rest_seconds": step.rest_seconds,
                }
                for step, exercise, type_name in steps
            ],
        }

    async def get_completed_dungeons(
        self, user_id: int, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        async with DatabaseService.get_session() as session:
            query = (
                select(UserDungeonCompletion, Dungeon, DungeonCategory.category_name)
                .join(Dungeon, UserDungeonCompletion.dungeon_id == Dungeon.id)
                .join(DungeonCategory, Dungeon.category_id == DungeonCategory.id)
                .where(UserDungeonCompletion.user_id == user_id)
                .order_by(
                    UserDungeonCompletion.completion_date.desc(),
                    UserDungeonCompletion.id.desc(),
                )
            )
            if limit is not None:
                query = query.limit(limit)
            rows = (await session.execute(query)).all()

        history: List[Dict[str, Any]] = []
        for completion, dungeon, category_name in rows:
            entry: Dict[str, Any] = {
                "completion_id": completion.id,
                "dungeon_id": dungeon.id,
                "dungeon_name": dungeon.dungeon_name,
                "category": category_name,
                "difficulty_level": dungeon.difficulty_level,
                "completion_date": completion.completion_date,
                "completion_time": completion.completion_time,
                "experience_gained": completion.experience_gained,
                "user_rating": completion.user_rating,
                "user_notes": completion.user_notes,
            }
            for name in STAT_GAIN_FIELDS:
                entry[f"{name}_gained"] = getattr(completion, f"{name}_gained")
            history.append(entry)
        return history

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def record_completion(
        self,
        user_id: int,
        dungeon_id: int,
        completion: DungeonCompletionInput,
    ) -> DungeonCompletionResult:
        """
        Store a dungeon completion and grant its experience and stat gains.

        Raises:
            NotFoundError: missing hunter status, unknown dungeon, or a stat
                column with no matching ``Stat`` definition
            InvalidOperationError: the dungeon is inactive
            ValidationError: a negative gain or completion time
        """
        validate_identifier(user_id, "user_id")
        experience = validate_non_negative_amount(completion.experience_gained, "experience_gained")
        validate_non_negative_amount(completion.completion_time, "completion_time")
        named_gains = {
            name: validate_non_negative_amount(amount, f"{name}_gained")
            for name, amount in completion.stat_gains().items()
        }

        self.log_operation("record_completion", user_id=user_id, dungeon_id=dungeon_id)

        async with DatabaseService.get_transaction() as session:
            if not await self._status_repo.exists(session, HunterStatus.user_id == user_id):
                raise NotFoundError("HunterStatus", user_id)

            dungeon = await self._dungeon_repo.get(session, dungeon_id)
            if dungeon is None:
                raise NotFoundError("Dungeon", dungeon_id)
            if not dungeon.is_active:
                raise InvalidOperationError(
                    "record_completion", f"Dungeon {dungeon.dungeon_name} is not active"
                )

            row = self._completion_repo.add(
                session,
                UserDungeonCompletion(
                    user_id=user_id,
                    dungeon_id=dungeon_id,
                    completion_time=completion.completion_time,
                    experience_gained=experience,
                    user_rating=completion.user_rating,
                    user_notes=completion.user_notes,
                    **{f"{name}_gained": amount for name, amount in named_gains.items()},
                ),
            )
            await self._completion_repo.flush(session)

            stat_gains = await self._resolve_stat_ids(session, named_gains)
            outcome = await self.pipeline.grant(
                session, user_id, experience=experience, stat_gains=stat_gains
            )

            self.pipeline.activity.record(
                session,
                user_id,
                ActivityType.DUNGEON,
                activity_id=dungeon_id,
                experience_change=experience,
                notes=f"Completed dungeon: {dungeon.dungeon_name}",
            )
            completion_id = row.id
            dungeon_name = dungeon.dungeon_name

        self.log.info(
            "Dungeon completion recorded",
            extra={
                "user_id": user_id,
                "dungeon_id": dungeon_id,
                "completion_id": completion_id,
                "experience_gained": experience,
                "levels_gained": outcome.levels_gained,
            },
        )

        await self.emit_event(
            "dungeon.completed",
            {
                "user_id": user_id,
                "dungeon_id": dungeon_id,
                "dungeon_name": dungeon_name,
                "completion_id": completion_id,
                "experience_gained": experience,
            },
        )
        for event_name, payload in outcome.events():
            await self.emit_event(event_name, payload)

        return DungeonCompletionResult(completion_id=completion_id, outcome=outcome)

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _resolve_stat_ids(
        self, session: AsyncSession, named_gains: Dict[str, int]
    ) -> Dict[int, int]:
        """Map positive ``{stat_name: amount}`` gains onto stat ids."""
        positive = {name: amount for name, amount in named_gains.items() if amount > 0}
        if not positive:
            return {}

        result = await session.execute(
            select(Stat.id, func.lower(Stat.stat_name)).where(
                func.lower(Stat.stat_name).in_(list(positive))
            )
        )
        ids_by_name = {name: stat_id for stat_id, name in result.all()}

        gains: Dict[int, int] = {}
        for name, amount in positive.items():
            stat_id = ids_by_name.get(name)
            if stat_id is None:
                raise NotFoundError("Stat", name)
            gains[stat_id] = amount
        return gains

    async def _status_with_rank(self, session: AsyncSession, user_id: int):
        result = await session.execute(
            select(HunterStatus, HunterRank)
            .join(HunterRank, HunterStatus.current_rank_id == HunterRank.id)
            .where(HunterStatus.user_id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("HunterStatus", user_id)
        return row

    @staticmethod
    def _dungeon_summary(
        dungeon: Dungeon, category_name: str, required_rank: HunterRank
    ) -> Dict[str, Any]:
        return {
            "dungeon_id": dungeon.id,
            "dungeon_name": dungeon.dungeon_name,
            "dungeon_description": dungeon.dungeon_description,
            "category_id": dungeon.category_id,
            "category": category_name,
            "difficulty_level": dungeon.difficulty_level,
            "required_rank_id": required_rank.id,
            "required_rank_name": required_rank.rank_name,
            "required_level": dungeon.required_level,
            "base_experience": dungeon.base_experience,
            "is_active": dungeon.is_active,
            "start_date": dungeon.start_date,
            "end_date": dungeon.end_date,
        }
