"""
Pytest Configuration and Fixtures for the Hunter Progression Tests
==================================================================

Purpose
-------
Centralized fixtures for the test suite: a real database for integration
tests, service instances wired to it, factories for test data, and mocks
for unit tests.

Architecture Notes
------------------
- Unit tests use mocks (fast, isolated)
- Integration tests use a file-backed SQLite database per test (aiosqlite)
- Reference ranks and stats are seeded from the YAML defaults
- Environment variables are set before ``hunter`` is imported so logging
  and Config pick up the test settings
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date
from typing import AsyncGenerator, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy import select

from hunter.core.config.config import Config
from hunter.core.config.manager import ConfigManager
from hunter.core.database.bootstrap import seed_reference_data
from hunter.core.database.service import DatabaseService
from hunter.core.event.bus import EventBus
from hunter.database.models import (
    Dungeon,
    DungeonCategory,
    DungeonExercise,
    Exercise,
    ExerciseType,
    HunterStatus,
    Quest,
    QuestObjective,
)
from hunter.modules.dungeon.service import DungeonService
from hunter.modules.hunter.registration_service import HunterRegistrationService
from hunter.modules.progression.pipeline import ProgressionPipeline
from hunter.modules.progression.service import ProgressionService
from hunter.modules.quest.service import QuestService
from tests.helpers import rank_id_for, stat_id_for

HUNTER_USER_ID = 1001

PUBLISHED_EVENTS = (
    "progression.level_up",
    "progression.rank_up",
    "quest.completed",
    "dungeon.completed",
)


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def database(tmp_path, monkeypatch) -> AsyncGenerator[type, None]:
    """
    Fresh SQLite database with schema and reference data.

    Scope: function (new database file per test, clean slate)
    """
    monkeypatch.setattr(Config, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/test.db")
    monkeypatch.setattr(Config, "TESTING", True)
    monkeypatch.setattr(DatabaseService, "_init_lock", None)

    ConfigManager.initialize()
    await DatabaseService.initialize()
    await DatabaseService.create_schema()
    await seed_reference_data()

    yield DatabaseService

    await DatabaseService.shutdown()
    ConfigManager.reset()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Every event published on ``event_bus``, as ``(name, payload)`` tuples."""
    captured = []

    def _capture(event_name):
        def _listener(payload):
            captured.append((event_name, payload))

        return _listener

    for event_name in PUBLISHED_EVENTS:
        event_bus.subscribe(
            event_name, _capture(event_name), identifier=f"capture:{event_name}"
        )
    return captured


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def pipeline(database) -> ProgressionPipeline:
    return ProgressionPipeline(ConfigManager)


@pytest.fixture
def progression_service(database, event_bus, pipeline) -> ProgressionService:
    return ProgressionService(ConfigManager, event_bus, pipeline=pipeline)


@pytest.fixture
def quest_service(database, event_bus, pipeline) -> QuestService:
    return QuestService(ConfigManager, event_bus, pipeline=pipeline)


@pytest.fixture
def dungeon_service(database, event_bus, pipeline) -> DungeonService:
    return DungeonService(ConfigManager, event_bus, pipeline=pipeline)


@pytest.fixture
def registration_service(database, event_bus) -> HunterRegistrationService:
    return HunterRegistrationService(ConfigManager, event_bus)


@pytest_asyncio.fixture
async def hunter(registration_service) -> int:
    """A registered hunter at level 1, E-Rank, baseline stats."""
    await registration_service.create_hunter(HUNTER_USER_ID)
    return HUNTER_USER_ID


# ============================================================================
# DATA FACTORIES
# ============================================================================


@pytest.fixture
def status_factory(database):
    """Insert a HunterStatus directly, without seeding stats."""

    async def _create(
        user_id: int,
        *,
        level: int = 1,
        level_experience: int = 0,
        experience_to_next_level: int = 100,
        rank_order: int = 1,
    ) -> int:
        rank_id = await rank_id_for(rank_order)
        async with DatabaseService.get_transaction() as session:
            session.add(
                HunterStatus(
                    user_id=user_id,
                    current_rank_id=rank_id,
                    current_level=level,
                    total_experience=level_experience,
                    level_experience=level_experience,
                    experience_to_next_level=experience_to_next_level,
                )
            )
        return user_id

    return _create


@pytest.fixture
def quest_factory(database):
    """Insert a Quest with objectives; returns ``(quest_id, [objective_ids])``."""

    async def _create(
        *,
        required_amounts: Sequence[int] = (3,),
        experience_reward: int = 50,
        reward_stat: Optional[str] = "strength",
        stat_reward_amount: int = 2,
        required_rank_order: Optional[int] = None,
        is_active: bool = True,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        quest_name: str = "Morning Push-ups",
    ):
        required_rank_id = (
            await rank_id_for(required_rank_order) if required_rank_order else None
        )
        reward_stat_id = await stat_id_for(reward_stat) if reward_stat else None

        async with DatabaseService.get_transaction() as session:
            quest = Quest(
                quest_name=quest_name,
                quest_description="Daily strength routine",
                category="strength",
                difficulty_level=1,
                required_rank_id=required_rank_id,
                experience_reward=experience_reward,
                reward_stat_id=reward_stat_id,
                stat_reward_amount=stat_reward_amount,
                is_active=is_active,
                start_date=start_date,
                end_date=end_date,
            )
            session.add(quest)
            await session.flush()

            objectives = [
                QuestObjective(
                    quest_id=quest.id,
                    objective_description=f"Complete set {index + 1}",
                    objective_type="repetitions",
                    required_amount=amount,
                )
                for index, amount in enumerate(required_amounts)
            ]
            session.add_all(objectives)
            await session.flush()
            return quest.id, [objective.id for objective in objectives]

    return _create


@pytest.fixture
def dungeon_factory(database):
    """Insert a Dungeon, creating its category on first use; returns its id."""

    async def _create(
        *,
        dungeon_name: str = "Iron Gate",
        category: str = "strength",
        difficulty_level: int = 1,
        required_rank_order: int = 1,
        required_level: int = 1,
        base_experience: int = 100,
        is_active: bool = True,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        rank_id = await rank_id_for(required_rank_order)
        async with DatabaseService.get_transaction() as session:
            category_id = (
                await session.execute(
                    select(DungeonCategory.id).where(DungeonCategory.category_name == category)
                )
            ).scalar_one_or_none()
            if category_id is None:
                dungeon_category = DungeonCategory(category_name=category)
                session.add(dungeon_category)
                await session.flush()
                category_id = dungeon_category.id

            dungeon = Dungeon(
                dungeon_name=dungeon_name,
                dungeon_description="A workout challenge",
                category_id=category_id,
                difficulty_level=difficulty_level,
                required_rank_id=rank_id,
                required_level=required_level,
                base_experience=base_experience,
                is_active=is_active,
                start_date=start_date,
                end_date=end_date,
            )
            session.add(dungeon)
            await session.flush()
            return dungeon.id

    return _create


@pytest.fixture
def exercise_factory(database):
    """Attach ``(exercise_name, exercise_order)`` steps to a dungeon's routine."""

    async def _attach(dungeon_id: int, steps: Sequence[tuple], type_name: str = "strength"):
        async with DatabaseService.get_transaction() as session:
            exercise_type = ExerciseType(type_name=type_name)
            session.add(exercise_type)
            await session.flush()

            for exercise_name, exercise_order in steps:
                exercise = Exercise(
                    type_id=exercise_type.id,
                    exercise_name=exercise_name,
                    primary_muscle_group="chest",
                )
                session.add(exercise)
                await session.flush()
                session.add(
                    DungeonExercise(
                        dungeon_id=dungeon_id,
                        exercise_id=exercise.id,
                        exercise_order=exercise_order,
                        sets=3,
                        reps=10,
                    )
                )
            await session.flush()

    return _attach


# ============================================================================
# MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def mock_event_bus(mocker):
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock()
    return mock_bus


@pytest.fixture
def mock_config_manager(mocker):
    """ConfigManager stand-in answering from a plain dict."""
    values = {
        "progression.threshold_base": 100,
        "progression.threshold_per_level": 100,
        "progression.cascade_rank_promotions": False,
    }
    mock_config = mocker.MagicMock()
    mock_config.values = values
    mock_config.get = mocker.MagicMock(
        side_effect=lambda key, default=None: values.get(key, default)
    )
    return mock_config
