"""
Integration Tests for Transactional Reward Chains
=================================================

A failure anywhere in a reward chain rolls back every earlier step, and no
events are published for a rolled-back chain.
"""

import pytest

from hunter.core.database.service import DatabaseService
from hunter.database.models import (
    UserActivityLog,
    UserDungeonCompletion,
    UserQuest,
    UserQuestObjective,
)
from hunter.modules.dungeon.service import DungeonCompletionInput
from hunter.modules.shared.exceptions import ConstraintViolationError, NotFoundError
from tests.helpers import count_rows, load_status, stat_id_for, stat_value


@pytest.mark.integration
@pytest.mark.database
class TestRewardChainRollback:
    async def test_failing_stat_step_rolls_back_experience(self, pipeline, hunter, mocker):
        strength = await stat_id_for("strength")
        mocker.patch.object(
            pipeline.accumulator,
            "apply_stat_gain",
            side_effect=NotFoundError("Stat", strength),
        )

        with pytest.raises(NotFoundError):
            async with DatabaseService.get_transaction() as session:
                await pipeline.grant(session, hunter, experience=500, stat_gains={strength: 3})

        status = await load_status(hunter)
        assert status.total_experience == 0
        assert status.level_experience == 0
        assert status.current_level == 1

    async def test_failing_level_step_rolls_back_dungeon_completion(
        self, dungeon_service, dungeon_factory, hunter, mocker, published
    ):
        dungeon_id = await dungeon_factory()
        mocker.patch.object(
            dungeon_service.pipeline.level_evaluator,
            "evaluate_level_up",
            side_effect=ConstraintViolationError("level_up", "simulated"),
        )

        with pytest.raises(ConstraintViolationError):
            await dungeon_service.record_completion(
                hunter,
                dungeon_id,
                DungeonCompletionInput(experience_gained=250, strength_gained=3),
            )

        assert await count_rows(UserDungeonCompletion) == 0
        assert await stat_value(hunter, await stat_id_for("strength")) == 10
        assert (await load_status(hunter)).total_experience == 0
        assert await count_rows(UserActivityLog, UserActivityLog.user_id == hunter) == 0
        assert published == []

    async def test_failing_reward_keeps_quest_open(
        self, quest_service, quest_factory, hunter, mocker, published
    ):
        quest_id, (objective_id,) = await quest_factory(required_amounts=(3,))
        start = await quest_service.start_quest(hunter, quest_id)
        mocker.patch.object(
            quest_service.pipeline.ledger,
            "apply_experience",
            side_effect=NotFoundError("HunterStatus", hunter),
        )

        with pytest.raises(NotFoundError):
            await quest_service.advance_objective(hunter, start.user_quest_id, objective_id, 3)

        assert await count_rows(
            UserQuest, UserQuest.id == start.user_quest_id, UserQuest.is_active.is_(True)
        ) == 1
        assert await count_rows(
            UserQuestObjective, UserQuestObjective.current_progress > 0
        ) == 0
        assert published == []
