"""
Integration Tests for HunterRegistrationService and reference data bootstrap
"""

import pytest

from hunter.core.database.bootstrap import seed_reference_data
from hunter.core.database.service import DatabaseService
from hunter.database.models import HunterRank, HunterStatus, UserStat
from hunter.modules.shared.exceptions import InvalidOperationError, NotFoundError
from tests.helpers import count_rows


@pytest.mark.integration
@pytest.mark.database
class TestCreateHunter:
    async def test_new_hunter_starts_at_e_rank_level_1(self, registration_service):
        created = await registration_service.create_hunter(3001)

        assert created["current_level"] == 1
        assert created["level_experience"] == 0
        assert created["experience_to_next_level"] == 100
        assert created["rank_name"] == "E"
        assert created["stats_seeded"] == 5
        assert await count_rows(UserStat, UserStat.user_id == 3001) == 5

    async def test_registration_event_published(self, registration_service, event_bus):
        seen = []
        event_bus.subscribe("hunter.registered", lambda data: seen.append(data))

        await registration_service.create_hunter(3002)

        assert seen == [{"user_id": 3002, "rank": "E"}]

    async def test_duplicate_registration_rejected(self, registration_service):
        await registration_service.create_hunter(3003)

        with pytest.raises(InvalidOperationError):
            await registration_service.create_hunter(3003)

        assert await count_rows(HunterStatus, HunterStatus.user_id == 3003) == 1

    async def test_missing_starting_rank_raises(self, registration_service):
        async with DatabaseService.get_transaction() as session:
            result = await session.execute(
                HunterRank.__table__.delete().where(HunterRank.rank_order == 1)
            )
            assert result.rowcount == 1

        with pytest.raises(NotFoundError):
            await registration_service.create_hunter(3004)

        assert await count_rows(HunterStatus) == 0


@pytest.mark.integration
@pytest.mark.database
class TestReferenceData:
    async def test_seeding_is_idempotent(self, database):
        report = await seed_reference_data()

        assert report.ranks_created == 0
        assert report.stats_created == 0
        assert await count_rows(HunterRank) == 6

    async def test_health_check(self, database):
        assert await database.health_check() is True

    async def test_locked_entity_fetch(self, database):
        async with DatabaseService.get_transaction() as session:
            rank = await DatabaseService.get_locked_entity(session, HunterRank, 1)

        assert rank.rank_name == "E"
