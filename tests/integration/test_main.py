"""
Integration Tests for the bootstrap entry point
"""

import pytest

from hunter.core.config.config import Config
from hunter.core.database.service import DatabaseService
from hunter.main import main


@pytest.mark.integration
@pytest.mark.database
class TestMain:
    async def test_bootstrap_creates_and_seeds_database(self, tmp_path, monkeypatch):
        db_file = tmp_path / "bootstrap.db"
        monkeypatch.setattr(Config, "DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")
        monkeypatch.setattr(DatabaseService, "_init_lock", None)

        exit_code = await main()

        assert exit_code == 0
        assert db_file.exists()
        assert DatabaseService._engine is None

    async def test_bootstrap_failure_returns_error_code(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "")
        monkeypatch.setattr(DatabaseService, "_init_lock", None)

        assert await main() == 1
