"""
Unit Tests for AuthSession and InMemorySessionStore
"""

import pytest

from hunter.core.logging.logger import get_log_context
from hunter.core.session import AuthSession, InMemorySessionStore
from hunter.modules.shared.exceptions import PermissionDeniedError


@pytest.mark.unit
class TestAuthSession:
    def test_require_user_id_with_token(self):
        session = AuthSession(user_id=7, token="abc", username="jinwoo")

        assert session.is_authenticated
        assert session.require_user_id() == 7

    def test_require_user_id_without_token_raises(self):
        session = AuthSession(user_id=7, token="")

        with pytest.raises(PermissionDeniedError):
            session.require_user_id()

    async def test_log_context_binds_user(self):
        session = AuthSession(user_id=7, token="abc")

        async with session.log_context(operation="advance_objective"):
            context = get_log_context()

        assert context["user_id"] == "7"
        assert context["operation"] == "advance_objective"


@pytest.mark.unit
class TestInMemorySessionStore:
    async def test_save_load_clear(self):
        store = InMemorySessionStore()
        session = AuthSession(user_id=7, token="abc")

        await store.save(session)

        assert await store.load("abc") is session
        assert await store.clear("abc") is True
        assert await store.load("abc") is None
        assert await store.clear("abc") is False
