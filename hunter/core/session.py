"""
Explicit authentication session.

An ``AuthSession`` is loaded from a ``SessionStore`` at the start of a
request, passed explicitly to whatever needs the caller's identity, and
saved or cleared at the end. There is no process-wide "current user".

Token issuance and validation are out of scope; the session only carries an
opaque token issued elsewhere.

Examples
--------
>>> store = InMemorySessionStore()
>>> await store.save(AuthSession(user_id=7, token="abc", username="jinwoo"))
>>> session = await store.load("abc")
>>> async with session.log_context(operation="advance_objective"):
...     await quests.advance_objective(session.require_user_id(), 12, 3, 1)
>>> await store.clear("abc")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Protocol

from hunter.core.database.base import utc_now
from hunter.core.logging.logger import LogContext, get_logger
from hunter.modules.shared.exceptions import PermissionDeniedError

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthSession:
    user_id: int
    token: str
    username: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def require_user_id(self) -> int:
        """Return the user id, or raise when the session carries no token."""
        if not self.is_authenticated:
            raise PermissionDeniedError("session", self.token, self.user_id)
        return self.user_id

    def log_context(self, **extra: object) -> LogContext:
        """A LogContext bound to this session's user."""
        return LogContext(user_id=self.user_id, **extra)


class SessionStore(Protocol):
    async def load(self, token: str) -> Optional[AuthSession]: ...

    async def save(self, session: AuthSession) -> None: ...

    async def clear(self, token: str) -> bool: ...


class InMemorySessionStore:
    """
    Dict-backed ``SessionStore`` for a single process.

    Suitable for tests and single-worker deployments; sessions do not
    survive a restart.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, AuthSession] = {}

    async def load(self, token: str) -> Optional[AuthSession]:
        session = self._sessions.get(token)
        if session is None:
            logger.debug("Session not found", extra={"token_prefix": token[:4]})
        return session

    async def save(self, session: AuthSession) -> None:
        self._sessions[session.token] = session
        logger.debug("Session saved", extra={"user_id": session.user_id})

    async def clear(self, token: str) -> bool:
        removed = self._sessions.pop(token, None)
        if removed is not None:
            logger.debug("Session cleared", extra={"user_id": removed.user_id})
        return removed is not None
