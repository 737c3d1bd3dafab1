"""
Session Store - persistent, TTL-expiring temporary chat sessions.

``find_active`` is the only way a caller ever sees a session: once a record's
expiry has passed it no longer exists for any operation, whether or not the
sweep has physically removed it yet.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .interface import StorageInterface
from ..core import session_state
from ..core.errors import SessionNotFoundError, StorageError, ValidationError
from ..models.session import TemporarySession, SessionMessage, SessionSettings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_SESSION_ID_RE = re.compile(r"^temp_[0-9a-z]+_[0-9a-z]+$")


class SessionStore(ABC):
    """Contract for temporary session persistence."""

    @abstractmethod
    async def create(
        self,
        user_id: Optional[str] = None,
        title: Optional[str] = None,
        settings: Optional[SessionSettings] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TemporarySession:
        """Create a session with a fresh id and the default TTL."""

    @abstractmethod
    async def find_active(self, session_id: str) -> Optional[TemporarySession]:
        """Return the session if it exists, is active and has not expired."""

    @abstractmethod
    async def append(self, session_id: str, message: SessionMessage) -> TemporarySession:
        """Atomically append a message and update counters."""

    @abstractmethod
    async def update_settings(self, session_id: str, partial: Mapping[str, Any]) -> TemporarySession:
        """Shallow-merge settings."""

    @abstractmethod
    async def extend_expiry(self, session_id: str, hours: float) -> TemporarySession:
        """Set expiry to now + hours."""

    @abstractmethod
    async def deactivate(self, session_id: str) -> TemporarySession:
        """Clear the active flag; the record becomes invisible and sweepable."""

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Hard delete. Returns False if no record existed."""

    @abstractmethod
    async def sweep_expired(self) -> int:
        """Delete expired or deactivated records and return how many were removed."""

    @abstractmethod
    async def list_active_for_user(self, user_id: str) -> List[TemporarySession]:
        """Active sessions owned by a user, most recently active first."""


class LocalSessionStore(SessionStore):
    """
    Session store keeping one JSON document per session on a StorageInterface.
    Mutations are serialized by a single lock so every individual operation is
    atomic; nothing spans several operations.
    """

    def __init__(self, storage: StorageInterface, ttl_hours: float = 24, clock: Clock = session_state.utc_now):
        """
        Args:
            storage: Underlying document storage
            ttl_hours: Lifetime of a newly created session
            clock: Returns the current timezone-aware time
        """
        self.storage = storage
        self.ttl_hours = ttl_hours
        self.clock = clock
        self.sessions_dir = "temporary_chats"
        self._lock = asyncio.Lock()

    def _path(self, session_id: str) -> Optional[str]:
        # Ids are generated server-side; anything else cannot name a record
        if not isinstance(session_id, str) or not _SESSION_ID_RE.match(session_id):
            return None
        return f"{self.sessions_dir}/{session_id}.json"

    async def _read(self, path: str) -> Optional[TemporarySession]:
        content = await self.storage.load(path)
        if content is None:
            return None
        try:
            return TemporarySession.model_validate_json(content)
        except PydanticValidationError as e:
            logger.error(f"Corrupt session record {path}: {e}")
            return None

    async def _write(self, session: TemporarySession) -> None:
        content = session.model_dump_json(by_alias=True)
        if not await self.storage.save(self._path(session.session_id), content):
            raise StorageError(f"Failed to persist session {session.session_id}")

    async def _load_active(self, session_id: str) -> Optional[TemporarySession]:
        path = self._path(session_id)
        if path is None:
            return None
        session = await self._read(path)
        if session is None:
            return None
        if not session_state.is_active(session, self.clock()):
            # Record-level TTL: drop it as soon as it is seen dead
            await self.storage.delete(path)
            logger.debug(f"Removed expired session on lookup: {session_id}")
            return None
        return session

    async def _mutate(self, session_id: str, transition: Callable[[TemporarySession, datetime], TemporarySession]) -> TemporarySession:
        async with self._lock:
            session = await self._load_active(session_id)
            if session is None:
                raise SessionNotFoundError()
            updated = transition(session, self.clock())
            await self._write(updated)
            return updated

    async def _iter_records(self) -> List[tuple[str, TemporarySession]]:
        records = []
        for path in await self.storage.list(self.sessions_dir, pattern="temp_*.json"):
            session = await self._read(path)
            if session is not None:
                records.append((path, session))
        return records

    async def create(
        self,
        user_id: Optional[str] = None,
        title: Optional[str] = None,
        settings: Optional[SessionSettings] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TemporarySession:
        session = session_state.new_session(
            now=self.clock(),
            ttl_hours=self.ttl_hours,
            user_id=user_id,
            title=title,
            settings=settings,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        async with self._lock:
            await self._write(session)
        return session

    async def find_active(self, session_id: str) -> Optional[TemporarySession]:
        return await self._load_active(session_id)

    async def append(self, session_id: str, message: SessionMessage) -> TemporarySession:
        return await self._mutate(
            session_id, lambda s, now: session_state.append_message(s, message, now)
        )

    async def update_settings(self, session_id: str, partial: Mapping[str, Any]) -> TemporarySession:
        def transition(session: TemporarySession, now: datetime) -> TemporarySession:
            try:
                return session_state.merge_settings(session, partial, now)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid settings: {e.errors()[0]['msg']}") from e

        return await self._mutate(session_id, transition)

    async def extend_expiry(self, session_id: str, hours: float) -> TemporarySession:
        return await self._mutate(
            session_id, lambda s, now: session_state.extend_expiry(s, hours, now)
        )

    async def deactivate(self, session_id: str) -> TemporarySession:
        return await self._mutate(session_id, session_state.deactivate)

    async def delete(self, session_id: str) -> bool:
        path = self._path(session_id)
        if path is None:
            return False
        async with self._lock:
            return await self.storage.delete(path)

    async def sweep_expired(self) -> int:
        deleted = 0
        async with self._lock:
            now = self.clock()
            for path, session in await self._iter_records():
                if not session_state.is_active(session, now) and await self.storage.delete(path):
                    deleted += 1
        return deleted

    async def list_active_for_user(self, user_id: str) -> List[TemporarySession]:
        now = self.clock()
        sessions = [
            s for _, s in await self._iter_records()
            if s.user_id == user_id and session_state.is_active(s, now)
        ]
        return sorted(sessions, key=lambda s: s.last_activity, reverse=True)

