"""
Conversation Store - Persistence gateway for sessions and their message logs.

Every backend (file-backed, in-memory) implements the same contract so the
rest of the application never branches on the deployment mode.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Dict, List, Optional
from uuid import uuid4

from ..core.exceptions import SessionNotFoundError
from ..models import Session, Message, MessageCreate


class ConversationStore(ABC):
    """
    Abstract persistence gateway.

    Stores own identity: ids and timestamps are assigned here. Message
    timestamps are strictly increasing per session, so ordering by timestamp
    is also insertion order. Writes to one session are serialized through a
    per-session lock.

    All operations raise StorageError on I/O failure.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._last_session_created: Optional[datetime] = None

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        """
        Hold the write lock for a session.

        Locks exist only for sessions that exist; an unknown id raises
        SessionNotFoundError before anything is allocated.
        """
        lock = self._locks.get(session_id)
        if lock is None:
            await self.get_session(session_id)
            lock = self._locks.setdefault(session_id, asyncio.Lock())
        try:
            async with lock:
                yield
        except SessionNotFoundError:
            # Deleted while we waited
            if self._locks.get(session_id) is lock:
                del self._locks[session_id]
            raise

    def _drop_session_lock(self, session_id: str) -> None:
        self._locks.pop(session_id, None)

    @staticmethod
    def _new_id() -> str:
        return uuid4().hex

    @staticmethod
    def _next_timestamp(previous: Optional[datetime]) -> datetime:
        """Current UTC time, bumped past `previous` if the clock has not moved."""
        now = datetime.now(timezone.utc)
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def _session_created_at(self) -> datetime:
        created_at = self._next_timestamp(self._last_session_created)
        self._last_session_created = created_at
        return created_at

    @abstractmethod
    async def create_session(self, title: str) -> Session:
        """Create and persist a new session."""
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Session:
        """
        Get a session by id.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def list_sessions(self) -> List[Session]:
        """
        List all sessions, newest first.

        Returns an empty list when the store has not been provisioned yet.
        """
        pass

    @abstractmethod
    async def rename_session(self, session_id: str, title: str) -> Session:
        """
        Change a session's title.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """
        Delete a session and all of its messages.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def append_message(self, session_id: str, payload: MessageCreate) -> Message:
        """
        Append a message to a session's log.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def list_messages(self, session_id: str) -> List[Message]:
        """
        List a session's messages, timestamp ascending.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass

    @abstractmethod
    async def delete_message(self, message_id: str) -> None:
        """
        Delete a single message.

        Raises:
            MessageNotFoundError: If no session holds the message
        """
        pass

    @abstractmethod
    async def delete_all_messages(self, session_id: str) -> None:
        """
        Clear a session's message log, keeping the session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        pass
