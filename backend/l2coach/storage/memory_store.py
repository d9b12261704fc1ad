"""
In-memory conversation store.
Ephemeral backend for client-local deployments and tests; nothing survives a restart.
"""

from datetime import datetime
from typing import Dict, List

from .conversation_store import ConversationStore
from ..core.exceptions import SessionNotFoundError, MessageNotFoundError
from ..models import Session, Message, MessageCreate


class InMemoryConversationStore(ConversationStore):
    """Keeps sessions and message logs in process memory."""

    def __init__(self):
        super().__init__()
        self._sessions: Dict[str, Session] = {}
        self._messages: Dict[str, List[Message]] = {}
        # Survives clears so later messages still sort after deleted ones
        self._last_timestamps: Dict[str, datetime] = {}

    def _require_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def create_session(self, title: str) -> Session:
        session = Session(
            id=self._new_id(),
            title=title,
            created_at=self._session_created_at(),
        )
        self._sessions[session.id] = session
        self._messages[session.id] = []
        return session

    async def get_session(self, session_id: str) -> Session:
        return self._require_session(session_id)

    async def list_sessions(self) -> List[Session]:
        return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)

    async def rename_session(self, session_id: str, title: str) -> Session:
        async with self._session_lock(session_id):
            session = self._require_session(session_id)
            renamed = session.model_copy(update={"title": title})
            self._sessions[session_id] = renamed
            return renamed

    async def delete_session(self, session_id: str) -> None:
        async with self._session_lock(session_id):
            self._require_session(session_id)
            del self._sessions[session_id]
            self._messages.pop(session_id, None)
            self._last_timestamps.pop(session_id, None)
        self._drop_session_lock(session_id)

    async def append_message(self, session_id: str, payload: MessageCreate) -> Message:
        async with self._session_lock(session_id):
            self._require_session(session_id)
            message = Message(
                id=self._new_id(),
                session_id=session_id,
                timestamp=self._next_timestamp(self._last_timestamps.get(session_id)),
                **payload.model_dump(),
            )
            self._messages[session_id].append(message)
            self._last_timestamps[session_id] = message.timestamp
            return message

    async def list_messages(self, session_id: str) -> List[Message]:
        self._require_session(session_id)
        return list(self._messages[session_id])

    async def delete_message(self, message_id: str) -> None:
        for session_id in list(self._messages):
            try:
                async with self._session_lock(session_id):
                    log = self._messages.get(session_id, [])
                    for index, message in enumerate(log):
                        if message.id == message_id:
                            log.pop(index)
                            return
            except SessionNotFoundError:
                # Deleted since the scan started
                continue
        raise MessageNotFoundError(message_id)

    async def delete_all_messages(self, session_id: str) -> None:
        async with self._session_lock(session_id):
            self._require_session(session_id)
            self._messages[session_id] = []
