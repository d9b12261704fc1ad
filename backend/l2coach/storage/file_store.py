"""
File-backed conversation store.

Layout under the storage root:
    sessions/<session_id>/session.json      session document
    sessions/<session_id>/messages.jsonl    append-only message log, one JSON per line

Deleting a session removes its whole directory, so messages never outlive
their session.
"""

import json
import logging
import re
from datetime import datetime
from typing import Dict, List, Optional

from .conversation_store import ConversationStore
from .interface import StorageInterface
from ..core.exceptions import SessionNotFoundError, MessageNotFoundError, StorageError
from ..models import Session, Message, MessageCreate

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class FileConversationStore(ConversationStore):
    """
    Persists sessions and messages as JSON documents through a StorageInterface.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize the file-backed store.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        super().__init__()
        self.storage = storage
        self.sessions_dir = "sessions"
        # Last message timestamp per session, loaded lazily from the log
        self._last_timestamps: Dict[str, Optional[datetime]] = {}

    def _session_dir(self, session_id: str) -> str:
        # Ids come straight from URLs; anything that is not a plain token cannot exist
        if not _ID_PATTERN.match(session_id):
            raise SessionNotFoundError(session_id)
        return f"{self.sessions_dir}/{session_id}"

    def _session_path(self, session_id: str) -> str:
        return f"{self._session_dir(session_id)}/session.json"

    def _messages_path(self, session_id: str) -> str:
        return f"{self._session_dir(session_id)}/messages.jsonl"

    async def _load_session(self, session_id: str) -> Optional[Session]:
        content = await self.storage.load(self._session_path(session_id))
        if content is None:
            return None
        try:
            return Session.model_validate_json(content)
        except ValueError as e:
            raise StorageError("load session", f"{session_id}: {e}") from e

    async def _require_session(self, session_id: str) -> Session:
        session = await self._load_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def _read_log(self, session_id: str) -> List[Message]:
        content = await self.storage.load(self._messages_path(session_id))
        if not content:
            return []

        messages = []
        try:
            for line in content.decode('utf-8').splitlines():
                if line.strip():
                    messages.append(Message.model_validate_json(line))
        except ValueError as e:
            raise StorageError("read message log", f"{session_id}: {e}") from e
        return messages

    async def _write_log(self, session_id: str, messages: List[Message]) -> None:
        content = "".join(m.model_dump_json() + "\n" for m in messages)
        await self.storage.save(self._messages_path(session_id), content)

    async def _last_timestamp(self, session_id: str) -> Optional[datetime]:
        if session_id not in self._last_timestamps:
            log = await self._read_log(session_id)
            self._last_timestamps[session_id] = log[-1].timestamp if log else None
        return self._last_timestamps[session_id]

    async def create_session(self, title: str) -> Session:
        session = Session(
            id=self._new_id(),
            title=title,
            created_at=self._session_created_at(),
        )
        await self.storage.save(self._session_path(session.id), session.model_dump_json(indent=2))
        logger.debug(f"Created session {session.id}")
        return session

    async def get_session(self, session_id: str) -> Session:
        return await self._require_session(session_id)

    async def list_sessions(self) -> List[Session]:
        # A root that was never provisioned lists as empty
        files = await self.storage.list(self.sessions_dir, pattern="session.json", recursive=True)

        sessions = []
        for file_path in files:
            content = await self.storage.load(file_path)
            if content is None:
                # Deleted between list and load
                continue
            try:
                sessions.append(Session.model_validate_json(content))
            except ValueError as e:
                raise StorageError("list sessions", f"{file_path}: {e}") from e

        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    async def rename_session(self, session_id: str, title: str) -> Session:
        async with self._session_lock(session_id):
            session = await self._require_session(session_id)
            renamed = session.model_copy(update={"title": title})
            await self.storage.save(self._session_path(session_id), renamed.model_dump_json(indent=2))
            return renamed

    async def delete_session(self, session_id: str) -> None:
        async with self._session_lock(session_id):
            await self._require_session(session_id)
            await self.storage.delete_tree(self._session_dir(session_id))
            self._last_timestamps.pop(session_id, None)
        self._drop_session_lock(session_id)
        logger.debug(f"Deleted session {session_id}")

    async def append_message(self, session_id: str, payload: MessageCreate) -> Message:
        async with self._session_lock(session_id):
            await self._require_session(session_id)
            previous = await self._last_timestamp(session_id)
            message = Message(
                id=self._new_id(),
                session_id=session_id,
                timestamp=self._next_timestamp(previous),
                **payload.model_dump(),
            )
            await self.storage.append(self._messages_path(session_id), message.model_dump_json() + "\n")
            self._last_timestamps[session_id] = message.timestamp
            return message

    async def list_messages(self, session_id: str) -> List[Message]:
        await self._require_session(session_id)
        # sorted() is stable, so equal timestamps keep log order
        return sorted(await self._read_log(session_id), key=lambda m: m.timestamp)

    async def delete_message(self, message_id: str) -> None:
        log_files = await self.storage.list(self.sessions_dir, pattern="messages.jsonl", recursive=True)
        for file_path in log_files:
            session_id = file_path.split('/')[-2]
            try:
                async with self._session_lock(session_id):
                    log = await self._read_log(session_id)
                    remaining = [m for m in log if m.id != message_id]
                    if len(remaining) != len(log):
                        await self._write_log(session_id, remaining)
                        return
            except SessionNotFoundError:
                # Deleted since the scan started
                continue
        raise MessageNotFoundError(message_id)

    async def delete_all_messages(self, session_id: str) -> None:
        async with self._session_lock(session_id):
            await self._require_session(session_id)
            await self.storage.delete(self._messages_path(session_id))
