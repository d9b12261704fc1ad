"""
Session Registry - the set of sessions and which one is active.

The active session is plain instance state of the registry. The server keeps
one registry per process; it is never persisted.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .exceptions import SessionNotFoundError
from ..models import Session
from ..storage.conversation_store import ConversationStore

logger = logging.getLogger(__name__)


def default_session_title(now: Optional[datetime] = None) -> str:
    """Title for a session created without one, e.g. "Session 09:41:07"."""
    now = now or datetime.now()
    return f"Session {now.strftime('%H:%M:%S')}"


class SessionRegistry:
    """
    Session lifecycle plus the active-session pointer.
    """

    def __init__(
        self,
        store: ConversationStore,
        on_delete: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the registry.

        Args:
            store: Persistence gateway
            on_delete: Called with the id of every deleted session
                (e.g. ConversationEngine.forget)
        """
        self.store = store
        self.on_delete = on_delete
        self.active_session_id: Optional[str] = None

    async def list_sessions(self) -> List[Session]:
        return await self.store.list_sessions()

    async def create_session(self, title: Optional[str] = None) -> Session:
        """Create a session and make it active."""
        title = title.strip() if title and title.strip() else default_session_title()
        session = await self.store.create_session(title)
        self.active_session_id = session.id
        logger.info(f"Created session {session.id} ({title})")
        return session

    async def active_session(self) -> Optional[Session]:
        """The active session, or None if nothing is selected or it is gone."""
        if self.active_session_id is None:
            return None
        try:
            return await self.store.get_session(self.active_session_id)
        except SessionNotFoundError:
            return None

    async def _select_newest_or_create(self) -> Session:
        sessions = await self.store.list_sessions()
        if sessions:
            self.active_session_id = sessions[0].id
            return sessions[0]
        return await self.create_session()

    async def bootstrap(self) -> Session:
        """First load: select the newest session, creating one if there are none."""
        return await self._select_newest_or_create()

    async def select_session(self, session_id: str) -> Session:
        """
        Make a session active.

        Unknown ids fall back to the newest session; with no sessions at all a
        fresh one is created.
        """
        try:
            session = await self.store.get_session(session_id)
        except SessionNotFoundError:
            logger.warning(f"Cannot select unknown session {session_id}, falling back")
            return await self._select_newest_or_create()

        self.active_session_id = session.id
        return session

    async def rename_session(self, session_id: str, title: str) -> Session:
        return await self.store.rename_session(session_id, title)

    async def delete_session(self, session_id: str) -> Session:
        """
        Delete a session and return the session that is active afterwards.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        await self.store.delete_session(session_id)
        if self.on_delete is not None:
            self.on_delete(session_id)
        logger.info(f"Deleted session {session_id}")

        if self.active_session_id == session_id or self.active_session_id is None:
            return await self._select_newest_or_create()

        active = await self.active_session()
        if active is None:
            return await self._select_newest_or_create()
        return active


# Global registry instance
_registry: Optional[SessionRegistry] = None


def init_registry(registry: SessionRegistry) -> None:
    """
    Install the global session registry.

    Args:
        registry: SessionRegistry wired with the engine's forget hook
    """
    global _registry
    _registry = registry


def get_registry() -> SessionRegistry:
    """
    Get the global session registry.

    Raises:
        RuntimeError: If the registry has not been initialized
    """
    if _registry is None:
        raise RuntimeError("Session registry not initialized. Call init_registry() first.")
    return _registry
