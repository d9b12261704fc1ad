"""
Conversation Engine - drives one coach turn per user action.

Per session the engine is either IDLE or AWAITING_REPLY. A submit moves the
session to AWAITING_REPLY, persists the user message, resolves the reply,
persists the coach message and returns to IDLE. Failures also return to
IDLE; there is no error state. A second submit while a reply is pending is
rejected with SessionBusyError. Sessions are independent of each other.
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional, Set

from .exceptions import (
    CoachError, SessionBusyError, SessionNotFoundError, UploadError, ValidationError
)
from .resolver import ResponseResolver, ResolveRequest
from .scenarios import get_scenario
from ..models import Message, MessageCreate, MessageType, Mode, Role, Turn
from ..services.uploads import ImageUploader
from ..storage.conversation_store import ConversationStore

logger = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """Per-session engine state."""
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


def _parse_mode(mode) -> Mode:
    try:
        return Mode(mode)
    except ValueError:
        raise ValidationError(f"Unknown mode: {mode}") from None


class ConversationEngine:
    """
    Orchestrates user turns against the store and the response resolver.
    """

    def __init__(
        self,
        store: ConversationStore,
        resolver: ResponseResolver,
        uploader: Optional[ImageUploader] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Persistence gateway for sessions and messages
            resolver: Produces coach reply text
            uploader: Image upload collaborator; required for image turns
        """
        self.store = store
        self.resolver = resolver
        self.uploader = uploader
        self._pending: Set[str] = set()

    def state(self, session_id: str) -> ConversationState:
        """Current state of a session."""
        if session_id in self._pending:
            return ConversationState.AWAITING_REPLY
        return ConversationState.IDLE

    def forget(self, session_id: str) -> None:
        """Drop engine state for a deleted session."""
        self._pending.discard(session_id)

    @asynccontextmanager
    async def _awaiting_reply(self, session_id: str) -> AsyncIterator[None]:
        # Check and mark with no await in between
        if session_id in self._pending:
            raise SessionBusyError(session_id)
        self._pending.add(session_id)
        try:
            yield
        finally:
            self._pending.discard(session_id)

    async def _session_exists(self, session_id: str) -> bool:
        try:
            await self.store.get_session(session_id)
            return True
        except SessionNotFoundError:
            return False

    async def _complete_turn(self, user_message: Message, request: ResolveRequest) -> Turn:
        session_id = user_message.session_id

        try:
            reply = await self.resolver.resolve(request)
        except CoachError as e:
            logger.warning(
                f"Coach reply failed for session {session_id}: {e.message}",
                extra={"extra_fields": {"session_id": session_id, "error_code": e.code}}
            )
            raise

        # The session may have been deleted while the reply was pending
        if not await self._session_exists(session_id):
            logger.info(f"Session {session_id} deleted while awaiting reply; discarding reply")
            return Turn(user_message=user_message)

        try:
            coach_message = await self.store.append_message(
                session_id,
                MessageCreate(
                    role=Role.COACH,
                    type=MessageType.ANALYSIS,
                    content=reply.text,
                    mode=reply.mode,
                ),
            )
        except SessionNotFoundError:
            logger.info(f"Session {session_id} deleted before reply was stored; discarding reply")
            return Turn(user_message=user_message)

        logger.info(
            f"Coach turn completed: session={session_id}, source={reply.source}, mode={reply.mode.value}"
        )
        return Turn(user_message=user_message, coach_message=coach_message)

    async def submit_text(self, session_id: str, text: str, mode: Mode = Mode.TLDR) -> Turn:
        """
        Submit a text question.

        Raises:
            ValidationError: Empty or whitespace-only text, or unknown mode
            SessionBusyError: A reply is already pending for the session
            SessionNotFoundError: Unknown session
        """
        if not text or not text.strip():
            raise ValidationError("Message text is required")
        mode = _parse_mode(mode)

        async with self._awaiting_reply(session_id):
            user_message = await self.store.append_message(
                session_id,
                MessageCreate(role=Role.USER, type=MessageType.TEXT, content=text),
            )
            return await self._complete_turn(user_message, ResolveRequest(mode=mode, text=text))

    async def submit_image(
        self,
        session_id: str,
        image_bytes: bytes,
        filename: str,
        mode: Mode = Mode.TLDR,
        content_type: Optional[str] = None,
    ) -> Turn:
        """
        Upload a screenshot and have it analyzed.

        Raises:
            ValidationError: Rejected upload (empty, too large, not an image) or unknown mode
            UploadError: Upload collaborator failed
            AnalysisError: Vision analysis failed; the user message is kept
            SessionBusyError: A reply is already pending for the session
            SessionNotFoundError: Unknown session
        """
        if self.uploader is None:
            raise UploadError("no image uploader configured")
        mode = _parse_mode(mode)

        async with self._awaiting_reply(session_id):
            await self.store.get_session(session_id)
            uploaded = await self.uploader.upload(image_bytes, filename, content_type)
            user_message = await self.store.append_message(
                session_id,
                MessageCreate(
                    role=Role.USER,
                    type=MessageType.IMAGE,
                    content=f"Analyzing screenshot: {filename}...",
                    image_url=uploaded.url,
                    image_data=uploaded.url,
                ),
            )
            return await self._complete_turn(
                user_message, ResolveRequest(mode=mode, image_data=uploaded.data_url)
            )

    async def submit_scenario(self, session_id: str, scenario_id: str, mode: Mode = Mode.TLDR) -> Turn:
        """
        Run a canned scenario; the reply comes from the scenario table.

        Raises:
            UnknownScenarioError: Scenario id not in the catalog
            ValidationError: Unknown mode
            SessionBusyError: A reply is already pending for the session
            SessionNotFoundError: Unknown session
        """
        scenario = get_scenario(scenario_id)
        mode = _parse_mode(mode)

        async with self._awaiting_reply(session_id):
            user_message = await self.store.append_message(
                session_id,
                MessageCreate(
                    role=Role.USER,
                    type=MessageType.IMAGE,
                    content=f"Analyzing setup: {scenario.title}...",
                    scenario_id=scenario.id,
                ),
            )
            return await self._complete_turn(
                user_message, ResolveRequest(mode=mode, scenario_id=scenario.id)
            )

    async def last_reply(self, session_id: str) -> Optional[Message]:
        """Most recent coach message in the session, if any."""
        for message in reversed(await self.store.list_messages(session_id)):
            if message.role == Role.COACH:
                return message
        return None

    async def export_transcript(self, session_id: str) -> str:
        """
        Plain-text transcript of a session.

        One block per message, "[HH:MM:SS] ROLE: content" with UTC times,
        blocks separated by a blank line.
        """
        messages = await self.store.list_messages(session_id)
        return "\n\n".join(
            f"[{m.timestamp.strftime('%H:%M:%S')}] {m.role.value.upper()}: {m.content}"
            for m in messages
        )


# Global engine instance
_engine: Optional[ConversationEngine] = None


def init_engine(engine: ConversationEngine) -> None:
    """
    Install the global conversation engine.

    Args:
        engine: Fully wired ConversationEngine
    """
    global _engine
    _engine = engine


def get_engine() -> ConversationEngine:
    """
    Get the global conversation engine.

    Raises:
        RuntimeError: If the engine has not been initialized
    """
    if _engine is None:
        raise RuntimeError("Conversation engine not initialized. Call init_engine() first.")
    return _engine
