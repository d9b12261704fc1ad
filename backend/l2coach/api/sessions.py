"""
Session API endpoints - session lifecycle and raw message log access.
"""

from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..core.engine import ConversationEngine, get_engine
from ..core.registry import SessionRegistry, get_registry
from ..models import (
    ActiveSessionUpdate, Session, SessionCreate, SessionUpdate, Message, MessageCreate
)
from ..storage import ConversationStore, get_conversation_store

router = APIRouter(tags=["sessions"])


@router.get("/sessions", response_model=List[Session])
async def list_sessions(store: ConversationStore = Depends(get_conversation_store)):
    """List sessions, newest first."""
    return await store.list_sessions()


@router.post("/sessions", response_model=Session)
async def create_session(
    body: SessionCreate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Create a session and make it active. Untitled sessions get a time-based title."""
    return await registry.create_session(body.title)


@router.get("/active-session", response_model=Session)
async def get_active_session(registry: SessionRegistry = Depends(get_registry)):
    """The active session; on first load the newest one, created if none exist."""
    active = await registry.active_session()
    if active is None:
        active = await registry.bootstrap()
    return active


@router.put("/active-session", response_model=Session)
async def select_active_session(
    body: ActiveSessionUpdate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Switch the active session. Unknown ids fall back to the newest session."""
    return await registry.select_session(body.session_id)


@router.get("/sessions/{session_id}", response_model=Session)
async def get_session(
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store)
):
    """Get one session."""
    return await store.get_session(session_id)


@router.patch("/sessions/{session_id}", response_model=Session)
async def rename_session(
    session_id: str,
    body: SessionUpdate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Rename a session."""
    return await registry.rename_session(session_id, body.title)


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """
    Delete a session and all of its messages.

    A pending coach reply for the session is discarded. If the session was
    active, the newest remaining one becomes active (a fresh one if none remain).
    """
    await registry.delete_session(session_id)
    return {"success": True}


@router.get("/sessions/{session_id}/messages", response_model=List[Message])
async def list_messages(
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store)
):
    """Messages of a session in time order."""
    return await store.list_messages(session_id)


@router.post("/sessions/{session_id}/messages", response_model=Message)
async def append_message(
    session_id: str,
    body: MessageCreate,
    store: ConversationStore = Depends(get_conversation_store)
):
    """
    Append a message as-is.

    No coach reply is produced; use the /turns endpoints for that.
    """
    return await store.append_message(session_id, body)


@router.delete("/sessions/{session_id}/messages")
async def clear_messages(
    session_id: str,
    store: ConversationStore = Depends(get_conversation_store)
):
    """Delete every message in a session, keeping the session."""
    await store.delete_all_messages(session_id)
    return {"success": True}


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: str,
    store: ConversationStore = Depends(get_conversation_store)
):
    """Delete a single message."""
    await store.delete_message(message_id)
    return {"success": True}


@router.get("/sessions/{session_id}/last-reply", response_model=Optional[Message])
async def last_reply(
    session_id: str,
    engine: ConversationEngine = Depends(get_engine)
):
    """Most recent coach message, or null."""
    return await engine.last_reply(session_id)


@router.get("/sessions/{session_id}/transcript", response_class=PlainTextResponse)
async def download_transcript(
    session_id: str,
    engine: ConversationEngine = Depends(get_engine)
):
    """Plain-text transcript as a download."""
    transcript = await engine.export_transcript(session_id)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return PlainTextResponse(
        transcript,
        headers={"Content-Disposition": f'attachment; filename="l2_coach_{stamp}.txt"'}
    )
