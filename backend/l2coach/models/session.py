"""
Session Models - Defines structures for coaching sessions.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import Field

from .base import CoachModel


class Session(CoachModel):
    """A titled, ordered container of messages."""
    id: str
    title: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionCreate(CoachModel):
    """Request body for creating a session; a missing or blank title gets a default."""
    title: Optional[str] = None


class SessionUpdate(CoachModel):
    """Request body for renaming a session."""
    title: str = Field(..., min_length=1)


class ActiveSessionUpdate(CoachModel):
    """Request body for switching the active session."""
    session_id: str = Field(..., min_length=1)
