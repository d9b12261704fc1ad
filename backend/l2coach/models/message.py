"""
Message Models - Defines structures for chat turns.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import Field

from .base import CoachModel


class Role(str, Enum):
    """Author of a message."""
    USER = "user"
    COACH = "coach"


class MessageType(str, Enum):
    """Kind of message content."""
    TEXT = "text"
    IMAGE = "image"
    ANALYSIS = "analysis"


class Mode(str, Enum):
    """Response verbosity."""
    TLDR = "tldr"
    FULL = "full"


class MessageCreate(CoachModel):
    """Payload for appending a message; id and timestamp are assigned by the store."""
    role: Role
    type: MessageType
    content: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    image_data: Optional[str] = None  # data URL or base64 payload
    mode: Optional[Mode] = None
    scenario_id: Optional[str] = None


class Message(MessageCreate):
    """Immutable message as persisted."""
    id: str
    session_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
