"""
Turn Models - request bodies for coach turns and the turn result.
"""

from typing import Optional
from pydantic import Field

from .base import CoachModel
from .message import Message, Mode


class TextTurnRequest(CoachModel):
    """Ask the coach a text question."""
    text: str
    mode: Mode = Mode.TLDR


class ScenarioTurnRequest(CoachModel):
    """Run a canned scenario."""
    scenario_id: str = Field(..., min_length=1)
    mode: Mode = Mode.TLDR


class AnalyzeRequest(CoachModel):
    """Direct screenshot analysis without touching a session."""
    image_data: str = Field(..., min_length=1)  # data URL or base64
    mode: Mode = Mode.TLDR


class Turn(CoachModel):
    """One user message and the coach reply it produced, if any."""
    user_message: Message
    coach_message: Optional[Message] = None
