"""
Scenario Models - Static catalog entries with canned coach reads.
"""

from pydantic import ConfigDict

from .base import CoachModel
from .message import Mode


class Scenario(CoachModel):
    """Canned market-condition example."""
    id: str
    title: str
    description: str
    image_prompt: str
    tldr_response: str
    full_response: str

    def response_for(self, mode: Mode) -> str:
        """Return the canned read for the requested verbosity."""
        return self.full_response if mode == Mode.FULL else self.tldr_response

    # Merged with the camelCase config of CoachModel
    model_config = ConfigDict(frozen=True)
