"""
Response Resolver - decides where a coach reply comes from.

Resolution order:
1. A scenario id selects the scenario's canned read for the mode.
2. Image data is sent to the vision analyzer.
3. Plain text is matched against KEYWORD_RULES; first match wins, no match
   gives FALLBACK_READ.

The resolver has no persistence side effects.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .exceptions import AnalysisError, ValidationError
from .scenarios import get_scenario
from ..models import Mode
from ..services.vision import VisionAnalyzer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """Canned read selected when any keyword occurs in the lower-cased input."""
    name: str
    keywords: Tuple[str, ...]
    reply: str

    def matches(self, lowered_text: str) -> bool:
        return any(keyword in lowered_text for keyword in self.keywords)


# Evaluated in order, first match wins. Do not reorder.
KEYWORD_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(
        name="buyers_long",
        keywords=("buyer", "long"),
        reply=(
            "> COACH READ\n"
            "Buyers are weak here. Don't chase.\n"
            "I see heavy offers stacking at the half-dollar.\n"
            "Wait for the reclaim of the level before lifting."
        ),
    ),
    KeywordRule(
        name="sellers_short",
        keywords=("seller", "short"),
        reply=(
            "> COACH READ\n"
            "Sellers are aggressive on the tape.\n"
            "Bids are stepping down.\n"
            "Look for the flush below the round number."
        ),
    ),
)

FALLBACK_READ = (
    "> COACH READ\n"
    "Understood. Keep your eyes on the T&S.\n"
    "Speed is increasing.\n"
    "Watch for the stuff move at the high of day."
)


def match_keyword_rule(text: str) -> Optional[KeywordRule]:
    """Return the first rule matching the text, or None."""
    lowered = text.lower()
    for rule in KEYWORD_RULES:
        if rule.matches(lowered):
            return rule
    return None


@dataclass
class ResolveRequest:
    """Everything the resolver needs from one user turn."""
    mode: Mode
    text: Optional[str] = None
    image_data: Optional[str] = None
    scenario_id: Optional[str] = None


@dataclass(frozen=True)
class Reply:
    """Normalized resolver outcome."""
    text: str
    mode: Mode
    source: str  # "scenario", "analysis" or "keyword"


class ResponseResolver:
    """Produces exactly one reply text per request, or raises."""

    def __init__(
        self,
        analyzer: Optional[VisionAnalyzer] = None,
        reply_delay_seconds: float = 0.0,
    ):
        """
        Initialize the resolver.

        Args:
            analyzer: Vision analysis collaborator for image turns
            reply_delay_seconds: Artificial "typing" delay before canned replies
        """
        self.analyzer = analyzer
        self.reply_delay_seconds = reply_delay_seconds

    async def _typing_delay(self) -> None:
        if self.reply_delay_seconds > 0:
            await asyncio.sleep(self.reply_delay_seconds)

    async def resolve(self, request: ResolveRequest) -> Reply:
        """
        Resolve a request into reply text.

        Raises:
            UnknownScenarioError: scenario_id not in the catalog
            AnalysisError: image analysis failed or is unavailable
            ValidationError: request carries nothing to reply to
        """
        if request.scenario_id:
            scenario = get_scenario(request.scenario_id)
            await self._typing_delay()
            logger.debug(f"Resolved reply from scenario {scenario.id} ({request.mode.value})")
            return Reply(text=scenario.response_for(request.mode), mode=request.mode, source="scenario")

        if request.image_data:
            if self.analyzer is None:
                raise AnalysisError("no vision analyzer available")
            text = await self.analyzer.analyze(request.image_data, request.mode)
            return Reply(text=text, mode=request.mode, source="analysis")

        if request.text is None or not request.text.strip():
            raise ValidationError("Nothing to reply to: request has no text, image or scenario")

        rule = match_keyword_rule(request.text)
        await self._typing_delay()
        logger.debug(f"Keyword rule selected: {rule.name if rule else 'fallback'}")
        return Reply(
            text=rule.reply if rule else FALLBACK_READ,
            mode=request.mode,
            source="keyword",
        )
