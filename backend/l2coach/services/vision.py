"""
Vision Analysis Service - reads a Level 2 / time and sales screenshot through a
multimodal LLM and returns the coach's read in the requested verbosity.
"""

import asyncio
import logging
import time
from typing import Optional

from ..core.exceptions import AnalysisError
from ..llm.base import LLMProvider, LLMMessage
from ..models import Mode

logger = logging.getLogger(__name__)


COACH_PERSONA = """You are a veteran tape reader coaching a day trader.
You are shown a screenshot of Level 2 market data, time and sales, or a chart.
Read the order flow: who is in control, where the inflection levels are, and
what is likely in the next 30 seconds. Be direct. Never hedge with disclaimers."""

TLDR_INSTRUCTIONS = """Answer in exactly this format, one line each:
> TL;DR ANALYSIS
STATUS: <who is in control>
MOMENTUM: <one phrase>
INFLECTION: <price level and why>
NEXT 30s: <expected move>
ACTION: <bias> - <one sentence>"""

FULL_INSTRUCTIONS = """Answer in this format:
> FULL TAPE REVIEW
----------------------------------------
1. STRUCTURE
- <2-3 bullets>

2. ORDER FLOW
- <2-3 bullets>

3. SCENARIO
- <2-3 bullets>

> ACTIONABLE SETUP
<entry, stop and target in one line, or "None." if there is no edge>"""


def build_prompt(mode: Mode) -> str:
    """System prompt for the requested verbosity."""
    instructions = FULL_INSTRUCTIONS if mode == Mode.FULL else TLDR_INSTRUCTIONS
    return f"{COACH_PERSONA}\n\n{instructions}"


def to_image_url(image_data: str, media_type: str = "image/png") -> str:
    """
    Normalize image input to something the chat completions API accepts.

    Data URLs and http(s) URLs pass through; anything else is treated as a
    bare base64 payload.
    """
    image_data = image_data.strip()
    if image_data.startswith(("data:", "http://", "https://")):
        return image_data
    return f"data:{media_type};base64,{image_data}"


class VisionAnalyzer:
    """
    Black-box analysis capability: given an image and a mode, return text or fail.
    """

    def __init__(self, llm_provider: Optional[LLMProvider] = None, timeout_seconds: float = 60.0):
        """
        Initialize the analyzer.

        Args:
            llm_provider: Multimodal provider; None leaves the analyzer unconfigured
            timeout_seconds: Upper bound on a single analysis call
        """
        self._llm_provider = llm_provider
        self.timeout_seconds = timeout_seconds

    def is_configured(self) -> bool:
        return self._llm_provider is not None

    async def analyze(self, image_data: str, mode: Mode, timeout_seconds: Optional[float] = None) -> str:
        """
        Analyze a screenshot.

        Args:
            image_data: Data URL, image URL or base64 payload
            mode: Response verbosity
            timeout_seconds: Per-call override of the configured timeout

        Returns:
            The coach's read

        Raises:
            AnalysisError: Provider missing, failing, timing out or returning nothing
        """
        if self._llm_provider is None:
            raise AnalysisError(
                "vision analysis is not configured. Set LLM_API_KEY and LLM_PROVIDER to enable it."
            )
        if not image_data or not image_data.strip():
            raise AnalysisError("no image data supplied")

        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        messages = [
            LLMMessage.text("system", build_prompt(mode)),
            LLMMessage.multimodal("user", "Read this tape.", image_urls=[to_image_url(image_data)]),
        ]

        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                self._llm_provider.chat_completion(messages),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Vision analysis timed out after {timeout}s")
            raise AnalysisError(f"timed out after {timeout}s") from e
        except Exception as e:
            raise AnalysisError(str(e) or type(e).__name__) from e

        text = (response.content or "").strip()
        if not text:
            raise AnalysisError("provider returned an empty analysis")

        logger.info(
            f"Vision analysis completed: mode={mode.value}, length={len(text)} chars",
            extra={"extra_fields": {
                "mode": mode.value,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            }}
        )
        return text
