"""
Turn API endpoints - submit a user action and get the coach's reply.
"""

from typing import List
from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..core.engine import ConversationEngine, get_engine
from ..core.scenarios import list_scenarios
from ..models import Mode, Scenario, ScenarioTurnRequest, TextTurnRequest, Turn

router = APIRouter(tags=["turns"])


@router.post("/sessions/{session_id}/turns/text", response_model=Turn)
async def submit_text(
    session_id: str,
    body: TextTurnRequest,
    engine: ConversationEngine = Depends(get_engine)
):
    """
    Ask the coach a text question.

    Returns 409 while a previous reply for the session is still pending.
    """
    return await engine.submit_text(session_id, body.text, body.mode)


@router.post("/sessions/{session_id}/turns/image", response_model=Turn)
async def submit_image(
    session_id: str,
    file: UploadFile = File(...),
    mode: Mode = Form(Mode.TLDR),
    engine: ConversationEngine = Depends(get_engine)
):
    """
    Upload a screenshot for analysis.

    On analysis failure the user message stays in the log and the error is
    returned; no coach message is stored.
    """
    image_bytes = await file.read()
    return await engine.submit_image(
        session_id,
        image_bytes,
        file.filename or "screenshot",
        mode,
        content_type=file.content_type,
    )


@router.post("/sessions/{session_id}/turns/scenario", response_model=Turn)
async def submit_scenario(
    session_id: str,
    body: ScenarioTurnRequest,
    engine: ConversationEngine = Depends(get_engine)
):
    """Run a canned scenario."""
    return await engine.submit_scenario(session_id, body.scenario_id, body.mode)


@router.get("/scenarios", response_model=List[Scenario])
async def get_scenarios():
    """The scenario catalog."""
    return list_scenarios()
