"""
Media API endpoints - raw uploads and direct screenshot analysis.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response

from ..core.engine import ConversationEngine, get_engine
from ..core.exceptions import AnalysisError, UploadError
from ..models import AnalyzeRequest

router = APIRouter(tags=["media"])


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    engine: ConversationEngine = Depends(get_engine)
):
    """Store a screenshot and return its URL."""
    if engine.uploader is None:
        raise UploadError("no image uploader configured")

    uploaded = await engine.uploader.upload(
        await file.read(),
        file.filename or "screenshot",
        file.content_type,
    )
    return {"url": uploaded.url, "filename": uploaded.filename}


@router.get("/uploads/{name}")
async def get_upload(name: str, engine: ConversationEngine = Depends(get_engine)):
    """Serve a stored screenshot."""
    found = await engine.uploader.load(name) if engine.uploader else None
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found")

    content, media_type = found
    return Response(
        content=content,
        media_type=media_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable"}
    )


@router.post("/analyze")
async def analyze(body: AnalyzeRequest, engine: ConversationEngine = Depends(get_engine)):
    """Analyze a screenshot without recording anything in a session."""
    analyzer = engine.resolver.analyzer
    if analyzer is None:
        raise AnalysisError("no vision analyzer available")
    return {"analysis": await analyzer.analyze(body.image_data, body.mode)}
