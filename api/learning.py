"""
Learning material API endpoints.
"""
import logging
from fastapi import APIRouter, Depends

from models import ProcessVideoRequest, ProcessTranscriptRequest, ProcessResponse
from app_logging import log_with_context
from services.orchestrator import LearningOrchestrator, learning_orchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["learning"])


def get_orchestrator() -> LearningOrchestrator:
    """Dependency returning the process-wide orchestrator."""
    return learning_orchestrator


@router.post("/process", response_model=ProcessResponse)
@router.post("/process-youtube", response_model=ProcessResponse)
async def process_video(request: ProcessVideoRequest,
                        orchestrator: LearningOrchestrator = Depends(get_orchestrator)):
    """
    Generate learning material for a YouTube video.

    Returns the cached result when the video was processed within the
    cache TTL.
    """
    log_with_context("info", f"Video processing request: {request.video_url}")

    envelope, cached = await orchestrator.process_video(request.video_url)
    return ProcessResponse(data=envelope, cached=cached)


@router.post("/process-transcript", response_model=ProcessResponse)
async def process_transcript(request: ProcessTranscriptRequest,
                             orchestrator: LearningOrchestrator = Depends(get_orchestrator)):
    """Generate learning material for pasted transcript text."""
    log_with_context("info", f"Transcript processing request: {len(request.transcript)} characters")

    envelope, cached = await orchestrator.process_transcript(request.transcript)
    return ProcessResponse(data=envelope, cached=cached)
