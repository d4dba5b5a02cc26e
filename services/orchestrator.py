"""
Orchestrator coordinating cache lookup, transcript acquisition and AI generation.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from models import (
    EnvelopeMetadata, InvalidInputError, LearningBundle, ResultEnvelope,
    TranscriptNotFoundError,
)
from app_logging import log_with_context
from .ai_service import AIService, default_ai_service
from .cache import ResultCache, result_cache
from .transcript_chunker import get_transcript_stats
from .transcript_fetcher import TranscriptFetcher, transcript_fetcher
from .utils import TimingContext, extract_video_id, transcript_fingerprint

logger = logging.getLogger(__name__)

VIDEO_DEFAULT_TITLE = "Educational Video"
TRANSCRIPT_DEFAULT_TITLE = "Custom Transcript"


class LearningOrchestrator:
    """Turns a video URL or pasted transcript into a cached learning result.

    Cache reads never trigger generation and every successful generation
    is written to the cache exactly once. Two concurrent requests for the
    same uncached fingerprint may both generate; the later write wins.
    """

    def __init__(self, cache: ResultCache = None, ai_service: AIService = None,
                 fetcher: TranscriptFetcher = None):
        """Initialize the orchestrator."""
        self.cache = cache if cache is not None else result_cache
        self.ai_service = ai_service or default_ai_service
        self.transcript_fetcher = fetcher or transcript_fetcher

    async def process_video(self, video_url: str) -> Tuple[ResultEnvelope, bool]:
        """
        Process a YouTube video.

        Args:
            video_url: YouTube URL or bare video ID

        Returns:
            Tuple of (result, served_from_cache)
        """
        video_id = extract_video_id(video_url)
        if not video_id:
            raise InvalidInputError("Invalid YouTube URL. Please provide a valid video URL.")

        log_with_context("info", f"Processing video: {video_id}")

        cached = self.cache.get(video_id)
        if cached is not None:
            return cached, True

        with TimingContext(f"Processing video {video_id}") as timer:
            transcript = await self.transcript_fetcher.get_transcript(video_id)
            if not transcript:
                raise TranscriptNotFoundError(
                    "No transcript available for this video. "
                    "Please try a video with captions/subtitles enabled."
                )
            stats = get_transcript_stats(transcript)
            log_with_context("info", f"Transcript for {video_id}: {stats['words']} words, "
                                     f"~{stats['estimatedReadingTime']} read")

            bundle = await self.ai_service.process_transcript(transcript, video_id)
            envelope = self._build_envelope(
                bundle, transcript, timer, VIDEO_DEFAULT_TITLE,
                video_id=video_id, video_url=video_url,
            )

        self.cache.set(video_id, envelope)
        return envelope, False

    async def process_transcript(self, transcript: str) -> Tuple[ResultEnvelope, bool]:
        """
        Process pasted transcript text.

        Args:
            transcript: Raw transcript text

        Returns:
            Tuple of (result, served_from_cache)
        """
        if not transcript or not transcript.strip():
            raise InvalidInputError("Transcript is required")

        key = transcript_fingerprint(transcript)
        log_with_context("info", f"Processing pasted transcript: {key}")

        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        with TimingContext(f"Processing transcript {key}") as timer:
            bundle = await self.ai_service.process_transcript(transcript, key)
            envelope = self._build_envelope(bundle, transcript, timer, TRANSCRIPT_DEFAULT_TITLE)

        self.cache.set(key, envelope)
        return envelope, False

    def _build_envelope(self, bundle: LearningBundle, transcript: str, timer: TimingContext,
                        default_title: str, video_id: Optional[str] = None,
                        video_url: Optional[str] = None) -> ResultEnvelope:
        return ResultEnvelope(
            video_id=video_id,
            video_url=video_url,
            title=bundle.title or default_title,
            summary=bundle.summary,
            key_points=list(bundle.key_points),
            quiz=list(bundle.quiz),
            metadata=EnvelopeMetadata(
                transcript_length=len(transcript),
                processing_time=timer.elapsed_ms,
                generated_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            ),
        )


# Global instance
learning_orchestrator = LearningOrchestrator()
