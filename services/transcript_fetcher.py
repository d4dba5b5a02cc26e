"""
Transcript fetcher using youtube-transcript-api to extract video transcripts.
"""
import asyncio
import logging
import re
from typing import List, Optional
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    TranscriptsDisabled,
    NoTranscriptFound,
    VideoUnavailable,
)

from models import TranscriptsDisabledError, VideoNotFoundError, TranscriptFetchError
from app_logging import log_with_context
from config import config

logger = logging.getLogger(__name__)

_ANNOTATION_PATTERNS = [
    re.compile(r'\[[^\[\]]*\]'),   # [music], [Applause]
    re.compile(r'\([^()]*\)'),     # (laughs)
]
_ARTIFACT_PATTERN = re.compile(r'♪|♫|â™ª')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def _clean_once(text: str) -> str:
    for pattern in _ANNOTATION_PATTERNS:
        text = pattern.sub(' ', text)
    text = _ARTIFACT_PATTERN.sub('', text)
    return _WHITESPACE_PATTERN.sub(' ', text).strip()


def clean_transcript(text: str) -> str:
    """
    Normalise raw caption text.

    Strips bracketed and parenthetical annotations and music-note
    artifacts, then collapses whitespace. Passes repeat until the text
    stops changing, so cleaning already-clean text is a no-op.
    """
    if not text:
        return ""

    cleaned = _clean_once(text)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


class TranscriptFetcher:
    """Fetches video transcripts using youtube-transcript-api."""

    def __init__(self, languages: List[str] = None, api: Optional[YouTubeTranscriptApi] = None):
        """Initialize the transcript fetcher."""
        self.languages = languages or ['en']
        self.api = api or YouTubeTranscriptApi()

    async def get_transcript(self, video_id: str) -> str:
        """
        Fetch and clean the transcript for a video.

        Args:
            video_id: YouTube video ID

        Returns:
            Cleaned transcript text

        Raises:
            TranscriptsDisabledError: captions are turned off for the video
            VideoNotFoundError: the video or any transcript is missing
            TranscriptFetchError: any other provider failure
        """
        log_with_context("info", f"Fetching transcript for video: {video_id}")

        try:
            segments = await asyncio.to_thread(self._fetch_segments, video_id)
        except TranscriptsDisabled as e:
            log_with_context("error", f"Transcripts disabled for {video_id}: {e}")
            raise TranscriptsDisabledError("Transcripts are disabled for this video") from e
        except (NoTranscriptFound, VideoUnavailable, VideoNotFoundError) as e:
            log_with_context("error", f"No transcript found for {video_id}: {e}")
            raise VideoNotFoundError("Video not found or transcripts not available") from e
        except Exception as e:
            log_with_context("error", f"Error fetching transcript for {video_id}: {e}")
            raise TranscriptFetchError(
                "Failed to fetch transcript. Please ensure the video has captions enabled."
            ) from e

        full_text = ' '.join(segment for segment in segments if segment)
        cleaned = clean_transcript(full_text)

        log_with_context("info", f"Transcript fetched: {len(cleaned)} characters")
        return cleaned

    def _fetch_segments(self, video_id: str) -> List[str]:
        """Blocking fetch of the caption snippets of the best transcript."""
        transcript_list = list(self.api.list(video_id))
        transcript = self._select_best_transcript(transcript_list, self.languages)
        if transcript is None:
            raise VideoNotFoundError(f"No transcripts listed for {video_id}")

        fetched = transcript.fetch()
        return [snippet.text for snippet in fetched]

    def _select_best_transcript(self, transcript_list: list, preferred_languages: List[str]) -> Optional[object]:
        """
        Select the best transcript from the available list.

        Order: manual in a preferred language, generated in a preferred
        language, first manual, first available.
        """
        if not transcript_list:
            return None

        for transcript in transcript_list:
            if not transcript.is_generated and transcript.language_code in preferred_languages:
                log_with_context("info", f"Found manual transcript in {transcript.language_code}")
                return transcript

        for transcript in transcript_list:
            if transcript.is_generated and transcript.language_code in preferred_languages:
                log_with_context("info", f"Found auto-generated transcript in {transcript.language_code}")
                return transcript

        for transcript in transcript_list:
            if not transcript.is_generated:
                log_with_context("info", f"Using first manual transcript in {transcript.language_code}")
                return transcript

        transcript = transcript_list[0]
        log_with_context("info", f"Using first available transcript in {transcript.language_code}")
        return transcript


# Global instance
transcript_fetcher = TranscriptFetcher(languages=config.transcript_languages)
