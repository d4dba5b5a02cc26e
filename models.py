"""
Pydantic models for request/response schemas and service errors.
"""
import re
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_TRANSCRIPT_CHARS = 100
MAX_TRANSCRIPT_CHARS = 50000
QUIZ_LENGTH = 10
MAX_KEY_POINTS = 10
ANSWER_LABELS = ("A", "B", "C", "D")

YOUTUBE_URL_PATTERN = re.compile(r'^(https?://)?(www\.|m\.)?(youtube\.com|youtu\.be)/.+')


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ProcessVideoRequest(CamelModel):
    """Request body for processing a YouTube video."""
    video_url: str = Field(..., description="YouTube video URL")

    @field_validator("video_url", mode="before")
    @classmethod
    def validate_video_url(cls, value):
        if value is None or value == "":
            raise ValueError("Video URL is required")
        if not isinstance(value, str):
            raise ValueError("Video URL must be a string")
        value = value.strip()
        if not YOUTUBE_URL_PATTERN.match(value):
            raise ValueError("Invalid YouTube URL format. Please provide a valid YouTube video link.")
        return value


class ProcessTranscriptRequest(CamelModel):
    """Request body for processing pasted transcript text."""
    transcript: str = Field(..., description="Raw transcript text")

    @field_validator("transcript", mode="before")
    @classmethod
    def validate_transcript(cls, value):
        if value is None or value == "":
            raise ValueError("Transcript is required")
        if not isinstance(value, str):
            raise ValueError("Transcript must be a string")
        if len(value.strip()) < MIN_TRANSCRIPT_CHARS:
            raise ValueError(
                f"Transcript is too short. Please provide at least {MIN_TRANSCRIPT_CHARS} characters of content."
            )
        if len(value) > MAX_TRANSCRIPT_CHARS:
            raise ValueError(f"Transcript is too long. Please limit to {MAX_TRANSCRIPT_CHARS:,} characters.")
        return value


# ---------------------------------------------------------------------------
# Learning material
# ---------------------------------------------------------------------------

class QuizQuestion(CamelModel):
    """A single multiple-choice question."""
    id: int = Field(..., ge=1, description="1-based position in the quiz")
    question: str = Field(..., description="Question text")
    options: List[str] = Field(..., min_length=4, max_length=4, description="Answer options A-D")
    correct_answer: str = Field(..., pattern=r"^[ABCD]$", description="Label of the correct option")
    explanation: str = Field(..., description="Why the correct option is correct")


class LearningBundle(CamelModel):
    """AI-derived learning material for one transcript."""
    title: str = Field(..., description="Short title for the content")
    summary: str = Field(..., description="2-3 paragraph summary")
    key_points: List[str] = Field(default_factory=list, description="Key learning points")
    quiz: List[QuizQuestion] = Field(..., description="Exactly ten quiz questions")


class EnvelopeMetadata(CamelModel):
    """Processing metadata attached to every result."""
    transcript_length: int = Field(..., description="Transcript length in characters")
    processing_time: int = Field(..., description="Processing duration in milliseconds")
    generated_at: str = Field(..., description="ISO-8601 generation timestamp")


class ResultEnvelope(CamelModel):
    """Cached, immutable processing result."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    video_id: Optional[str] = Field(default=None, description="YouTube video ID")
    video_url: Optional[str] = Field(default=None, description="Original video URL")
    title: str = Field(..., description="Content title")
    summary: str = Field(..., description="Summary text")
    key_points: List[str] = Field(..., description="Key learning points")
    quiz: List[QuizQuestion] = Field(..., description="Quiz questions")
    metadata: EnvelopeMetadata = Field(..., description="Processing metadata")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ProcessResponse(CamelModel):
    """Successful processing response."""
    success: bool = Field(default=True)
    data: ResultEnvelope
    cached: bool = Field(..., description="Whether the result came from the cache")


class ErrorResponse(CamelModel):
    """Error response returned by every endpoint."""
    success: bool = Field(default=False)
    error: str = Field(..., description="Human-readable error message")
    details: Optional[str] = Field(default=None, description="Raw failure details (non-production only)")
    stack: Optional[str] = Field(default=None, description="Stack trace (non-production only)")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LearningServiceError(Exception):
    """Base class for classified service failures."""
    kind = "internal"
    status_code = 500
    public_message: Optional[str] = "An unexpected error occurred. Please try again."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def client_message(self) -> str:
        """Message safe to show to API clients."""
        return self.public_message or self.message


class InvalidInputError(LearningServiceError):
    """Malformed or missing input."""
    kind = "validation"
    status_code = 400
    public_message = None


class TranscriptNotFoundError(LearningServiceError):
    """No transcript could be obtained for a video."""
    kind = "not_found"
    status_code = 404
    public_message = None


class TranscriptsDisabledError(TranscriptNotFoundError):
    """The video owner disabled captions."""


class VideoNotFoundError(TranscriptNotFoundError):
    """The video or its transcript does not exist."""


class TranscriptFetchError(TranscriptNotFoundError):
    """Generic transcript provider failure."""


class ProviderQuotaError(LearningServiceError):
    """Upstream model rate limit or quota exceeded."""
    kind = "provider_quota"
    status_code = 429
    public_message = "API quota exceeded. Please try again later."


class ProviderUnavailableError(LearningServiceError):
    """Upstream model misconfigured or unreachable."""
    kind = "provider_unavailable"
    status_code = 503
    public_message = None


class ConfigurationError(LearningServiceError):
    """Missing or invalid credential."""
    kind = "configuration"
    status_code = 500
    public_message = "Server configuration error. Please contact support."


class GenerationError(LearningServiceError):
    """Unclassified failure while generating learning material."""


class MalformedOutputError(LearningServiceError):
    """Model output could not be normalised into the expected shape."""
