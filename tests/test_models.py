"""
Tests for request validation and result models.
"""
import pytest
from pydantic import ValidationError

from models import (
    ProcessVideoRequest, ProcessTranscriptRequest, QuizQuestion, ProcessResponse,
    ProviderQuotaError, InvalidInputError, ConfigurationError, TranscriptsDisabledError,
)
from conftest import make_envelope


class TestProcessVideoRequest:

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "http://youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        "youtube.com/shorts/dQw4w9WgXcQ",
    ])
    def test_accepts_youtube_urls(self, url):
        assert ProcessVideoRequest(videoUrl=url).video_url == url

    def test_strips_whitespace(self):
        request = ProcessVideoRequest(videoUrl="  https://youtu.be/dQw4w9WgXcQ \n")
        assert request.video_url == "https://youtu.be/dQw4w9WgXcQ"

    @pytest.mark.parametrize("url,message", [
        ("", "Video URL is required"),
        (None, "Video URL is required"),
        (123, "Video URL must be a string"),
        ("https://vimeo.com/1234", "Invalid YouTube URL format"),
        ("not a url", "Invalid YouTube URL format"),
    ])
    def test_rejects(self, url, message):
        with pytest.raises(ValidationError) as exc_info:
            ProcessVideoRequest(videoUrl=url)
        assert message in str(exc_info.value)


class TestProcessTranscriptRequest:

    def test_length_bounds(self):
        assert ProcessTranscriptRequest(transcript="x" * 100).transcript == "x" * 100
        assert len(ProcessTranscriptRequest(transcript="x" * 50000).transcript) == 50000

        with pytest.raises(ValidationError, match="too short"):
            ProcessTranscriptRequest(transcript="x" * 99)
        with pytest.raises(ValidationError, match="too long"):
            ProcessTranscriptRequest(transcript="x" * 50001)

    def test_non_string(self):
        with pytest.raises(ValidationError, match="Transcript must be a string"):
            ProcessTranscriptRequest(transcript=["x"] * 200)


class TestQuizQuestion:

    def _question(self, **overrides):
        fields = dict(id=1, question="Q?", options=["a", "b", "c", "d"],
                      correct_answer="C", explanation="because")
        fields.update(overrides)
        return QuizQuestion(**fields)

    def test_serializes_camel_case(self):
        dumped = self._question().model_dump(by_alias=True)
        assert dumped["correctAnswer"] == "C"

    @pytest.mark.parametrize("overrides", [
        {"options": ["a", "b", "c"]},
        {"options": ["a", "b", "c", "d", "e"]},
        {"correct_answer": "E"},
        {"correct_answer": "a"},
        {"id": 0},
    ])
    def test_rejects_invalid_shape(self, overrides):
        with pytest.raises(ValidationError):
            self._question(**overrides)


class TestResultEnvelope:

    def test_is_immutable(self):
        envelope = make_envelope()
        with pytest.raises(ValidationError):
            envelope.title = "changed"

    def test_response_serialization(self):
        envelope = make_envelope(video_id="dQw4w9WgXcQ")
        dumped = ProcessResponse(data=envelope, cached=True).model_dump(by_alias=True)

        assert dumped["success"] is True
        assert dumped["cached"] is True
        assert dumped["data"]["videoId"] == "dQw4w9WgXcQ"
        assert dumped["data"]["metadata"]["generatedAt"] == "2026-01-01T00:00:00Z"
        assert len(dumped["data"]["quiz"]) == 10


class TestServiceErrors:

    def test_client_messages(self):
        assert ProviderQuotaError("upstream said 429").client_message() == \
            "API quota exceeded. Please try again later."
        assert ConfigurationError("GEMINI_API_KEY missing").client_message() == \
            "Server configuration error. Please contact support."
        assert InvalidInputError("Transcript is required").client_message() == "Transcript is required"

    def test_status_codes(self):
        assert InvalidInputError("x").status_code == 400
        assert TranscriptsDisabledError("x").status_code == 404
        assert ProviderQuotaError("x").status_code == 429
        assert ConfigurationError("x").status_code == 500
