"""
Shared fixtures and test doubles.
"""
import json
from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from models import EnvelopeMetadata, QuizQuestion, ResultEnvelope
from services.ai_service import AIConfig, AIService
from services.cache import ResultCache

SAMPLE_TRANSCRIPT = (
    "Photosynthesis is the process plants use to turn light into chemical energy. "
    "Chlorophyll in the chloroplasts absorbs mostly red and blue light. "
    "The light reactions split water and release oxygen, while the Calvin cycle "
    "fixes carbon dioxide into sugars that the plant stores as starch."
)

SAMPLE_QUIZ = [
    {
        "question": f"Sample question {i}?",
        "options": ["Light", "Water", "Oxygen", "Sugar"],
        "correctAnswer": "B",
        "explanation": f"Explanation {i}",
    }
    for i in range(1, 11)
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_llm_response(content: Optional[str]) -> MagicMock:
    """Object shaped like a LiteLLM ModelResponse."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def fake_acompletion(summary: str = "Plants turn light into sugar.\n\nThey release oxygen.",
                     key_points: str = "- Chlorophyll absorbs light\n- Water is split\n- Oxygen is released",
                     quiz: str = json.dumps(SAMPLE_QUIZ),
                     title: str = "How Photosynthesis Works"):
    """Stand-in for ``litellm.acompletion`` that answers by prompt type."""
    async def _acompletion(**kwargs):
        prompt = kwargs["messages"][0]["content"]
        if "exam question creator" in prompt:
            return make_llm_response(quiz)
        if "key learning points" in prompt:
            return make_llm_response(key_points)
        if "Create a clear, concise title" in prompt:
            return make_llm_response(title)
        return make_llm_response(summary)
    return _acompletion


def make_envelope(title: str = "Cached Lesson", video_id: Optional[str] = None,
                  quiz: List[QuizQuestion] = None) -> ResultEnvelope:
    quiz = quiz or [
        QuizQuestion(id=i, question=f"Q{i}?", options=["a", "b", "c", "d"],
                     correct_answer="A", explanation="because")
        for i in range(1, 11)
    ]
    return ResultEnvelope(
        video_id=video_id,
        video_url=f"https://www.youtube.com/watch?v={video_id}" if video_id else None,
        title=title,
        summary="A cached summary.",
        key_points=["one", "two"],
        quiz=quiz,
        metadata=EnvelopeMetadata(transcript_length=300, processing_time=12,
                                  generated_at="2026-01-01T00:00:00Z"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    result_cache = ResultCache(ttl_seconds=3600, check_period=600, clock=clock)
    yield result_cache
    result_cache.clear()


@pytest.fixture
def ai_service():
    return AIService(AIConfig(model="gemini/gemini-2.5-flash", api_key="test-key"))
