"""
AI generation service using LiteLLM to build summaries, key points and quizzes.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import litellm

from models import (
    LearningBundle, QuizQuestion, ConfigurationError, GenerationError,
    LearningServiceError, MalformedOutputError, ProviderQuotaError,
    ProviderUnavailableError, ANSWER_LABELS, MAX_KEY_POINTS, QUIZ_LENGTH,
)
from app_logging import log_with_context
from config import ServiceConfig, config
from .json_extractor import extract_json
from .transcript_chunker import TokenEstimator
from .utils import provider_api_key

logger = logging.getLogger(__name__)

OMISSION_MARKER = "\n\n[... middle section omitted for brevity ...]\n\n"
TITLE_SNIPPET_CHARS = 500
DEFAULT_TITLE = "Educational Video"
_BULLET_LINE = re.compile(r"^[-•*]\s+(.*)$")
PLACEHOLDER_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]
DEFAULT_EXPLANATION = "Explanation based on transcript content"


@dataclass
class AIConfig:
    """Configuration for the AI generation service."""
    model: str = "gemini/gemini-2.5-flash"
    temperature: float = 0.4
    max_tokens: int = 4096
    timeout: int = 60
    max_transcript_chars: int = 12000
    api_key: Optional[str] = None

    @classmethod
    def from_service_config(cls, service_config: ServiceConfig) -> "AIConfig":
        return cls(
            model=service_config.ai_model,
            temperature=service_config.ai_temperature,
            max_tokens=service_config.ai_max_tokens,
            timeout=service_config.request_timeout,
            max_transcript_chars=service_config.max_transcript_chars,
            api_key=provider_api_key(service_config.ai_model, service_config),
        )


def truncate_transcript(transcript: str, max_chars: int = 12000) -> str:
    """
    Keep the beginning and the end of an over-long transcript.

    Equal halves of ``max_chars`` are kept and the cut is marked so the
    model knows content was elided.
    """
    if len(transcript) <= max_chars:
        return transcript

    half = max_chars // 2
    return f"{transcript[:half]}{OMISSION_MARKER}{transcript[len(transcript) - half:]}"


def parse_key_points(content: str) -> List[str]:
    """Bulleted lines of ``content``, the single leading marker stripped, at most ten."""
    points = []
    for line in content.splitlines():
        match = _BULLET_LINE.match(line.strip())
        if match and match.group(1).strip():
            points.append(match.group(1).strip())
    return points[:MAX_KEY_POINTS]


_BARE_LABEL = re.compile(r'^([A-Da-d])[).:]?(?:\s|$)')
_PREFIXED_LABEL = re.compile(r'^(?:answer|option)\s*[:\-]?\s*([A-D])\b', re.IGNORECASE)


def _normalize_answer(value: Any, options: List[str]) -> str:
    """Answer label from a bare label, an "Answer: X" form, or the option text itself."""
    if isinstance(value, bool):
        return "A"
    if isinstance(value, int) and 0 <= value < len(ANSWER_LABELS):
        return ANSWER_LABELS[value]
    if not isinstance(value, str):
        return "A"

    text = value.strip()
    match = _BARE_LABEL.match(text) or _PREFIXED_LABEL.match(text)
    if match:
        return match.group(1).upper()

    lowered = text.lower()
    for index, option in enumerate(options):
        if lowered and option.strip().lower() == lowered:
            return ANSWER_LABELS[index]
    return "A"


def _placeholder_question(index: int) -> QuizQuestion:
    return QuizQuestion(
        id=index,
        question="What is the main topic discussed?",
        options=["Topic A", "Topic B", "Topic C", "Topic D"],
        correct_answer="A",
        explanation="Based on transcript analysis",
    )


def normalize_quiz(raw: Any) -> List[QuizQuestion]:
    """
    Coerce parsed model output into exactly ten well-formed questions.

    Raises:
        MalformedOutputError: if ``raw`` holds no question list at all
    """
    if isinstance(raw, dict):
        raw = raw.get("quiz", raw.get("questions"))
    if not isinstance(raw, list):
        raise MalformedOutputError("Invalid quiz format")

    quiz = []
    for index, item in enumerate(raw[:QUIZ_LENGTH], start=1):
        item = item if isinstance(item, dict) else {}
        options = item.get("options")
        if isinstance(options, list) and len(options) == 4:
            options = [str(option) for option in options]
        else:
            options = list(PLACEHOLDER_OPTIONS)

        quiz.append(QuizQuestion(
            id=index,
            question=str(item.get("question") or f"Question {index}"),
            options=options,
            correct_answer=_normalize_answer(item.get("correctAnswer", item.get("correct_answer")), options),
            explanation=str(item.get("explanation") or DEFAULT_EXPLANATION),
        ))

    while len(quiz) < QUIZ_LENGTH:
        quiz.append(_placeholder_question(len(quiz) + 1))

    return quiz


def classify_provider_error(error: Exception) -> LearningServiceError:
    """Map a LiteLLM/provider exception onto the service error kinds."""
    if isinstance(error, LearningServiceError):
        return error
    if isinstance(error, litellm.RateLimitError):
        return ProviderQuotaError("API quota exceeded. Please try again later or upgrade your API plan.")
    if isinstance(error, litellm.AuthenticationError):
        return ConfigurationError("Invalid API key. Please check your configuration.")
    if isinstance(error, litellm.NotFoundError):
        return ProviderUnavailableError("AI model not available. Please check your API configuration.")
    if isinstance(error, (litellm.ServiceUnavailableError, litellm.APIConnectionError,
                          litellm.Timeout, litellm.InternalServerError)):
        return ProviderUnavailableError("AI service is temporarily not available. Please try again later.")

    message = str(error)
    lowered = message.lower()
    if "429" in message or "quota" in lowered:
        return ProviderQuotaError("API quota exceeded. Please try again later or upgrade your API plan.")
    if "404" in message or "not found" in lowered:
        return ProviderUnavailableError("AI model not available. Please check your API configuration.")
    if "api key" in lowered:
        return ConfigurationError("Invalid API key. Please check your configuration.")
    return GenerationError(f"Failed to generate learning materials: {message}")


class AIService:
    """Service for generating learning material with an LLM provider."""

    def __init__(self, ai_config: AIConfig = None):
        """Initialize the AI service."""
        self.config = ai_config or AIConfig()
        self.prompt_templates = PromptTemplates()
        self.token_estimator = TokenEstimator()

    async def process_transcript(self, transcript: str, source_id: Optional[str] = None) -> LearningBundle:
        """
        Generate title, summary, key points and quiz for a transcript.

        The four requests run concurrently. The first failure propagates;
        the remaining requests are left to finish and their results are
        dropped. A failed title falls back to a default instead.

        Args:
            transcript: Cleaned transcript text
            source_id: Video ID or fingerprint, used for logging only

        Returns:
            The generated learning bundle
        """
        self._ensure_configured()

        text = truncate_transcript(transcript, self.config.max_transcript_chars)
        log_with_context(
            "info",
            f"Generating learning materials for {source_id or 'pasted transcript'} "
            f"({len(text)} chars, ~{self.token_estimator.estimate_tokens(text)} tokens)"
        )

        try:
            summary, key_points, quiz, title = await asyncio.gather(
                self.generate_summary(text),
                self.generate_key_points(text),
                self.generate_quiz(text),
                self.extract_title(text),
            )
        except LearningServiceError as e:
            log_with_context("error", f"AI processing error ({e.kind}): {e.message}")
            raise
        except Exception as e:
            error = classify_provider_error(e)
            log_with_context("error", f"AI processing error ({error.kind}): {error.message}")
            raise error from e

        return LearningBundle(title=title, summary=summary, key_points=key_points, quiz=quiz)

    async def generate_summary(self, transcript: str) -> str:
        """Generate a 2-3 paragraph summary."""
        content = await self._complete(self.prompt_templates.summary_prompt(transcript))
        if not content:
            raise MalformedOutputError("Model returned an empty summary")
        return content

    async def generate_key_points(self, transcript: str) -> List[str]:
        """Extract up to ten key learning points."""
        content = await self._complete(self.prompt_templates.key_points_prompt(transcript))
        points = parse_key_points(content)
        if len(points) < 6:
            log_with_context("warning", f"Model returned only {len(points)} key points")
        return points

    async def generate_quiz(self, transcript: str) -> List[QuizQuestion]:
        """Generate exactly ten multiple-choice questions."""
        content = await self._complete(self.prompt_templates.quiz_prompt(transcript))
        return normalize_quiz(extract_json(content))

    async def extract_title(self, transcript: str) -> str:
        """Short title from the opening of the transcript."""
        snippet = transcript[:TITLE_SNIPPET_CHARS]
        try:
            content = await self._complete(self.prompt_templates.title_prompt(snippet))
        except (ProviderQuotaError, ProviderUnavailableError, GenerationError) as e:
            log_with_context("warning", f"Error extracting title: {e}")
            return DEFAULT_TITLE

        title = content.strip().strip('"\'').strip()
        return title or DEFAULT_TITLE

    def _ensure_configured(self) -> None:
        if not self.config.api_key:
            raise ConfigurationError(f"API key for model '{self.config.model}' is not set in environment variables")

    async def _complete(self, prompt: str) -> str:
        """Single chat completion; provider errors are classified, never retried."""
        try:
            response = await litellm.acompletion(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                timeout=self.config.timeout,
                api_key=self.config.api_key,
            )
        except Exception as e:
            log_with_context("warning", f"LLM request failed: {e}")
            raise classify_provider_error(e) from e

        if not response or not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


class PromptTemplates:
    """Prompt templates for each generated artifact."""

    def summary_prompt(self, transcript: str) -> str:
        return f"""You are an expert educational content summarizer.

TRANSCRIPT:
{transcript}

TASK:
Create a concise, exam-oriented summary of this educational content.

REQUIREMENTS:
- Write 2-3 clear paragraphs
- Use simple, student-friendly language
- Focus on main concepts and key takeaways
- Make it suitable for quick revision
- Stay factual - only use information from the transcript
- No external information or assumptions

OUTPUT FORMAT:
Plain text summary, well-structured paragraphs."""

    def key_points_prompt(self, transcript: str) -> str:
        return f"""You are an expert at extracting key learning points from educational content.

TRANSCRIPT:
{transcript}

TASK:
Extract 6-10 key learning points from this content.

REQUIREMENTS:
- Each point should be clear and concise (1-2 sentences max)
- Focus on important concepts, facts, and takeaways
- Only include information from the transcript
- Ensure points are distinct (no repetition)

OUTPUT FORMAT:
Return ONLY the bullet points, one per line, without numbers or extra formatting.
Example:
- Point one here
- Point two here
- Point three here"""

    def quiz_prompt(self, transcript: str) -> str:
        return f"""You are an expert exam question creator for educational content.

TRANSCRIPT:
{transcript}

TASK:
Create EXACTLY {QUIZ_LENGTH} multiple-choice quiz questions based STRICTLY on the transcript content.

REQUIREMENTS:
- Generate EXACTLY {QUIZ_LENGTH} questions
- Base ALL questions on facts from the transcript only
- Each question must have 4 options (A, B, C, D) and ONE correct answer
- Include a brief explanation for the correct answer
- Questions should test understanding, not just memorization
- Progressive difficulty, no repetitive questions

OUTPUT FORMAT (STRICT JSON):
[
  {{
    "question": "Question text here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": "A",
    "explanation": "Brief explanation why this is correct"
  }}
]

Return ONLY the JSON array, no other text."""

    def title_prompt(self, snippet: str) -> str:
        return (
            "Create a clear, concise title (5-8 words) for this educational content:\n\n"
            f"{snippet}\n\nReturn only the title, nothing else."
        )


# Global instance
default_ai_service = AIService(AIConfig.from_service_config(config))
