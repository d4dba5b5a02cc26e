"""
Text chunker to split long transcripts into bounded pieces for LLM processing.
"""
import logging
import math
from typing import List, Dict, Any
from dataclasses import dataclass

from app_logging import log_with_context

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150


@dataclass
class ChunkingConfig:
    """Configuration for transcript chunking."""
    max_chars: int = 8000
    language: str = "en"


@dataclass
class TextChunk:
    """A chunk of transcript text with metadata."""
    text: str
    chunk_index: int
    char_count: int
    token_count: int


def segment_transcript(transcript: str, max_length: int = 8000) -> List[str]:
    """
    Split text on whitespace into chunks of at most ``max_length`` characters.

    A single word longer than ``max_length`` becomes a chunk of its own.
    """
    chunks = []
    current: List[str] = []
    current_len = 0

    for word in transcript.split():
        added = len(word) if not current else len(word) + 1
        if current and current_len + added > max_length:
            chunks.append(" ".join(current))
            current = [word]
            current_len = len(word)
        else:
            current.append(word)
            current_len += added

    if current:
        chunks.append(" ".join(current))

    return chunks


def get_transcript_stats(transcript: str) -> Dict[str, Any]:
    """Word/character counts and an estimated reading time."""
    words = len(transcript.split())
    minutes = math.ceil(words / WORDS_PER_MINUTE)
    return {
        "words": words,
        "characters": len(transcript),
        "estimatedReadingTime": f"{minutes} min",
    }


class TranscriptChunker:
    """Chunks transcripts into manageable pieces for LLM processing."""

    def __init__(self, config: ChunkingConfig = None):
        """Initialize the transcript chunker."""
        self.config = config or ChunkingConfig()
        self.token_estimator = TokenEstimator()

    def chunk_text(self, text: str) -> List[TextChunk]:
        """
        Chunk transcript text into manageable pieces.

        Args:
            text: Cleaned transcript text

        Returns:
            List of text chunks, empty for blank input
        """
        if not text or not text.strip():
            log_with_context("warning", "Empty text provided for chunking")
            return []

        pieces = segment_transcript(text, self.config.max_chars)
        chunks = [
            TextChunk(
                text=piece,
                chunk_index=index,
                char_count=len(piece),
                token_count=self.token_estimator.estimate_tokens(piece, self.config.language),
            )
            for index, piece in enumerate(pieces)
        ]

        log_with_context("info", f"Created {len(chunks)} chunks from {len(text)} characters")
        return chunks

    def get_chunk_summary(self, chunks: List[TextChunk]) -> Dict[str, Any]:
        """Get summary information about chunks."""
        if not chunks:
            return {
                "total_chunks": 0,
                "total_tokens": 0,
                "total_chars": 0,
                "avg_tokens_per_chunk": 0,
                "avg_chars_per_chunk": 0,
            }

        total_tokens = sum(chunk.token_count for chunk in chunks)
        total_chars = sum(chunk.char_count for chunk in chunks)

        return {
            "total_chunks": len(chunks),
            "total_tokens": total_tokens,
            "total_chars": total_chars,
            "avg_tokens_per_chunk": total_tokens // len(chunks),
            "avg_chars_per_chunk": total_chars // len(chunks),
        }


class TokenEstimator:
    """Estimates token counts for different languages."""

    def __init__(self):
        """Initialize token estimator with language-specific rules."""
        # tokens ~ words * multiplier
        self.language_multipliers = {
            'en': 1.3,
            'es': 1.4,
            'fr': 1.4,
            'de': 1.5,
            'it': 1.4,
            'pt': 1.4,
            'ru': 1.6,
            'zh': 2.0,
            'ja': 2.0,
            'ko': 2.0,
        }

    def estimate_tokens(self, text: str, language: str = "en") -> int:
        """
        Estimate token count for text in a given language.

        Args:
            text: Text to estimate tokens for
            language: Language code

        Returns:
            Estimated token count
        """
        if not text:
            return 0

        words = len(text.split())
        multiplier = self.language_multipliers.get(language, 1.3)

        # Base overhead for punctuation and formatting
        return max(int(words * multiplier) + 10, 1)


# Global instances
default_chunker = TranscriptChunker()
