"""
Shared utilities for common functionality across services.
"""
import logging
import re
import time
from typing import Optional

from app_logging import log_with_context
from config import ServiceConfig, config

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERNS = [
    re.compile(r'(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/(?:embed|shorts|live|v)/)([a-zA-Z0-9_-]{11})'),
    re.compile(r'^([a-zA-Z0-9_-]{11})$'),
]

FINGERPRINT_SAMPLE_CHARS = 1000
TRANSCRIPT_KEY_PREFIX = "transcript_"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract video ID from YouTube URL.

    Accepts watch, short-link, embed, shorts and live URLs as well as a
    bare 11-character ID.

    Args:
        url: YouTube video URL or ID

    Returns:
        Video ID or None if extraction fails
    """
    if not url or not isinstance(url, str):
        return None

    candidate = url.strip()
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(candidate)
        if match:
            return match.group(1)

    log_with_context("debug", f"No video ID found in {candidate!r}")
    return None


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def transcript_hash(text: str) -> str:
    """
    Non-cryptographic 32-bit rolling hash of the first 1000 characters.

    Collisions are possible and accepted: they can only produce a wrong
    cache hit.
    """
    value = 0
    for char in text[:FINGERPRINT_SAMPLE_CHARS]:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))


def transcript_fingerprint(text: str) -> str:
    """Cache key for pasted transcript text."""
    return f"{TRANSCRIPT_KEY_PREFIX}{transcript_hash(text)}"


def validate_provider_config(model: str, service_config: ServiceConfig = config) -> bool:
    """
    Validate that the provider behind ``model`` has a credential.

    Args:
        model: LiteLLM model string (e.g., "gemini/gemini-2.5-flash")

    Returns:
        True if provider is properly configured, False otherwise
    """
    return provider_api_key(model, service_config) is not None


def provider_api_key(model: str, service_config: ServiceConfig = config) -> Optional[str]:
    """Credential configured for the provider prefix of ``model``."""
    if model.startswith("gemini/"):
        return service_config.gemini_api_key
    elif model.startswith("openai/") or model.startswith("gpt-"):
        return service_config.openai_api_key
    elif model.startswith("anthropic/") or model.startswith("claude-"):
        return service_config.anthropic_api_key
    return None


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            if exc_type is None:
                log_with_context("info", f"{self.operation_name} took {self.duration:.2f}s")

    @property
    def elapsed_ms(self) -> int:
        """Milliseconds since entering, frozen once the block exits."""
        if self.start_time is None:
            return 0
        if self.duration is not None:
            return int(self.duration * 1000)
        return int((time.perf_counter() - self.start_time) * 1000)
