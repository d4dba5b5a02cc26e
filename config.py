"""
Configuration management for the Video Learning service.
"""
import os
from typing import List, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ServiceConfig(BaseModel):
    """Service configuration model."""
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Deployment environment (development/production)")
    port: int = Field(default=8001, description="HTTP port when run as a script")

    # AI provider settings
    ai_model: str = Field(default="gemini/gemini-2.5-flash", description="LiteLLM model identifier")
    ai_temperature: float = Field(default=0.4, description="Generation temperature")
    ai_max_tokens: int = Field(default=4096, description="Token budget per generation request")
    request_timeout: int = Field(default=60, description="Provider request timeout in seconds")
    max_transcript_chars: int = Field(default=12000, description="Character budget for text sent to the model")

    # Provider API keys
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")

    # Cache settings
    cache_ttl: int = Field(default=3600, description="Result cache TTL in seconds")
    cache_check_period: int = Field(default=600, description="Interval between expired-entry sweeps in seconds")

    # HTTP boundary
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000, description="Rate limit window in milliseconds")
    rate_limit_max_requests: int = Field(default=100, description="Max requests per client per window")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    api_token: Optional[str] = Field(default=None, description="Bearer token for administrative endpoints")

    transcript_languages: List[str] = Field(default_factory=lambda: ["en"], description="Preferred caption languages")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config() -> ServiceConfig:
    """Load configuration from environment variables."""
    return ServiceConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        environment=os.getenv("ENVIRONMENT", "development"),
        port=int(os.getenv("PORT", "8001")),
        ai_model=os.getenv("AI_MODEL", "gemini/gemini-2.5-flash"),
        ai_temperature=float(os.getenv("AI_TEMPERATURE", "0.4")),
        ai_max_tokens=int(os.getenv("AI_MAX_TOKENS", "4096")),
        request_timeout=int(os.getenv("REQUEST_TIMEOUT", "60")),
        max_transcript_chars=int(os.getenv("MAX_TRANSCRIPT_CHARS", "12000")),
        gemini_api_key=os.getenv("GEMINI_API_KEY"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        cache_ttl=int(os.getenv("CACHE_TTL", "3600")),
        cache_check_period=int(os.getenv("CACHE_CHECK_PERIOD", "600")),
        rate_limit_window_ms=int(os.getenv("RATE_LIMIT_WINDOW_MS", str(15 * 60 * 1000))),
        rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100")),
        cors_origins=_split_list(os.getenv("CORS_ORIGINS", "*")),
        api_token=os.getenv("API_TOKEN") or None,
        transcript_languages=_split_list(os.getenv("TRANSCRIPT_LANGUAGES", "en")),
    )


# Global configuration instance
config = load_config()
