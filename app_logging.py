"""
Logging configuration with request correlation.
"""
import logging
import sys
from typing import Any, Dict, Optional
from contextvars import ContextVar
import uuid

# Request id of the HTTP call currently being served
request_id_var: ContextVar[str] = ContextVar('request_id', default='-')

SECRET_MARKERS = ('api_key', 'password', 'secret', 'token')


class RequestCorrelationFilter(logging.Filter):
    """Attach the current request id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger to write correlated records to stdout."""
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(RequestCorrelationFilter())
    root_logger.addHandler(console_handler)

    # LiteLLM and httpx are chatty at INFO
    for noisy in ("LiteLLM", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set request ID for correlation."""
    if not request_id:
        request_id = uuid.uuid4().hex[:12]
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    """Get current request ID."""
    return request_id_var.get()


def log_with_context(level: str, message: str, **kwargs: Any) -> None:
    """Log message with request context."""
    logger = logging.getLogger("learning_service")
    getattr(logger, level.lower())(message, extra=kwargs)


def redact_secrets(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with credential-like values masked."""
    redacted = data.copy()

    for key, value in redacted.items():
        if any(marker in key.lower() for marker in SECRET_MARKERS):
            redacted[key] = '***REDACTED***' if value else value
        elif isinstance(value, dict):
            redacted[key] = redact_secrets(value)

    return redacted
