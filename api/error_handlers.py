"""
Boundary error handling: classify failures into HTTP statuses and public messages.
"""
import logging
import traceback
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import config
from models import LearningServiceError
from app_logging import get_request_id, log_with_context

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."

_FIELD_LABELS = {
    "videoUrl": "Video URL",
    "video_url": "Video URL",
    "transcript": "Transcript",
}


def error_payload(message: str, exc: Optional[BaseException] = None) -> Dict[str, Any]:
    """``{success: false, error}`` plus raw details outside production."""
    payload: Dict[str, Any] = {"success": False, "error": message}
    if exc is not None and not config.is_production:
        payload["details"] = str(exc)
        payload["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return payload


def validation_message(exc: RequestValidationError) -> str:
    """First validation problem phrased for API clients."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    location = [part for part in error.get("loc", ()) if part != "body"]
    field = str(location[-1]) if location else None

    if error.get("type") == "missing" and field:
        return f"{_FIELD_LABELS.get(field, field)} is required"
    if error.get("type") in ("json_invalid", "model_attributes_type", "dict_type"):
        return "Request body must be a JSON object"

    original = (error.get("ctx") or {}).get("error")
    if original is not None:
        return str(original)
    return error.get("msg", "Invalid request")


async def service_error_handler(request: Request, exc: LearningServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} error on {request.url.path}: {exc.message}", exc_info=exc)
    else:
        log_with_context("warning", f"{exc.kind} error on {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.client_message(), exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = validation_message(exc)
    log_with_context("warning", f"Validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "error": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception [{get_request_id()}]: {exc}", exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_payload(GENERIC_MESSAGE, exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the boundary handlers on ``app``."""
    app.add_exception_handler(LearningServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
