"""
FastAPI main application.
"""
import asyncio
import contextlib
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from rich.console import Console
from rich.panel import Panel

from config import config
from app_logging import setup_logging, set_request_id, log_with_context, redact_secrets
from api import router
from api.error_handlers import register_exception_handlers
from api.monitoring import SERVICE_VERSION
from api.rate_limit import RateLimiter
from services.cache import result_cache
from services.utils import validate_provider_config

# Set up logging
setup_logging(config.log_level)
logger = logging.getLogger(__name__)

RATE_LIMITED_PREFIX = "/api/"

rate_limiter = RateLimiter(
    max_requests=config.rate_limit_max_requests,
    window_ms=config.rate_limit_window_ms,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Video Learning Service")
    logger.info(f"Configuration loaded: {redact_secrets(config.model_dump())}")
    if not validate_provider_config(config.ai_model):
        logger.warning(f"No API key configured for model {config.ai_model}; processing requests will fail")

    sweeper = asyncio.create_task(result_cache.run_sweeper())

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    result_cache.clear()
    logger.info("Shutting down Video Learning Service")


# Create FastAPI app
app = FastAPI(
    title="Video Learning Service",
    description="Turns YouTube videos and transcripts into summaries, key points and quizzes",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

register_exception_handlers(app)

# Include API router
app.include_router(router)


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Reject clients exceeding the request budget for the current window."""
    if request.method == "OPTIONS" or not request.url.path.startswith(RATE_LIMITED_PREFIX):
        return await call_next(request)

    client = request.client.host if request.client else "unknown"
    decision = rate_limiter.hit(client)
    if not decision.allowed:
        log_with_context("warning", f"Rate limit exceeded for {client}")
        return JSONResponse(
            status_code=429,
            content={"success": False, "error": "Too many requests. Please try again later."},
            headers=decision.headers(),
        )

    response = await call_next(request)
    response.headers.update(decision.headers())
    return response


@app.middleware("http")
async def request_correlation_middleware(request: Request, call_next):
    """Middleware to add request correlation ID."""
    request_id = set_request_id(request.headers.get("X-Request-ID"))

    log_with_context("info", f"Request started: {request.method} {request.url.path}")
    response = await call_next(request)
    log_with_context("info", f"Request completed: {response.status_code}")

    response.headers["X-Request-ID"] = request_id
    return response


# Added last so it wraps the middleware above; rate-limit rejections carry CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "success": True,
        "message": "Video Learning Service",
        "version": SERVICE_VERSION,
        "endpoints": {
            "health": "/api/health",
            "processYouTube": "POST /api/process-youtube",
            "processTranscript": "POST /api/process-transcript",
            "docs": "/docs"
        }
    }


def print_banner() -> None:
    """Startup banner for interactive runs."""
    console = Console()
    console.print(Panel.fit(
        f"[bold]Video Learning Service[/bold]\n"
        f"URL: http://localhost:{config.port}\n"
        f"Environment: {config.environment}\n"
        f"AI Model: {config.ai_model}",
        border_style="green",
    ))
    if not validate_provider_config(config.ai_model):
        console.print(f"[yellow]WARNING: no API key found for {config.ai_model}. "
                      f"Add it to your .env file to continue.[/yellow]")


if __name__ == "__main__":
    import uvicorn
    print_banner()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.port,
        reload=not config.is_production,
        log_level=config.log_level.lower()
    )
