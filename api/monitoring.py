"""
Health and cache administration endpoints.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from config import config
from app_logging import log_with_context
from services.orchestrator import LearningOrchestrator
from services.utils import validate_provider_config
from api.learning import get_orchestrator
from api.security import require_admin

logger = logging.getLogger(__name__)
router = APIRouter(tags=["monitoring"])

SERVICE_VERSION = "1.0.0"


@router.get("/health")
@router.get("/api/health")
async def health_check(orchestrator: LearningOrchestrator = Depends(get_orchestrator)):
    """Service status with coarse configuration flags."""
    return {
        "status": "healthy",
        "service": "video-learning",
        "version": SERVICE_VERSION,
        "environment": config.environment,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "aiConfigured": validate_provider_config(config.ai_model),
        "model": config.ai_model,
        "cache": {
            "keys": orchestrator.cache.size(),
            "ttl": orchestrator.cache.ttl,
        },
    }


@router.get("/api/cache/stats")
async def cache_stats(orchestrator: LearningOrchestrator = Depends(get_orchestrator),
                      admin: dict = require_admin()):
    """Cache counters and live keys."""
    return {
        "success": True,
        "stats": orchestrator.cache.get_stats(),
        "keys": orchestrator.cache.keys(),
    }


@router.delete("/api/cache")
async def clear_cache(orchestrator: LearningOrchestrator = Depends(get_orchestrator),
                      admin: dict = require_admin()):
    """Drop every cached result."""
    orchestrator.cache.clear()
    return {"success": True}


@router.delete("/api/cache/{key}")
async def invalidate_cache_entry(key: str,
                                 orchestrator: LearningOrchestrator = Depends(get_orchestrator),
                                 admin: dict = require_admin()):
    """Drop one cached result by fingerprint."""
    deleted = orchestrator.cache.delete(key)
    log_with_context("info", f"Cache invalidation for {key}: {deleted} removed")
    return {"success": True, "deleted": deleted}
