"""
Security utilities for administrative endpoints.
"""
import logging
import secrets
from typing import Optional
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from config import config
from app_logging import log_with_context

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security_scheme = HTTPBearer(
    scheme_name="API Token",
    description="Token configured through API_TOKEN",
    auto_error=False
)


def verify_api_token(token: Optional[str]) -> bool:
    """
    Verify the provided token against the configured static token.

    Args:
        token: The token to verify

    Returns:
        bool: True if token is valid, False otherwise
    """
    if not config.api_token:
        return True

    if not token:
        return False

    return secrets.compare_digest(token, config.api_token)


async def get_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)):
    """
    FastAPI dependency guarding cache administration.

    Without a configured token access is open outside production and
    refused in production.

    Raises:
        HTTPException: If authentication fails
    """
    if not config.api_token:
        if config.is_production:
            log_with_context("warning", "Admin endpoint called but API_TOKEN is not configured")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Administrative endpoints are disabled",
            )
        return {"authenticated": True, "token_configured": False}

    if not credentials:
        log_with_context("warning", "Authentication required but no token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not verify_api_token(credentials.credentials):
        log_with_context("warning", "Invalid API token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"authenticated": True, "token_configured": True}


def require_admin():
    """Dependency marker for admin-only endpoints."""
    return Depends(get_admin)
