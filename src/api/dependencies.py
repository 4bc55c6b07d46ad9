"""FastAPI dependencies for authentication and shared resources."""

import secrets
from functools import lru_cache

from fastapi import Header, HTTPException, status

from core import config
from core.database import SQLiteEventStore


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not config.CALENDAR_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, config.CALENDAR_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


async def current_employee_id(
    x_employee_id: str | None = Header(None, alias="X-Employee-Id"),
) -> str | None:
    """Session user taken from the X-Employee-Id header (optional)."""
    return x_employee_id.strip() if x_employee_id and x_employee_id.strip() else None


@lru_cache
def get_store() -> SQLiteEventStore:
    """Shared event store for the application."""
    return SQLiteEventStore(config.DB_PATH)
