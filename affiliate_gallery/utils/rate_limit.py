"""
Rate limiting utilities for API endpoints.
Uses slowapi to slow down password guessing and bulk writes.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from affiliate_gallery.config import settings


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting.
    Uses forwarded IP if behind proxy, otherwise remote address.

    Args:
        request: FastAPI request object

    Returns:
        str: Client identifier (IP address)
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in chain is the original client
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri="memory://",  # Use in-memory storage (for multiple instances, consider Redis)
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Like/dislike endpoints are intentionally absent: counters are not throttled server-side
RATE_LIMITS = {
    "login": "5/minute",
    "auth_check": "10/minute",
    "upload": "20/hour",
    "delete": "30/hour",
    "message": "10/hour",
}
