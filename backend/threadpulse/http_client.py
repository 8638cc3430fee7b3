"""
Async HTTP Client Configuration

Provides timeout, retry and pacing presets for each external service,
plus a factory for the per-run httpx.AsyncClient.
"""

import httpx
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .config import get_request_timeout


# Timeout configurations (in seconds)
class Timeouts:
    """Timeout presets for external services."""
    SEARCH = 10.0       # Google Custom Search
    REDDIT = 20.0       # Reddit .json thread endpoints
    OAUTH = 10.0        # Reddit OAuth token endpoint
    CONNECT = 5.0


# Retry configuration
class RetryConfig:
    """Retry settings for the full URL-variation walk."""
    MAX_RETRIES = 1
    INITIAL_BACKOFF = 3.0  # seconds
    MAX_BACKOFF = 10.0     # seconds


# Human-cadence pacing ranges (seconds)
class Pacing:
    """Jittered delays between outbound Reddit requests."""
    BEFORE_REQUEST = (0.5, 1.5)
    BETWEEN_VARIATIONS = (1.0, 2.0)
    BETWEEN_THREADS = (2.0, 4.0)


def get_timeout(service: str) -> httpx.Timeout:
    """Get timeout configuration for a service."""
    timeouts = {
        "search": Timeouts.SEARCH,
        "reddit": get_request_timeout(Timeouts.REDDIT),
        "oauth": Timeouts.OAUTH,
    }
    seconds = timeouts.get(service.lower(), 10.0)
    return httpx.Timeout(seconds, connect=Timeouts.CONNECT)


def backoff_delay(attempt: int) -> float:
    """Exponential backoff before retry *attempt* (1-based), capped."""
    if attempt <= 0:
        return 0.0
    return min(
        RetryConfig.INITIAL_BACKOFF * (2 ** (attempt - 1)),
        RetryConfig.MAX_BACKOFF,
    )


@asynccontextmanager
async def managed_client(
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* untouched, or open and close a fresh one for the run."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(Timeouts.REDDIT, connect=Timeouts.CONNECT),
        follow_redirects=True,
    ) as owned:
        yield owned
