"""Content Retrieval.

Fetches the raw ``.json`` listing pair for a Reddit thread.  Reddit blocks
obvious automation, so every thread is tried through several equivalent URL
variations, each request carries a rotated browser User-Agent, and requests
are paced with jittered delays.  A retry wrapper repeats the whole
variation walk with exponential backoff.

Credential modes
----------------
- anonymous (default): public ``www``/``old``/``i`` mirrors.
- oauth: ``REDDIT_AUTH_MODE=oauth`` plus client credentials.  A bearer
  token is requested once per pipeline run and the ``oauth.reddit.com``
  variations are tried first; anonymous variations remain as fallback.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlsplit

import httpx

from ..config import (
    RedditOAuthCredentials,
    get_max_fetch_retries,
    get_outbound_user_agent,
)
from ..constants import BROWSER_HEADERS, TARGET_DOMAIN, USER_AGENTS
from ..errors import DecodeError, RetrievalError, TransportError
from ..http_client import Pacing, RetryConfig, backoff_delay, get_timeout, managed_client
from ..schemas.post_schema import CandidateLink

logger = logging.getLogger(__name__)

_OAUTH_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
_OAUTH_HOST = "oauth.reddit.com"

# Hosts that can be swapped for an alternate mirror
_SWAPPABLE_HOSTS = {"www.reddit.com", "reddit.com"}


# ===================================================================== #
#  Candidate filtering                                                    #
# ===================================================================== #

def is_reddit_url(url: str) -> bool:
    """True when *url* parses and its host is reddit.com or a subdomain."""
    if not url or not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not host:
        return False
    if host.startswith("www."):
        host = host[4:]
    return host == TARGET_DOMAIN or host.endswith("." + TARGET_DOMAIN)


def filter_reddit_links(links: Sequence[CandidateLink]) -> List[CandidateLink]:
    """Keep only candidates on the Reddit host, preserving order."""
    return [link for link in links if is_reddit_url(link.url)]


# ===================================================================== #
#  URL variations                                                         #
# ===================================================================== #

def _normalise_link(link: str) -> tuple[str, str, str]:
    """Return ``(scheme, host, path)`` with query, fragment and trailing slash dropped."""
    parts = urlsplit(link.strip())
    return parts.scheme or "https", (parts.hostname or "").lower(), parts.path.rstrip("/")


def _swap_host(host: str, mirror: str) -> str:
    return f"{mirror}.{TARGET_DOMAIN}" if host in _SWAPPABLE_HOSTS else host


def build_url_variations(link: str) -> List[str]:
    """Ordered, de-duplicated ``.json`` URLs for the same logical thread."""
    scheme, host, path = _normalise_link(link)
    base = f"{scheme}://{host}{path}"
    candidates = [
        f"{base}/.json",
        f"{scheme}://{_swap_host(host, 'old')}{path}/.json",
        f"{base}/.json?raw_json=1",
        f"{base}/.json?limit=100",
        f"{scheme}://{_swap_host(host, 'i')}{path}/.json",
    ]
    return list(dict.fromkeys(candidates))


def build_oauth_variations(link: str) -> List[str]:
    """``oauth.reddit.com`` endpoints for the thread path."""
    _, _, path = _normalise_link(link)
    return [
        f"https://{_OAUTH_HOST}{path}.json?raw_json=1",
        f"https://{_OAUTH_HOST}{path}.json",
    ]


# ===================================================================== #
#  Request identity & pacing                                              #
# ===================================================================== #

def pick_user_agent() -> str:
    return get_outbound_user_agent() or random.choice(USER_AGENTS)


def build_headers(access_token: Optional[str] = None) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers["User-Agent"] = pick_user_agent()
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def random_delay(bounds: tuple[float, float]) -> None:
    low, high = bounds
    await _sleep(random.uniform(low, high))


# ===================================================================== #
#  OAuth                                                                  #
# ===================================================================== #

async def fetch_reddit_access_token(
    client: httpx.AsyncClient,
    credentials: RedditOAuthCredentials,
) -> Optional[str]:
    """Client-credentials grant.  Returns None on any failure."""
    try:
        response = await client.post(
            _OAUTH_TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(credentials.client_id, credentials.client_secret),
            headers={"User-Agent": credentials.user_agent},
            timeout=get_timeout("oauth"),
        )
    except httpx.HTTPError as exc:
        logger.warning("Reddit OAuth token request failed: %s", exc)
        return None

    if not response.is_success:
        logger.warning("Reddit OAuth token request returned HTTP %d", response.status_code)
        return None

    try:
        token = response.json().get("access_token")
    except (ValueError, AttributeError):
        logger.warning("Reddit OAuth token response is not valid JSON")
        return None

    if not token:
        logger.warning("Reddit OAuth token response missing access_token")
        return None
    return str(token)


# ===================================================================== #
#  Fetching                                                               #
# ===================================================================== #

async def _request_json(
    client: httpx.AsyncClient,
    url: str,
    headers: Dict[str, str],
) -> Any:
    """GET *url* and decode the body as JSON whatever its content-type."""
    try:
        response = await client.get(
            url,
            headers=headers,
            timeout=get_timeout("reddit"),
            follow_redirects=True,
        )
    except httpx.TimeoutException as exc:
        raise TransportError(url, "Timed out") from exc
    except httpx.HTTPError as exc:
        raise TransportError(url, f"Transport error ({exc.__class__.__name__})") from exc

    if not response.is_success:
        raise TransportError(url, f"HTTP {response.status_code}", response.status_code)

    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(url) from exc


async def fetch_thread_json(
    link: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    access_token: Optional[str] = None,
) -> Any:
    """Walk the URL variations of *link* until one yields a JSON payload.

    Raises
    ------
    RetrievalError
        If every variation failed; ``attempts`` is the number tried.
    """
    variations = build_url_variations(link)
    if access_token:
        variations = build_oauth_variations(link) + variations

    async with managed_client(client) as http:
        for index, url in enumerate(variations):
            if index > 0:
                await random_delay(Pacing.BETWEEN_VARIATIONS)
            await random_delay(Pacing.BEFORE_REQUEST)

            token = access_token if urlsplit(url).hostname == _OAUTH_HOST else None
            try:
                data = await _request_json(http, url, build_headers(token))
            except (TransportError, DecodeError) as exc:
                logger.warning("%s, trying next variation", exc)
                continue

            logger.info("Fetched Reddit data from %s", url)
            return data

    logger.error("All Reddit URL variations failed for %s", link)
    raise RetrievalError(link, attempts=len(variations))


async def fetch_thread_json_with_retry(
    link: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    access_token: Optional[str] = None,
    max_retries: Optional[int] = None,
) -> Any:
    """``fetch_thread_json`` with exponential backoff between full walks."""
    retries = get_max_fetch_retries(RetryConfig.MAX_RETRIES) if max_retries is None else max_retries
    last_error: Optional[RetrievalError] = None

    for attempt in range(retries + 1):
        if attempt > 0:
            delay = backoff_delay(attempt)
            logger.info(
                "Retrying Reddit fetch (attempt %d) after %.1fs delay", attempt + 1, delay
            )
            await _sleep(delay)
        try:
            return await fetch_thread_json(link, client=client, access_token=access_token)
        except RetrievalError as exc:
            logger.warning("Reddit fetch attempt %d failed: %s", attempt + 1, exc)
            last_error = exc

    assert last_error is not None
    raise last_error
