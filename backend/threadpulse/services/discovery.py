"""Source Discovery.

Queries the Google Custom Search JSON API for Reddit threads matching a
free-text product query and returns at most ``MAX_SEARCH_RESULTS``
candidate links.

Rules
-----
- Fails soft: missing credentials, transport errors, non-2xx responses and
  undecodable bodies all yield ``[]``.
- Only links on the Reddit host survive.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import get_search_credentials
from ..constants import MAX_SEARCH_RESULTS, SEARCH_SITE_FILTER
from ..errors import ConfigurationError
from ..http_client import get_timeout
from ..schemas.post_schema import CandidateLink
from .retrieval import is_reddit_url

logger = logging.getLogger(__name__)

_GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"


def build_search_params(query: str, api_key: str, engine_id: str) -> Dict[str, Any]:
    """Request parameters scoped to the Reddit host."""
    return {
        "key": api_key,
        "cx": engine_id,
        "q": f"{query} {SEARCH_SITE_FILTER}",
        "num": str(MAX_SEARCH_RESULTS),
    }


def _parse_items(data: Any) -> List[CandidateLink]:
    if not isinstance(data, dict):
        return []
    items = data.get("items") or []
    if not isinstance(items, list):
        return []

    links: List[CandidateLink] = []
    for item in items[:MAX_SEARCH_RESULTS]:
        if not isinstance(item, dict):
            continue
        link = item.get("link")
        if not isinstance(link, str) or not is_reddit_url(link):
            continue
        links.append(CandidateLink(title=str(item.get("title") or ""), url=link))
    return links


async def search_reddit_links(
    query: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> List[CandidateLink]:
    """Search Google CSE for Reddit threads about *query*.

    Parameters
    ----------
    query:
        Free-text product name or question.
    client:
        Optional shared ``httpx.AsyncClient``; a short-lived one is opened
        when omitted.

    Returns
    -------
    list[CandidateLink]
        Up to five Reddit links, possibly empty.  Never raises.
    """
    try:
        api_key, engine_id = get_search_credentials()
    except ConfigurationError as exc:
        logger.warning("Discovery skipped: %s", exc)
        return []

    params = build_search_params(query, api_key, engine_id)
    logger.info("Searching Google CSE for query=%r", query)

    try:
        if client is None:
            async with httpx.AsyncClient() as owned:
                response = await owned.get(
                    _GOOGLE_CSE_URL, params=params, timeout=get_timeout("search")
                )
        else:
            response = await client.get(
                _GOOGLE_CSE_URL, params=params, timeout=get_timeout("search")
            )
    except httpx.HTTPError as exc:
        logger.error("Google CSE search failed for query=%r: %s", query, exc)
        return []

    if not response.is_success:
        logger.error(
            "Google CSE request failed: HTTP %d for query=%r",
            response.status_code,
            query,
        )
        return []

    try:
        data = response.json()
    except ValueError:
        logger.error("Google CSE returned a non-JSON body for query=%r", query)
        return []

    links = _parse_items(data)
    logger.info("Found %d Reddit links from Google CSE", len(links))
    return links
