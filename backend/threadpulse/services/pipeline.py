"""Discovery → Retrieval → Extraction pipeline entry points.

``fetch_reddit_posts`` is the function the chat tool layer calls.  It
NEVER raises and ALWAYS returns at least one ``CanonicalPost``; when
nothing usable was found it returns a placeholder record that callers
must treat as "no data", not as content.

Candidates are retrieved strictly one after another, each behind its own
jittered delay, to keep a human-like request cadence.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx

from ..config import get_reddit_oauth_credentials, has_search_credentials
from ..constants import (
    CONFIGURATION_ERROR_TITLE,
    NO_POSTS_FOUND,
    PIPELINE_ERROR_TITLE,
)
from ..errors import RetrievalError
from ..http_client import Pacing, managed_client
from ..schemas.post_schema import CandidateLink, CanonicalPost
from ..timing import StepTimer
from .discovery import search_reddit_links
from .extraction import extract_reddit_core
from .retrieval import (
    fetch_reddit_access_token,
    fetch_thread_json_with_retry,
    filter_reddit_links,
    random_delay,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
#  Placeholders                                                        #
# ------------------------------------------------------------------ #

def no_posts_placeholder() -> CanonicalPost:
    return CanonicalPost.placeholder(title=NO_POSTS_FOUND, post=NO_POSTS_FOUND, comments=[NO_POSTS_FOUND])


def configuration_error_placeholder() -> CanonicalPost:
    return CanonicalPost.placeholder(
        title=CONFIGURATION_ERROR_TITLE,
        post=(
            "Missing Google API credentials. Please check GOOGLE_API_KEY and "
            "GOOGLE_CSE_ID environment variables."
        ),
        comments=[
            "Please configure Google Custom Search Engine credentials in your deployment settings."
        ],
    )


def pipeline_error_placeholder(query: str, exc: BaseException) -> CanonicalPost:
    return CanonicalPost.placeholder(
        title=PIPELINE_ERROR_TITLE,
        post=(
            f'Failed to fetch Reddit posts for "{query}". Please try again or '
            "check the deployment logs for more details."
        ),
        comments=[f"Error: {exc}"],
    )


def is_placeholder(post: CanonicalPost) -> bool:
    """True for the sentinel records returned instead of real threads."""
    return post.is_placeholder


# ------------------------------------------------------------------ #
#  Stages                                                              #
# ------------------------------------------------------------------ #

async def fetch_posts_from_links(
    links: Sequence[CandidateLink],
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> List[CanonicalPost]:
    """Retrieve and extract each Reddit link; failed links are skipped.

    Returns the placeholder record when no link could be processed.
    """
    reddit_links = filter_reddit_links(links)
    logger.info("Processing %d Reddit links", len(reddit_links))

    if not reddit_links:
        logger.warning("No Reddit links to process")
        return [no_posts_placeholder()]

    results: List[CanonicalPost] = []
    async with managed_client(client) as http:
        access_token = None
        credentials = get_reddit_oauth_credentials()
        if credentials is not None:
            access_token = await fetch_reddit_access_token(http, credentials)
            if access_token is None:
                logger.warning("Falling back to anonymous Reddit access")

        for index, link in enumerate(reddit_links):
            if index > 0:
                await random_delay(Pacing.BETWEEN_THREADS)

            logger.info("Fetching Reddit post %d/%d: %s", index + 1, len(reddit_links), link.url)
            try:
                payload = await fetch_thread_json_with_retry(
                    link.url, client=http, access_token=access_token
                )
            except RetrievalError as exc:
                logger.error("Failed to fetch Reddit post %s: %s", link.url, exc)
                continue

            post = extract_reddit_core(payload)
            results.append(post)
            logger.info("Processed Reddit post: %s", post.title)

    logger.info(
        "Processed %d out of %d Reddit posts", len(results), len(reddit_links)
    )
    if not results:
        logger.warning("No Reddit posts could be processed successfully")
        return [no_posts_placeholder()]
    return results


async def fetch_reddit_posts(
    query: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> List[CanonicalPost]:
    """Search Reddit for *query* and return canonical posts.

    Never raises.  Returns a "Configuration Error" placeholder when search
    credentials are missing, a "No posts found" placeholder when nothing
    usable came back, and an "Error" placeholder on unexpected failure.
    """
    timer = StepTimer("pipeline")
    logger.info("Starting Reddit search for query=%r", query)

    if not has_search_credentials():
        logger.error("Missing required environment variables for Google CSE")
        return [configuration_error_placeholder()]

    try:
        async with managed_client(client) as http:
            async with timer.async_step("discovery"):
                links = await search_reddit_links(query, client=http)
            logger.info("Google CSE returned %d results", len(links))

            async with timer.async_step("retrieval"):
                posts = await fetch_posts_from_links(links, client=http)
    except Exception as exc:
        logger.exception("Critical error in fetch_reddit_posts for query=%r", query)
        return [pipeline_error_placeholder(query, exc)]
    finally:
        timer.summary()

    logger.info("Final result: %d Reddit posts processed", len(posts))
    return posts
