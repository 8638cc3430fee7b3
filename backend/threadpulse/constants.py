"""Centralized constants shared across the discovery → sentiment pipeline.

This module is the SINGLE SOURCE OF TRUTH for the target content host,
result limits, client-identity pool, and placeholder text. Reused by:
  - Source discovery (Google Custom Search)
  - Content retrieval (Reddit .json endpoints)
  - Content extraction and the pipeline entry points
"""

from __future__ import annotations

# ── Target content host ─────────────────────────────────────────────────
# Candidate links are accepted when their host is this domain or a
# subdomain of it (after stripping a leading "www.").

TARGET_DOMAIN: str = "reddit.com"
SEARCH_SITE_FILTER: str = f"site:{TARGET_DOMAIN}"

# Reddit listing node kinds
KIND_POST: str = "t3"
KIND_COMMENT: str = "t1"

# ── Limits ──────────────────────────────────────────────────────────────
MAX_SEARCH_RESULTS: int = 5
MAX_COMMENTS: int = 5

# Comment bodies that mark moderator/user removal (compared lowercase)
REMOVED_COMMENT_MARKERS: frozenset[str] = frozenset({"[deleted]", "[removed]"})

# ── Client identity pool ────────────────────────────────────────────────
# One is picked at random per request unless OUTBOUND_USER_AGENT is set.

USER_AGENTS: list[str] = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}

# ── Placeholder records ─────────────────────────────────────────────────
# Returned by the pipeline instead of an empty list so the language model
# always receives at least one post.

NO_POSTS_FOUND: str = "No posts found"
CONFIGURATION_ERROR_TITLE: str = "Configuration Error"
PIPELINE_ERROR_TITLE: str = "Error"
