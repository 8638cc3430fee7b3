"""Content Extraction.

Turns the raw Reddit ``.json`` listing pair into a ``CanonicalPost``:

- listing[0] → the thread (first ``t3`` node, else the first node)
- listing[1] → top-level comments (``t1`` nodes), cleaned and ranked

Pure function: no I/O, never raises.  Malformed input degrades to empty
strings / empty lists.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from ..constants import KIND_COMMENT, KIND_POST, MAX_COMMENTS, REMOVED_COMMENT_MARKERS
from ..schemas.post_schema import CanonicalPost


def _children(listing: Any) -> List[Any]:
    """``listing.data.children`` or ``[]``."""
    if not isinstance(listing, dict):
        return []
    data = listing.get("data")
    if not isinstance(data, dict):
        return []
    children = data.get("children")
    return children if isinstance(children, list) else []


def _node_data(node: Any) -> Dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    data = node.get("data")
    return data if isinstance(data, dict) else {}


def _finite_number(value: Any) -> Optional[float]:
    # bool is an int subclass; a True score is not a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        # ints beyond float range survive json decoding
        return None
    return number if math.isfinite(number) else None


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _select_primary(children: List[Any]) -> Any:
    for child in children:
        if isinstance(child, dict) and child.get("kind") == KIND_POST:
            return child
    return children[0] if children else None


def is_removed_body(body: str) -> bool:
    """Empty, whitespace-only, ``[deleted]`` or ``[removed]`` (any case)."""
    stripped = body.strip()
    return not stripped or stripped.lower() in REMOVED_COMMENT_MARKERS


def rank_comments(comment_nodes: List[Any], limit: int = MAX_COMMENTS) -> List[str]:
    """Clean, sort by descending score and keep the top *limit* bodies."""
    cleaned: List[tuple[float, str]] = []
    for node in comment_nodes:
        data = _node_data(node)
        body = _as_text(data.get("body")).strip()
        if is_removed_body(body):
            continue
        score = _finite_number(data.get("score"))
        cleaned.append((score if score is not None else 0.0, body))

    cleaned.sort(key=lambda pair: pair[0], reverse=True)
    return [body for _, body in cleaned[:limit]]


def extract_reddit_core(payload: Any) -> CanonicalPost:
    """Extract ``{title, post, comments, createdAt}`` from a Reddit payload.

    Parameters
    ----------
    payload:
        The parsed thread JSON, usually ``[post_listing, comment_listing]``.

    Returns
    -------
    CanonicalPost
        ``createdAt`` is the thread's ``created_utc`` in epoch milliseconds
        when present and finite, else ``None``.
    """
    listings = payload if isinstance(payload, list) else []

    primary = _select_primary(_children(listings[0] if listings else None))
    post_data = _node_data(primary)

    created_utc = _finite_number(post_data.get("created_utc"))
    created_at = None
    if created_utc is not None and math.isfinite(created_utc * 1000):
        created_at = created_utc * 1000

    comment_nodes = [
        child
        for child in _children(listings[1] if len(listings) > 1 else None)
        if isinstance(child, dict) and child.get("kind") == KIND_COMMENT
    ]

    return CanonicalPost(
        title=_as_text(post_data.get("title")),
        post=_as_text(post_data.get("selftext")),
        comments=rank_comments(comment_nodes),
        created_at=created_at,
    )
