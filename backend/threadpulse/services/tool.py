"""``redditSearch`` function tool for the chat orchestration layer.

The chat layer registers ``REDDIT_SEARCH_TOOL`` with the model and routes
tool calls to ``run_reddit_search_tool``.  The result is JSON-serialisable
and mirrors ``{"query": ..., "posts": [...]}``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Union

from .pipeline import fetch_reddit_posts

logger = logging.getLogger(__name__)

REDDIT_SEARCH_TOOL_NAME = "redditSearch"

REDDIT_SEARCH_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": REDDIT_SEARCH_TOOL_NAME,
        "description": "Gets reddit posts and comments for a given query",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The product to search for",
                },
            },
            "required": ["query"],
            "additionalProperties": False,
        },
    },
}


def _parse_arguments(arguments: Union[str, Dict[str, Any], None]) -> str:
    if isinstance(arguments, str):
        arguments = json.loads(arguments) if arguments.strip() else {}
    if not isinstance(arguments, dict):
        raise ValueError("Tool arguments must be a JSON object")
    query = arguments.get("query")
    if not isinstance(query, str) or not query.strip():
        raise ValueError("'query' must be a non-empty string")
    return query.strip()


async def run_reddit_search_tool(
    arguments: Union[str, Dict[str, Any], None],
) -> Dict[str, Any]:
    """Execute a ``redditSearch`` tool call.  Never raises."""
    try:
        query = _parse_arguments(arguments)
    except ValueError as exc:
        logger.warning("Rejected redditSearch arguments: %s", exc)
        return {"error": f"Invalid arguments: {exc}"}

    posts = await fetch_reddit_posts(query)
    return {
        "query": query,
        "posts": [post.model_dump(by_alias=True, exclude_none=True) for post in posts],
    }
