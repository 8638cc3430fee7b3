"""Reddit pipeline routes — the HTTP face of the two pipeline entry points.

Endpoints:
  POST /reddit/posts      — discover, fetch and extract threads for a query
  POST /reddit/sentiment  — score canonical posts for charting
  POST /reddit/analyze    — both of the above in one call
  GET  /reddit/health     — credential status
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..config import get_reddit_auth_mode, has_search_credentials
from ..schemas.post_schema import CanonicalPost, SentimentPoint
from ..services.pipeline import fetch_reddit_posts, is_placeholder
from ..services.sentiment import SentimentAnalyzer, compute_sentiment_series

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reddit",
    tags=["Reddit Pipeline"],
)


# ── Request / Response schemas ────────────────────────────────────────────

class SearchRequest(BaseModel):
    query: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Product name or free-text query",
    )


class PostsResponse(BaseModel):
    query: str
    posts: list[CanonicalPost]


class SentimentRequest(BaseModel):
    posts: list[CanonicalPost] = Field(default_factory=list)


class SentimentResponse(BaseModel):
    points: list[SentimentPoint]


class AnalyzeResponse(BaseModel):
    query: str
    posts: list[CanonicalPost]
    points: list[SentimentPoint] = Field(
        default_factory=list,
        description="Sentiment series for real posts only (placeholders excluded)",
    )


# ── Dependencies ──────────────────────────────────────────────────────────

def get_analyzer(request: Request) -> SentimentAnalyzer:
    """The analyzer created once at start-up."""
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        analyzer = SentimentAnalyzer()
        request.app.state.analyzer = analyzer
    return analyzer


# ── Routes ────────────────────────────────────────────────────────────────

@router.post(
    "/posts",
    response_model=PostsResponse,
    response_model_by_alias=True,
    summary="Fetch Reddit posts",
    response_description="Canonical posts, or a single placeholder when nothing was found",
)
async def search_posts(body: SearchRequest) -> PostsResponse:
    posts = await fetch_reddit_posts(body.query)
    return PostsResponse(query=body.query, posts=posts)


@router.post(
    "/sentiment",
    response_model=SentimentResponse,
    summary="Score posts",
    response_description="Sentiment points ordered by ascending timestamp",
)
def score_posts(
    body: SentimentRequest,
    analyzer: SentimentAnalyzer = Depends(get_analyzer),
) -> SentimentResponse:
    return SentimentResponse(points=compute_sentiment_series(body.posts, analyzer))


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_by_alias=True,
    summary="Fetch and score Reddit posts",
)
async def analyze(
    body: SearchRequest,
    analyzer: SentimentAnalyzer = Depends(get_analyzer),
) -> AnalyzeResponse:
    """Fetch posts for the query and score the real ones."""
    posts = await fetch_reddit_posts(body.query)
    real_posts = [post for post in posts if not is_placeholder(post)]
    logger.info("Analyze query=%r posts=%d real=%d", body.query, len(posts), len(real_posts))
    return AnalyzeResponse(
        query=body.query,
        posts=posts,
        points=compute_sentiment_series(real_posts, analyzer),
    )


@router.get(
    "/health",
    summary="Pipeline Health Check",
)
async def health_check():
    return {
        "status": "healthy",
        "service": "reddit-pipeline",
        "search_configured": has_search_credentials(),
        "reddit_auth_mode": get_reddit_auth_mode(),
    }
