from .discovery import search_reddit_links
from .retrieval import fetch_thread_json, fetch_thread_json_with_retry
from .extraction import extract_reddit_core
from .sentiment import SentimentAnalyzer, compute_sentiment_series
from .pipeline import fetch_reddit_posts, is_placeholder
from .tool import REDDIT_SEARCH_TOOL, run_reddit_search_tool

__all__ = [
    "search_reddit_links",
    "fetch_thread_json",
    "fetch_thread_json_with_retry",
    "extract_reddit_core",
    "SentimentAnalyzer",
    "compute_sentiment_series",
    "fetch_reddit_posts",
    "is_placeholder",
    "REDDIT_SEARCH_TOOL",
    "run_reddit_search_tool",
]
